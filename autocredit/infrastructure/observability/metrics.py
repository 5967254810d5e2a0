"""Prometheus metrics for monitoring decision outcomes, rates and bureau availability"""

from prometheus_client import Counter, Histogram

from autocredit.domain.models import CreditDecision

# Decision metrics
decision_counter = Counter(
    "autocredit_decision_total",
    "Total credit decisions made",
    ["status"],  # APPROVED | REJECTED
)

risk_level_counter = Counter(
    "autocredit_risk_level_total",
    "Risk assessments by overall level",
    ["level"],  # LOW | MEDIUM | HIGH
)

interest_rate_histogram = Histogram(
    "autocredit_interest_rate",
    "Annual interest rate quoted on approved applications",
    buckets=[0.10, 0.12, 0.14, 0.16, 0.18, 0.20, 0.22, 0.25],
)

# Credit bureau metrics
bureau_fetch_failures_counter = Counter(
    "credit_bureau_fetch_failures_total",
    "Failed credit bureau calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(decision: CreditDecision) -> None:
    """Record decision metrics for monitoring approval rates and pricing"""
    decision_counter.labels(status=decision.status.value).inc()

    if decision.assessment is not None:
        risk_level_counter.labels(level=decision.assessment.overall_level.value).inc()

    if decision.interest_rate is not None:
        interest_rate_histogram.observe(float(decision.interest_rate))
