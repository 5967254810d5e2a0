"""Risk scoring engine - core business logic for credit decisions"""

import logging
from datetime import date
from decimal import Decimal, localcontext
from typing import List, Optional, Sequence, Union

from autocredit.domain.amortization import calculate_monthly_installment
from autocredit.domain.models import (
    CreditApplication,
    CreditScore,
    Customer,
    RiskAssessment,
    RiskFactor,
    RiskLevel,
)
from autocredit.domain.money import (
    DECIMAL_CONTEXT,
    MONEY_PLACES,
    ZERO,
    clamp,
    format_percentage,
    quantize_rate,
    safe_ratio,
)
from autocredit.domain.policy import (
    DEFAULT_POLICY,
    CreditPolicy,
    RiskPolicy,
    lookup_adjustment,
    lookup_by_ratio,
    lookup_by_score,
)

logger = logging.getLogger(__name__)

CREDIT_SCORE = "CREDIT_SCORE"
PAYMENT_CAPACITY = "PAYMENT_CAPACITY"
VEHICLE_RISK = "VEHICLE_RISK"
DEBT_TO_INCOME = "DEBT_TO_INCOME"
EMPLOYMENT_STABILITY = "EMPLOYMENT_STABILITY"
CREDIT_HISTORY = "CREDIT_HISTORY"


def evaluate_credit_score(
    credit_score: Union[CreditScore, int], policy: RiskPolicy = DEFAULT_POLICY.risk
) -> RiskFactor:
    score = CreditScore.coerce(credit_score)
    band = lookup_by_score(policy.credit_score_bands, score.value)
    return RiskFactor(CREDIT_SCORE, band.level, band.points, band.label)


def evaluate_payment_capacity(
    application: CreditApplication, policy: RiskPolicy = DEFAULT_POLICY.risk
) -> RiskFactor:
    """
    Share of monthly income taken by the installment on the requested amount.

    The installment is estimated at a fixed reference rate and term (18%, 60 months)
    since the final rate is not known yet.
    """
    installment = calculate_monthly_installment(
        application.requested_amount,
        policy.payment_reference_rate,
        policy.payment_reference_term_months,
    )
    ratio = safe_ratio(installment, application.customer.monthly_income, "Monthly income")
    band = lookup_by_ratio(policy.payment_capacity_bands, ratio)

    return RiskFactor(
        PAYMENT_CAPACITY,
        band.level,
        band.points,
        f"{band.label} ({format_percentage(ratio)} of income)",
    )


def evaluate_vehicle_risk(
    application: CreditApplication, policy: RiskPolicy = DEFAULT_POLICY.risk, as_of: Optional[date] = None
) -> RiskFactor:
    """
    Collateral quality: base score adjusted by age, mileage and loan-to-value.

    Score is clamped to [0, 100]; level follows the final score
    (>= 80 LOW, >= 60 MEDIUM, else HIGH).
    """
    vehicle = application.vehicle
    ltv = application.loan_to_value_ratio()

    adjustments = [
        lookup_adjustment(policy.vehicle_age_adjustments, vehicle.age(as_of)),
        lookup_adjustment(policy.vehicle_mileage_adjustments, vehicle.kilometers),
        lookup_adjustment(policy.vehicle_ltv_adjustments, ltv),
    ]

    score = policy.vehicle_base_score + sum(adj.points for adj in adjustments)
    score = max(0, min(score, 100))

    if score >= policy.vehicle_low_risk_min_score:
        level = RiskLevel.LOW
    elif score >= policy.vehicle_medium_risk_min_score:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.HIGH

    return RiskFactor(VEHICLE_RISK, level, score, " ".join(adj.label for adj in adjustments))


def evaluate_debt_to_income(customer: Customer, policy: RiskPolicy = DEFAULT_POLICY.risk) -> RiskFactor:
    # Reported debts are not bureau-verified yet; scored as zero unless the policy opts in
    debts = customer.current_monthly_debts if policy.use_reported_debts else ZERO
    ratio = safe_ratio(debts, customer.monthly_income, "Monthly income")
    band = lookup_by_ratio(policy.debt_to_income_bands, ratio)

    detail = f"{band.label} ({format_percentage(ratio)})"
    if not policy.use_reported_debts:
        detail += "; current debts pending bureau verification"

    return RiskFactor(DEBT_TO_INCOME, band.level, band.points, detail)


def evaluate_employment_stability(customer: Customer, policy: RiskPolicy = DEFAULT_POLICY.risk) -> RiskFactor:
    """Not yet evaluated: needs employment verification documents."""
    return RiskFactor(
        EMPLOYMENT_STABILITY,
        policy.placeholder_level,
        policy.placeholder_score,
        "Not yet evaluated: employment stability pending documentary verification",
        evaluated=False,
    )


def evaluate_credit_history(customer: Customer, policy: RiskPolicy = DEFAULT_POLICY.risk) -> RiskFactor:
    """Not yet evaluated: needs a credit bureau history report."""
    return RiskFactor(
        CREDIT_HISTORY,
        policy.placeholder_level,
        policy.placeholder_score,
        "Not yet evaluated: credit history pending credit bureau report",
        evaluated=False,
    )


def finalize_assessment(
    factors: Sequence[RiskFactor], policy: RiskPolicy = DEFAULT_POLICY.risk
) -> RiskAssessment:
    """
    Aggregate risk factors into an overall score, level and approval.

    - Overall score: arithmetic mean of factor scores, 2 places half-up
    - >= 75 LOW (approved), >= 60 MEDIUM (approved), else HIGH (declined)
    - Two or more HIGH factors force HIGH and decline, whatever the mean
    - No factors: score 0, HIGH, declined
    """
    factors = tuple(factors)
    if not factors:
        return RiskAssessment(factors=(), risk_score=Decimal("0.00"), overall_level=RiskLevel.HIGH, approved=False)

    with localcontext(DECIMAL_CONTEXT):
        total = sum((Decimal(f.score) for f in factors), ZERO)
        risk_score = (total / len(factors)).quantize(MONEY_PLACES)

    if risk_score >= policy.low_risk_min_score:
        level, approved = RiskLevel.LOW, True
    elif risk_score >= policy.medium_risk_min_score:
        level, approved = RiskLevel.MEDIUM, True
    else:
        level, approved = RiskLevel.HIGH, False

    high_count = sum(1 for f in factors if f.level is RiskLevel.HIGH)
    if high_count >= policy.high_factor_override_count:
        level, approved = RiskLevel.HIGH, False

    return RiskAssessment(factors=factors, risk_score=risk_score, overall_level=level, approved=approved)


def build_risk_factors(
    application: CreditApplication,
    credit_score: Union[CreditScore, int],
    policy: RiskPolicy = DEFAULT_POLICY.risk,
    as_of: Optional[date] = None,
) -> List[RiskFactor]:
    """All six factors, in reporting order"""
    customer = application.customer
    return [
        evaluate_credit_score(credit_score, policy),
        evaluate_payment_capacity(application, policy),
        evaluate_vehicle_risk(application, policy, as_of),
        evaluate_debt_to_income(customer, policy),
        evaluate_employment_stability(customer, policy),
        evaluate_credit_history(customer, policy),
    ]


def assess_risk(
    application: CreditApplication,
    credit_score: Union[CreditScore, int],
    policy: CreditPolicy = DEFAULT_POLICY,
    as_of: Optional[date] = None,
) -> RiskAssessment:
    """
    Main entry point: score every risk factor and aggregate them.

    Returns the finalized RiskAssessment with overall score, level and approval.
    """
    score = CreditScore.coerce(credit_score)
    factors = build_risk_factors(application, score, policy.risk, as_of)
    assessment = finalize_assessment(factors, policy.risk)

    logger.info(
        "Risk assessed",
        extra={
            "application_id": application.id,
            "risk_score": str(assessment.risk_score),
            "risk_level": assessment.overall_level.value,
            "risk_approved": assessment.approved,
        },
    )
    return assessment


def recommended_rate_from_risk(
    assessment: RiskAssessment,
    credit_score: Union[CreditScore, int],
    policy: CreditPolicy = DEFAULT_POLICY,
) -> Decimal:
    """
    Rate suggested by the overall risk level.

    Base rate by score (750+: 12%, 700+: 14%, 650+: 16%, 600+: 18%, else 22%),
    plus LOW -1% / MEDIUM 0 / HIGH +2%, clamped to [12%, 25%], 4 places.
    """
    rules = policy.recommended_rate
    score = CreditScore.coerce(credit_score)

    base_rate = lookup_by_score(rules.base_rates, score.value).rate
    adjustment = rules.adjustment_for(assessment.overall_level)

    return quantize_rate(clamp(base_rate + adjustment, rules.min_rate, rules.max_rate))
