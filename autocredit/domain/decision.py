"""Decision pipeline: eligibility -> risk -> rate -> installment"""

import logging
from datetime import date
from typing import Optional, Union

from autocredit.domain.amortization import calculate_installment_quote
from autocredit.domain.eligibility import calculate_max_eligible_amount, check_eligibility
from autocredit.domain.models import CreditApplication, CreditDecision, CreditScore, CreditStatus
from autocredit.domain.policy import DEFAULT_POLICY, CreditPolicy
from autocredit.domain.rates import calculate_interest_rate
from autocredit.domain.scoring import assess_risk, recommended_rate_from_risk

logger = logging.getLogger(__name__)


def make_credit_decision(
    application: CreditApplication,
    credit_score: Union[CreditScore, int],
    term_months: Optional[int] = None,
    policy: CreditPolicy = DEFAULT_POLICY,
    as_of: Optional[date] = None,
) -> CreditDecision:
    """
    Main entry point: run the full pipeline for one application.

    Flow:
    1. Eligibility gate (reject with the failed checks as reasons)
    2. Risk assessment (reject when the assessment declines)
    3. Minimum approval score (reject below it)
    4. Approve min(requested, max eligible) at the profile rate and quote the installment

    Returns complete CreditDecision; the application inside carries the new status.
    """
    score = CreditScore.coerce(credit_score)
    term = policy.default_term_months if term_months is None else term_months

    eligibility = check_eligibility(application, policy, as_of)
    if not eligibility.eligible:
        reasons = tuple(f"{check.name}: {check.detail}" for check in eligibility.failed_checks)
        logger.info(
            "Application rejected by eligibility rules",
            extra={"application_id": application.id, "failed_checks": [c.name for c in eligibility.failed_checks]},
        )
        return CreditDecision(
            application=application.reject("Does not meet eligibility criteria", credit_score=score),
            status=CreditStatus.REJECTED,
            credit_score=score,
            eligibility=eligibility,
            term_months=term,
            reasons=reasons,
        )

    assessment = assess_risk(application, score, policy, as_of)
    recommended_rate = recommended_rate_from_risk(assessment, score, policy)

    rejection = None
    if not assessment.approved:
        high = ", ".join(f.category for f in assessment.high_risk_factors) or "none"
        rejection = f"Risk assessment declined: score {assessment.risk_score}, level {assessment.overall_level.value}, high-risk factors: {high}"
    elif score.value < policy.min_approval_score:
        rejection = f"Insufficient credit score: {score.value} (minimum required: {policy.min_approval_score})"

    if rejection is not None:
        logger.info("Application rejected", extra={"application_id": application.id, "reason": rejection})
        return CreditDecision(
            application=application.reject(rejection, credit_score=score),
            status=CreditStatus.REJECTED,
            credit_score=score,
            eligibility=eligibility,
            term_months=term,
            assessment=assessment,
            recommended_rate=recommended_rate,
            reasons=(rejection,),
        )

    max_eligible = calculate_max_eligible_amount(application.customer, application.vehicle, policy)
    approved_amount = min(application.requested_amount, max_eligible)
    interest_rate = calculate_interest_rate(application, score, term, policy, as_of)
    installment = calculate_installment_quote(approved_amount, interest_rate, term)

    reasons = ()
    if approved_amount < application.requested_amount:
        reasons = (f"Approved amount limited to maximum eligible amount {max_eligible}",)

    logger.info(
        "Application approved",
        extra={
            "application_id": application.id,
            "approved_amount": str(approved_amount),
            "interest_rate": str(interest_rate),
        },
    )

    return CreditDecision(
        application=application.approve(score, policy.min_approval_score),
        status=CreditStatus.APPROVED,
        credit_score=score,
        eligibility=eligibility,
        term_months=term,
        assessment=assessment,
        approved_amount=approved_amount,
        max_eligible_amount=max_eligible,
        interest_rate=interest_rate,
        recommended_rate=recommended_rate,
        installment=installment,
        reasons=reasons,
    )
