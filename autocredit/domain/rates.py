"""Interest rate derivation from the application profile"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Union

from autocredit.domain.exceptions import InvalidInputError
from autocredit.domain.models import CreditApplication, CreditScore, InterestRateQuote
from autocredit.domain.money import ZERO, clamp, format_percentage, quantize_rate
from autocredit.domain.policy import DEFAULT_POLICY, CreditPolicy, InterestRatePolicy, lookup_by_score

logger = logging.getLogger(__name__)


def base_rate_for_score(
    credit_score: Union[CreditScore, int], policy: InterestRatePolicy = DEFAULT_POLICY.interest_rate
) -> Decimal:
    """Rate looked up purely from the credit score, before adjustments"""
    score = CreditScore.coerce(credit_score)
    return lookup_by_score(policy.base_rates, score.value).rate


def _adjustments(
    application: CreditApplication,
    term_months: int,
    policy: InterestRatePolicy,
    as_of: Optional[date],
) -> Dict[str, Decimal]:
    customer = application.customer
    vehicle = application.vehicle
    adjustments: Dict[str, Decimal] = {}

    if customer.work_experience_months > policy.experienced_worker_months:
        adjustments["WORK_EXPERIENCE"] = policy.experience_discount
    if customer.monthly_income > policy.high_income_threshold:
        adjustments["HIGH_INCOME"] = policy.high_income_discount

    if vehicle.is_new(as_of):
        adjustments["NEW_VEHICLE"] = policy.new_vehicle_discount
    elif vehicle.is_used(as_of):
        adjustments["USED_VEHICLE"] = policy.used_vehicle_surcharge

    if application.loan_to_value_ratio() > policy.high_financing_ratio:
        adjustments["HIGH_FINANCING_RATIO"] = policy.high_financing_surcharge

    if term_months > policy.standard_term_months:
        adjustments["LONG_TERM"] = policy.long_term_surcharge

    return adjustments


def quote_interest_rate(
    application: CreditApplication,
    credit_score: Union[CreditScore, int],
    term_months: Optional[int] = None,
    policy: CreditPolicy = DEFAULT_POLICY,
    as_of: Optional[date] = None,
) -> InterestRateQuote:
    """
    Derive the annual rate for an application, with its breakdown.

    1. Base rate by credit score (800+: 11.25% ... <600: 21%)
    2. Add every applicable adjustment (they are independent and commutative):
       - work experience > 36 months: -0.5%
       - monthly income > 5,000,000: -0.5%
       - new vehicle: -1% / used vehicle: +1%
       - financing ratio (requested / vehicle value) > 80%: +0.5%
       - term longer than 60 months: +0.5%
    3. Clamp to [10%, 25%], 4 places

    Raises:
        InvalidInputError: bad score or term, zero vehicle value
    """
    rules = policy.interest_rate
    term = policy.default_term_months if term_months is None else term_months
    if isinstance(term, bool) or not isinstance(term, int) or term <= 0:
        raise InvalidInputError("Term must be greater than 0 months")

    score = CreditScore.coerce(credit_score)
    base_rate = base_rate_for_score(score, rules)
    adjustments = _adjustments(application, term, rules, as_of)

    final_rate = quantize_rate(
        clamp(base_rate + sum(adjustments.values(), ZERO), rules.min_rate, rules.max_rate)
    )

    details: List[str] = [f"Base rate for score {score.value}: {format_percentage(base_rate)}"]
    for name, value in adjustments.items():
        sign = "+" if value > ZERO else ""
        details.append(f"Adjustment {name.lower()}: {sign}{format_percentage(value)}")
    details.append(f"Final rate: {format_percentage(final_rate)}")

    logger.info(
        "Interest rate calculated",
        extra={
            "application_id": application.id,
            "credit_score": score.value,
            "term_months": term,
            "base_rate": str(base_rate),
            "final_rate": str(final_rate),
        },
    )

    return InterestRateQuote(
        base_rate=base_rate,
        adjustments=adjustments,
        final_rate=final_rate,
        details=tuple(details),
    )


def calculate_interest_rate(
    application: CreditApplication,
    credit_score: Union[CreditScore, int],
    term_months: Optional[int] = None,
    policy: CreditPolicy = DEFAULT_POLICY,
    as_of: Optional[date] = None,
) -> Decimal:
    """Final bounded annual rate for the application (see quote_interest_rate)"""
    return quote_interest_rate(application, credit_score, term_months, policy, as_of).final_rate
