"""Hard eligibility rules applied before risk scoring.

Rule failures are ordinary results (False / failed check), never exceptions.
Only malformed input raises InvalidInputError.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from autocredit.domain.amortization import calculate_principal_for_payment
from autocredit.domain.models import (
    CreditApplication,
    Customer,
    EligibilityCheck,
    EligibilityResult,
    Vehicle,
)
from autocredit.domain.money import format_percentage, quantize_money
from autocredit.domain.policy import DEFAULT_POLICY, CreditPolicy, EligibilityPolicy
from autocredit.utils.date_utils import current_year

logger = logging.getLogger(__name__)


def has_minimum_income(customer: Customer, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility) -> bool:
    return customer.monthly_income >= policy.min_monthly_income


def has_acceptable_credit_history(
    customer: Customer, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility
) -> bool:
    """Placeholder: until a bureau history check exists this reuses the debt-ratio flag."""
    return customer.has_acceptable_debt_ratio(policy.max_debt_to_income)


def vehicle_within_age_limit(
    vehicle: Vehicle, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility, as_of: Optional[date] = None
) -> bool:
    return vehicle.year >= current_year(as_of) - policy.max_vehicle_age_years


def vehicle_within_mileage_limit(vehicle: Vehicle, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility) -> bool:
    return vehicle.kilometers <= policy.max_vehicle_kilometers


def is_authorized_brand(vehicle: Vehicle, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility) -> bool:
    return vehicle.brand.upper() in policy.authorized_brands


def vehicle_qualifies_for_credit(
    vehicle: Vehicle, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility, as_of: Optional[date] = None
) -> bool:
    return (
        vehicle_within_age_limit(vehicle, policy, as_of)
        and vehicle_within_mileage_limit(vehicle, policy)
        and is_authorized_brand(vehicle, policy)
    )


def debt_to_income_ratio_acceptable(
    customer: Customer, policy: EligibilityPolicy = DEFAULT_POLICY.eligibility
) -> bool:
    """debts / income, rounded half-up to 4 places, must not exceed the ceiling"""
    return customer.debt_to_income_ratio() <= policy.max_debt_to_income


def check_vehicle_eligibility(
    vehicle: Vehicle, policy: CreditPolicy = DEFAULT_POLICY, as_of: Optional[date] = None
) -> EligibilityResult:
    """Age, mileage and brand checks with a detail line each"""
    rules = policy.eligibility
    min_year = current_year(as_of) - rules.max_vehicle_age_years

    return EligibilityResult(
        checks=(
            EligibilityCheck(
                name="VEHICLE_AGE",
                passed=vehicle_within_age_limit(vehicle, rules, as_of),
                detail=f"Vehicle year {vehicle.year} (minimum {min_year})",
            ),
            EligibilityCheck(
                name="VEHICLE_MILEAGE",
                passed=vehicle_within_mileage_limit(vehicle, rules),
                detail=f"{vehicle.kilometers:,} km (maximum {rules.max_vehicle_kilometers:,} km)",
            ),
            EligibilityCheck(
                name="VEHICLE_BRAND",
                passed=is_authorized_brand(vehicle, rules),
                detail=f"Brand {vehicle.brand} {'is' if is_authorized_brand(vehicle, rules) else 'is not'} authorized",
            ),
        )
    )


def check_eligibility(
    application: CreditApplication, policy: CreditPolicy = DEFAULT_POLICY, as_of: Optional[date] = None
) -> EligibilityResult:
    """
    Evaluate every eligibility rule and report each outcome.

    Rules (all must pass):
    - MINIMUM_INCOME: monthly income >= policy floor
    - CREDIT_HISTORY: placeholder, delegated to the customer's debt-ratio flag
    - VEHICLE: age, mileage and brand limits
    - DEBT_TO_INCOME: current debts / income <= policy ceiling
    """
    rules = policy.eligibility
    customer = application.customer
    vehicle = application.vehicle
    dti = customer.debt_to_income_ratio()

    vehicle_result = check_vehicle_eligibility(vehicle, policy, as_of)
    vehicle_detail = "; ".join(check.detail for check in vehicle_result.checks)

    result = EligibilityResult(
        checks=(
            EligibilityCheck(
                name="MINIMUM_INCOME",
                passed=has_minimum_income(customer, rules),
                detail=f"Monthly income {quantize_money(customer.monthly_income)} (minimum {rules.min_monthly_income})",
            ),
            EligibilityCheck(
                name="CREDIT_HISTORY",
                passed=has_acceptable_credit_history(customer, rules),
                detail="Credit history pending bureau verification; debt ratio used instead",
            ),
            EligibilityCheck(
                name="VEHICLE",
                passed=vehicle_result.eligible,
                detail=vehicle_detail,
            ),
            EligibilityCheck(
                name="DEBT_TO_INCOME",
                passed=debt_to_income_ratio_acceptable(customer, rules),
                detail=f"Debt-to-income {format_percentage(dti)} (maximum {format_percentage(rules.max_debt_to_income)})",
            ),
        )
    )

    logger.debug(
        "Eligibility evaluated",
        extra={
            "application_id": application.id,
            "eligible": result.eligible,
            "failed_checks": [check.name for check in result.failed_checks],
        },
    )
    return result


def evaluate_eligibility(
    application: CreditApplication, policy: CreditPolicy = DEFAULT_POLICY, as_of: Optional[date] = None
) -> bool:
    """True when the application passes every hard business rule"""
    rules = policy.eligibility
    return (
        has_minimum_income(application.customer, rules)
        and has_acceptable_credit_history(application.customer, rules)
        and vehicle_qualifies_for_credit(application.vehicle, rules, as_of)
        and debt_to_income_ratio_acceptable(application.customer, rules)
    )


def calculate_max_eligible_amount(
    customer: Customer, vehicle: Vehicle, policy: CreditPolicy = DEFAULT_POLICY
) -> Decimal:
    """
    Upper bound on the principal a customer can service.

    1. Max monthly payment = income * 30%
    2. Invert the annuity formula at the reference rate/term (12%, 60 months)
    3. Cap at 90% of the vehicle value

    A policy approximation: the underwritten amount also depends on the
    risk-adjusted rate.
    """
    rules = policy.eligibility
    max_monthly_payment = customer.monthly_income * rules.max_payment_to_income

    max_by_income = calculate_principal_for_payment(
        max_monthly_payment,
        rules.reference_annual_rate,
        rules.reference_term_months,
    )
    max_by_vehicle = vehicle.max_credit_amount(rules.max_loan_to_value)

    return min(max_by_income, max_by_vehicle)
