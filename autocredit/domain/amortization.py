"""Fixed-rate loan amortization math"""

import logging
from datetime import date
from decimal import Decimal, localcontext
from typing import List, Optional

from autocredit.domain.exceptions import InvalidInputError
from autocredit.domain.models import Installment, InstallmentQuote
from autocredit.domain.money import (
    DECIMAL_CONTEXT,
    MONTHLY_RATE_PLACES,
    ONE,
    ZERO,
    Number,
    positive_amount,
    quantize_money,
    to_decimal,
)
from autocredit.utils.date_utils import add_months, generate_monthly_dates

logger = logging.getLogger(__name__)


def _validate_term(term_months: int) -> int:
    if isinstance(term_months, bool) or not isinstance(term_months, int):
        raise InvalidInputError("Term must be a whole number of months")
    if term_months <= 0:
        raise InvalidInputError("Term must be greater than 0 months")
    return term_months


def _validate_rate(annual_rate: Number) -> Decimal:
    rate = to_decimal(annual_rate, "Annual interest rate")
    if rate < ZERO:
        raise InvalidInputError("Annual interest rate cannot be negative")
    return rate


def monthly_rate_for(annual_rate: Decimal) -> Decimal:
    """annual_rate / 12 at 6 decimal places (ROUND_HALF_UP)"""
    with localcontext(DECIMAL_CONTEXT):
        return (annual_rate / 12).quantize(MONTHLY_RATE_PLACES)


def calculate_monthly_installment(amount: Number, annual_rate: Number, term_months: int) -> Decimal:
    """
    Fixed monthly payment for a fully amortizing loan.

        r = annual_rate / 12
        payment = P * r * (1 + r)^n / ((1 + r)^n - 1)

    A monthly rate of exactly zero falls back to straight-line P / n.

    Args:
        amount: Principal (> 0)
        annual_rate: Nominal annual rate as a fraction, e.g. Decimal("0.18") (>= 0)
        term_months: Number of monthly payments (> 0)

    Returns:
        Installment rounded half-up to cents

    Raises:
        InvalidInputError: amount <= 0, term <= 0 or negative rate
    """
    principal = positive_amount(amount, "Loan amount")
    term = _validate_term(term_months)
    rate = _validate_rate(annual_rate)

    monthly_rate = monthly_rate_for(rate)

    with localcontext(DECIMAL_CONTEXT):
        if monthly_rate == ZERO:
            payment = principal / term
        else:
            growth = (ONE + monthly_rate) ** term
            payment = principal * monthly_rate * growth / (growth - ONE)
        payment = quantize_money(payment)

    logger.debug(
        "Monthly installment calculated",
        extra={"amount": str(principal), "annual_rate": str(rate), "term_months": term, "installment": str(payment)},
    )
    return payment


def calculate_installment_quote(amount: Number, annual_rate: Number, term_months: int) -> InstallmentQuote:
    """Installment plus total paid and total interest over the term"""
    principal = positive_amount(amount, "Loan amount")
    rate = _validate_rate(annual_rate)
    installment = calculate_monthly_installment(principal, rate, term_months)
    total_amount = quantize_money(installment * term_months)

    return InstallmentQuote(
        loan_amount=quantize_money(principal),
        annual_rate=rate,
        term_months=term_months,
        monthly_installment=installment,
        total_amount=total_amount,
        total_interest=quantize_money(total_amount - principal),
    )


def calculate_principal_for_payment(monthly_payment: Number, annual_rate: Number, term_months: int) -> Decimal:
    """
    Inverse of the annuity formula: largest principal a fixed payment can service.

        P = payment * ((1 + r)^n - 1) / (r * (1 + r)^n)
    """
    payment = to_decimal(monthly_payment, "Monthly payment")
    if payment < ZERO:
        raise InvalidInputError("Monthly payment cannot be negative")
    term = _validate_term(term_months)
    monthly_rate = monthly_rate_for(_validate_rate(annual_rate))

    with localcontext(DECIMAL_CONTEXT):
        if monthly_rate == ZERO:
            principal = payment * term
        else:
            growth = (ONE + monthly_rate) ** term
            principal = payment * (growth - ONE) / (monthly_rate * growth)
        return quantize_money(principal)


def generate_amortization_schedule(
    amount: Number,
    annual_rate: Number,
    term_months: int,
    start_date: Optional[date] = None,
) -> List[Installment]:
    """
    Month-by-month repayment schedule for a fixed installment.

    Requirements:
    - Equal payments (calculate_monthly_installment) every month
    - Interest per period = remaining balance * monthly rate, rounded to cents
    - Last installment absorbs rounding remainder so principal sums to the loan amount

    Args:
        amount: Principal (> 0)
        annual_rate: Nominal annual rate
        term_months: Number of payments
        start_date: First due date (default: one month from today)

    Returns:
        List of Installment with due date, payment, interest, principal and balance
    """
    principal = quantize_money(positive_amount(amount, "Loan amount"))
    rate = _validate_rate(annual_rate)
    payment = calculate_monthly_installment(principal, rate, term_months)
    monthly_rate = monthly_rate_for(rate)

    if start_date is None:
        start_date = add_months(date.today(), 1)

    due_dates = generate_monthly_dates(start_date, term_months)
    schedule = []
    balance = principal
    for i, due_date in enumerate(due_dates):
        with localcontext(DECIMAL_CONTEXT):
            interest = quantize_money(balance * monthly_rate)

        if i == term_months - 1:
            # Last installment absorbs remainder to retire the exact balance
            principal_part = balance
            period_payment = balance + interest
        else:
            principal_part = min(payment - interest, balance)
            period_payment = principal_part + interest

        balance = balance - principal_part
        schedule.append(
            Installment(
                number=i + 1,
                due_date=due_date,
                payment=period_payment,
                interest=interest,
                principal=principal_part,
                remaining_balance=balance,
            )
        )

    return schedule
