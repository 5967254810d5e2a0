"""Unit tests for installment and amortization math"""

import pytest
from datetime import date
from decimal import Decimal
from autocredit.domain.amortization import (
    calculate_installment_quote,
    calculate_monthly_installment,
    calculate_principal_for_payment,
    generate_amortization_schedule,
    monthly_rate_for,
)
from autocredit.domain.exceptions import InvalidCreditAmountError, InvalidInputError


def test_monthly_installment_known_values():
    """Textbook annuity payments"""
    assert calculate_monthly_installment(Decimal("10000"), Decimal("0.12"), 60) == Decimal("222.44")
    assert calculate_monthly_installment(Decimal("20000"), Decimal("0.06"), 60) == Decimal("386.66")


def test_monthly_installment_zero_rate_is_straight_line():
    assert calculate_monthly_installment(Decimal("12000"), Decimal("0"), 12) == Decimal("1000.00")


def test_monthly_installment_accepts_ints_and_strings():
    assert calculate_monthly_installment(10000, "0.12", 60) == Decimal("222.44")


def test_monthly_installment_rounded_to_cents():
    payment = calculate_monthly_installment(Decimal("45000000"), Decimal("0.1325"), 72)
    assert payment == payment.quantize(Decimal("0.01"))
    assert payment * 72 >= Decimal("45000000")


def test_monthly_rate_six_places():
    """0.13 / 12 = 0.0108333... -> 0.010833"""
    assert monthly_rate_for(Decimal("0.13")) == Decimal("0.010833")
    assert monthly_rate_for(Decimal("0.18")) == Decimal("0.015000")


@pytest.mark.parametrize(
    "amount,rate,term,error",
    [
        (Decimal("0"), Decimal("0.12"), 60, InvalidCreditAmountError),
        (Decimal("-100"), Decimal("0.12"), 60, InvalidCreditAmountError),
        (Decimal("10000"), Decimal("0.12"), 0, InvalidInputError),
        (Decimal("10000"), Decimal("-0.01"), 60, InvalidInputError),
        (Decimal("10000"), 0.12, 60, InvalidInputError),
    ],
)
def test_monthly_installment_invalid_input(amount, rate, term, error):
    with pytest.raises(error):
        calculate_monthly_installment(amount, rate, term)


def test_installment_quote_totals():
    quote = calculate_installment_quote(Decimal("10000"), Decimal("0.12"), 60)

    assert quote.monthly_installment == Decimal("222.44")
    assert quote.total_amount == Decimal("13346.40")
    assert quote.total_interest == Decimal("3346.40")
    assert quote.loan_amount == Decimal("10000.00")
    assert quote.term_months == 60


def test_principal_for_payment_inverts_installment():
    principal = calculate_principal_for_payment(Decimal("222.44"), Decimal("0.12"), 60)
    assert abs(principal - Decimal("10000")) <= Decimal("1.00")


def test_principal_for_payment_zero_rate():
    assert calculate_principal_for_payment(Decimal("1000"), Decimal("0"), 12) == Decimal("12000.00")


def test_schedule_retires_principal_exactly():
    """Principal parts sum to the loan amount; last balance is zero"""
    schedule = generate_amortization_schedule(Decimal("10000"), Decimal("0.12"), 12, start_date=date(2025, 1, 15))

    assert len(schedule) == 12
    assert sum(inst.principal for inst in schedule) == Decimal("10000.00")
    assert schedule[-1].remaining_balance == Decimal("0.00")
    assert [inst.number for inst in schedule] == list(range(1, 13))


def test_schedule_equal_payments_except_last():
    schedule = generate_amortization_schedule(Decimal("10000"), Decimal("0.12"), 12, start_date=date(2025, 1, 15))
    payment = calculate_monthly_installment(Decimal("10000"), Decimal("0.12"), 12)

    assert all(inst.payment == payment for inst in schedule[:-1])
    assert abs(schedule[-1].payment - payment) <= Decimal("0.05")


def test_schedule_first_period_interest():
    """Interest on the full balance at 1% per month"""
    schedule = generate_amortization_schedule(Decimal("10000"), Decimal("0.12"), 12, start_date=date(2025, 1, 15))

    assert schedule[0].interest == Decimal("100.00")
    assert schedule[0].principal == schedule[0].payment - Decimal("100.00")


def test_schedule_due_dates_monthly_clamped_to_month_end():
    schedule = generate_amortization_schedule(Decimal("3000"), Decimal("0.12"), 3, start_date=date(2025, 1, 31))

    assert [inst.due_date for inst in schedule] == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)]


def test_schedule_zero_rate():
    schedule = generate_amortization_schedule(Decimal("1200"), Decimal("0"), 12, start_date=date(2025, 1, 1))

    assert all(inst.interest == Decimal("0.00") for inst in schedule)
    assert all(inst.payment == Decimal("100.00") for inst in schedule)


SHRINKING_RATES = [Decimal("0.25"), Decimal("0.01"), Decimal("0.001"), Decimal("0.0001"), Decimal("0.00001")]


@pytest.mark.parametrize("amount", [Decimal("1000"), Decimal("10000"), Decimal("50000000")])
@pytest.mark.parametrize("term", [1, 12, 36, 60, 84])
def test_installment_tends_to_straight_line_as_rate_shrinks(amount, term):
    straight_line = amount / term
    payments = [calculate_monthly_installment(amount, rate, term) for rate in SHRINKING_RATES]
    gaps = [payment - straight_line for payment in payments]

    # Each payment is rounded to the cent, so n payments may fall n half-cents short
    assert all(payment * term >= amount - Decimal("0.005") * term for payment in payments)
    assert all(wider >= narrower for wider, narrower in zip(gaps, gaps[1:]))
    assert gaps[0] > gaps[-1]
    # 0.00001 / 12 rounds to a monthly rate of 0.000001
    assert abs(gaps[-1]) <= amount * Decimal("0.000001") + Decimal("0.01")
