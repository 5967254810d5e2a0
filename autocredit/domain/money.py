"""Decimal helpers for money, rates and ratios.

Floats never enter the engine: every amount and rate is a ``Decimal`` and every
rounding step is ROUND_HALF_UP at a fixed scale.

Scales:
- money: 2 decimal places
- monthly rate (intermediate division): 6 decimal places
- annual rate / ratios: 4 decimal places
"""

from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

from autocredit.domain.exceptions import InvalidCreditAmountError, InvalidInputError

MONEY_PLACES = Decimal("0.01")
MONTHLY_RATE_PLACES = Decimal("0.000001")
RATE_PLACES = Decimal("0.0001")
RATIO_PLACES = Decimal("0.0001")

# Enough digits to raise (1 + r) to 84+ periods without losing cents
DECIMAL_CONTEXT = Context(prec=34, rounding=ROUND_HALF_UP)

ZERO = Decimal("0")
ONE = Decimal("1")

Number = Union[Decimal, int, str]


def to_decimal(value: Number, field: str = "amount") -> Decimal:
    """Convert ints and numeric strings to Decimal; floats and None are rejected."""
    if value is None:
        raise InvalidInputError(f"{field} is required")
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidInputError(f"{field} must be a Decimal, int or numeric string, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise InvalidInputError(f"{field} is not a valid number: {value!r}") from e
    if not result.is_finite():
        raise InvalidInputError(f"{field} must be finite")
    return result


def positive_amount(value: Number, field: str = "amount") -> Decimal:
    amount = to_decimal(value, field)
    if amount <= ZERO:
        raise InvalidCreditAmountError(f"{field} must be greater than zero")
    return amount


def money_amount(value: Number, field: str = "amount") -> Decimal:
    """Positive amount expressed in whole cents: 80000000 and 1.50 pass, 0.001 does not"""
    amount = positive_amount(value, field)
    if amount != quantize_money(amount):
        raise InvalidCreditAmountError(f"{field} cannot have more than 2 decimal places")
    return amount


def non_negative_amount(value: Number, field: str = "amount") -> Decimal:
    amount = to_decimal(value, field)
    if amount < ZERO:
        raise InvalidCreditAmountError(f"{field} cannot be negative")
    return amount


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def quantize_rate(value: Decimal) -> Decimal:
    return value.quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def quantize_ratio(value: Decimal) -> Decimal:
    return value.quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: Decimal, denominator: Decimal, field: str = "denominator") -> Decimal:
    """numerator / denominator at 4 decimal places.

    Raises:
        InvalidInputError: denominator is zero or negative
    """
    if denominator <= ZERO:
        raise InvalidInputError(f"{field} must be greater than zero to compute a ratio")
    with localcontext(DECIMAL_CONTEXT):
        return quantize_ratio(numerator / denominator)


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


def format_percentage(rate: Decimal) -> str:
    """0.1325 -> '13.25%'"""
    return f"{quantize_money(rate * 100)}%"
