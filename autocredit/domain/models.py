"""Domain models - immutable dataclasses representing business entities.

Constructors validate their fields and raise InvalidInputError on bad input;
nothing in the engine mutates these objects after they are built.
"""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple, Union

from autocredit.domain.exceptions import (
    InvalidApplicationStateError,
    InvalidInputError,
)
from autocredit.domain.money import (
    ZERO,
    money_amount,
    non_negative_amount,
    positive_amount,
    quantize_money,
    safe_ratio,
)
from autocredit.utils.date_utils import current_year, years_between

DOCUMENT_PATTERNS = (
    re.compile(r"^[0-9]{8,10}$"),  # cedula
    re.compile(r"^[A-Z]{2}[0-9]{6,8}$"),  # passport
)
VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")
MIN_VEHICLE_YEAR = 1990
MIN_CUSTOMER_AGE = 18


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class CreditStatus(str, Enum):
    """Lifecycle of a credit application"""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_final(self) -> bool:
        return self is not CreditStatus.PENDING

    @property
    def is_active(self) -> bool:
        return self in (CreditStatus.PENDING, CreditStatus.APPROVED)


class VehicleType(str, Enum):
    SEDAN = "SEDAN"
    HATCHBACK = "HATCHBACK"
    SUV = "SUV"
    PICKUP = "PICKUP"
    COUPE = "COUPE"
    CONVERTIBLE = "CONVERTIBLE"
    WAGON = "WAGON"


def _required_text(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{field_name} is required")
    return str(value).strip()


@dataclass(frozen=True)
class CreditScore:
    """Bureau credit score, produced outside the engine"""

    value: int

    MIN_SCORE = 300
    MAX_SCORE = 900

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidInputError(f"Credit score must be an integer, got {self.value!r}")
        if not self.MIN_SCORE <= self.value <= self.MAX_SCORE:
            raise InvalidInputError(
                f"Credit score must be between {self.MIN_SCORE} and {self.MAX_SCORE}, got {self.value}"
            )

    @classmethod
    def coerce(cls, score: Union["CreditScore", int]) -> "CreditScore":
        if isinstance(score, CreditScore):
            return score
        if score is None:
            raise InvalidInputError("Credit score is required")
        return cls(score)

    @property
    def category(self) -> str:
        if self.value >= 750:
            return "EXCELLENT"
        if self.value >= 700:
            return "VERY_GOOD"
        if self.value >= 650:
            return "GOOD"
        if self.value >= 600:
            return "FAIR"
        return "POOR"


@dataclass(frozen=True)
class Customer:
    """Applicant profile, already verified upstream"""

    document_number: str
    first_name: str
    last_name: str
    birth_date: date
    monthly_income: Decimal
    current_monthly_debts: Decimal = ZERO
    work_experience_months: int = 0
    email: Optional[str] = None
    occupation: Optional[str] = None

    def __post_init__(self) -> None:
        document = _required_text(self.document_number, "Document number").upper()
        if not any(pattern.match(document) for pattern in DOCUMENT_PATTERNS):
            raise InvalidInputError(f"Invalid document number format: {self.document_number}")
        object.__setattr__(self, "document_number", document)
        object.__setattr__(self, "first_name", _required_text(self.first_name, "First name"))
        object.__setattr__(self, "last_name", _required_text(self.last_name, "Last name"))

        if not isinstance(self.birth_date, date):
            raise InvalidInputError("Birth date is required")
        if years_between(self.birth_date, date.today()) < MIN_CUSTOMER_AGE:
            raise InvalidInputError("Customer must be of legal age")

        object.__setattr__(self, "monthly_income", positive_amount(self.monthly_income, "Monthly income"))
        debts = self.current_monthly_debts if self.current_monthly_debts is not None else ZERO
        object.__setattr__(self, "current_monthly_debts", non_negative_amount(debts, "Current monthly debts"))

        if isinstance(self.work_experience_months, bool) or not isinstance(self.work_experience_months, int):
            raise InvalidInputError("Work experience must be a whole number of months")
        if self.work_experience_months < 0:
            raise InvalidInputError("Work experience cannot be negative")
        if self.email is not None and "@" not in self.email:
            raise InvalidInputError("Email must be valid")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age(self, as_of: Optional[date] = None) -> int:
        return years_between(self.birth_date, as_of or date.today())

    def debt_to_income_ratio(self) -> Decimal:
        return safe_ratio(self.current_monthly_debts, self.monthly_income, "Monthly income")

    def has_acceptable_debt_ratio(self, max_ratio: Decimal) -> bool:
        return self.debt_to_income_ratio() <= max_ratio

    def available_payment_capacity(self, max_payment_ratio: Decimal) -> Decimal:
        """Monthly payment room left after current debts, never negative"""
        capacity = self.monthly_income * max_payment_ratio - self.current_monthly_debts
        return quantize_money(max(capacity, ZERO))


@dataclass(frozen=True)
class Vehicle:
    """Vehicle to be financed"""

    vin: str
    brand: str
    model: str
    year: int
    value: Decimal
    kilometers: int
    vehicle_type: Optional[VehicleType] = None

    def __post_init__(self) -> None:
        vin = _required_text(self.vin, "VIN").upper()
        if not VIN_PATTERN.match(vin):
            raise InvalidInputError(f"Invalid VIN format: {self.vin}")
        object.__setattr__(self, "vin", vin)
        object.__setattr__(self, "brand", _required_text(self.brand, "Brand").upper())
        object.__setattr__(self, "model", _required_text(self.model, "Model"))

        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise InvalidInputError("Vehicle year must be an integer")
        if not MIN_VEHICLE_YEAR <= self.year <= current_year():
            raise InvalidInputError(f"Invalid vehicle year: {self.year}")

        object.__setattr__(self, "value", money_amount(self.value, "Vehicle value"))

        if isinstance(self.kilometers, bool) or not isinstance(self.kilometers, int):
            raise InvalidInputError("Kilometers must be an integer")
        if self.kilometers < 0:
            raise InvalidInputError("Kilometers cannot be negative")

    def age(self, as_of: Optional[date] = None) -> int:
        return max(current_year(as_of) - self.year, 0)

    def is_new(self, as_of: Optional[date] = None) -> bool:
        return self.age(as_of) <= 1

    def is_semi_new(self, as_of: Optional[date] = None) -> bool:
        return 1 < self.age(as_of) <= 3

    def is_used(self, as_of: Optional[date] = None) -> bool:
        return self.age(as_of) > 3

    def max_credit_amount(self, max_loan_to_value: Decimal) -> Decimal:
        return quantize_money(self.value * max_loan_to_value)


def _new_application_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CreditApplication:
    """(Customer, Vehicle, requested amount) plus identity and status.

    Status changes return a new instance.
    """

    customer: Customer
    vehicle: Vehicle
    requested_amount: Decimal
    id: str = field(default_factory=_new_application_id)
    status: CreditStatus = CreditStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    credit_score: Optional[CreditScore] = None
    rejection_reason: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.customer, Customer):
            raise InvalidInputError("Customer is required")
        if not isinstance(self.vehicle, Vehicle):
            raise InvalidInputError("Vehicle is required")
        object.__setattr__(self, "requested_amount", money_amount(self.requested_amount, "Requested amount"))

    def loan_to_value_ratio(self) -> Decimal:
        return safe_ratio(self.requested_amount, self.vehicle.value, "Vehicle value")

    def approve(self, credit_score: Union[CreditScore, int], min_score: int = 600) -> "CreditApplication":
        if self.status is not CreditStatus.PENDING:
            raise InvalidApplicationStateError("Only pending applications can be approved")
        score = CreditScore.coerce(credit_score)
        if score.value < min_score:
            raise InvalidInputError(f"Minimum credit score required for approval: {min_score}")
        return replace(self, status=CreditStatus.APPROVED, credit_score=score)

    def reject(self, reason: str, credit_score: Optional[CreditScore] = None) -> "CreditApplication":
        if self.status is not CreditStatus.PENDING:
            raise InvalidApplicationStateError("Only pending applications can be rejected")
        if reason is None or not reason.strip():
            raise InvalidInputError("A rejection reason is required")
        return replace(
            self,
            status=CreditStatus.REJECTED,
            rejection_reason=reason.strip(),
            credit_score=credit_score or self.credit_score,
        )

    def cancel(self) -> "CreditApplication":
        if self.status.is_final:
            raise InvalidApplicationStateError("A finalized application cannot be cancelled")
        return replace(self, status=CreditStatus.CANCELLED)


@dataclass(frozen=True)
class RiskFactor:
    """One independently scored risk dimension"""

    category: str
    level: RiskLevel
    score: int
    detail: str
    evaluated: bool = True  # False for placeholder factors awaiting external verification

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            raise InvalidInputError(f"Risk factor score must be between 0 and 100, got {self.score}")


@dataclass(frozen=True)
class RiskAssessment:
    """Finalized aggregation of risk factors"""

    factors: Tuple[RiskFactor, ...]
    risk_score: Decimal
    overall_level: RiskLevel
    approved: bool

    @property
    def high_risk_factors(self) -> List[RiskFactor]:
        return [f for f in self.factors if f.level is RiskLevel.HIGH]

    @property
    def pending_factors(self) -> List[RiskFactor]:
        return [f for f in self.factors if not f.evaluated]


@dataclass(frozen=True)
class InterestRateQuote:
    """Breakdown of a rate: base rate by score, named adjustments, bounded final rate"""

    base_rate: Decimal
    adjustments: Mapping[str, Decimal] = field(hash=False)
    final_rate: Decimal
    details: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "adjustments", MappingProxyType(dict(self.adjustments)))

    @property
    def total_adjustment(self) -> Decimal:
        return sum(self.adjustments.values(), ZERO)


@dataclass(frozen=True)
class InstallmentQuote:
    """Fixed monthly installment plus totals over the whole term"""

    loan_amount: Decimal
    annual_rate: Decimal
    term_months: int
    monthly_installment: Decimal
    total_amount: Decimal
    total_interest: Decimal


@dataclass(frozen=True)
class Installment:
    """Single period in an amortization schedule"""

    number: int
    due_date: date
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class EligibilityCheck:
    name: str
    passed: bool
    detail: str


@dataclass(frozen=True)
class EligibilityResult:
    checks: Tuple[EligibilityCheck, ...]

    @property
    def eligible(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failed_checks(self) -> List[EligibilityCheck]:
        return [check for check in self.checks if not check.passed]


@dataclass(frozen=True)
class CreditDecision:
    """Output of the decision pipeline"""

    application: CreditApplication
    status: CreditStatus
    credit_score: CreditScore
    eligibility: EligibilityResult
    term_months: int
    assessment: Optional[RiskAssessment] = None
    approved_amount: Decimal = ZERO
    max_eligible_amount: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    recommended_rate: Optional[Decimal] = None
    installment: Optional[InstallmentQuote] = None
    reasons: Tuple[str, ...] = ()

    @property
    def approved(self) -> bool:
        return self.status is CreditStatus.APPROVED
