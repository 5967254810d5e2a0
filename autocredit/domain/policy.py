"""Credit policy: every threshold, table and bound used by the decision engine.

One frozen CreditPolicy is injected into each domain function (DEFAULT_POLICY when
omitted), so tests can enumerate bracket boundaries and alternative policies can be
built with dataclasses.replace().

Band tables are ordered: score bands from the highest minimum score down, ratio and
adjustment bands from the lowest upper bound up. A bound of None matches anything.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, Optional, Sequence, Tuple, TypeVar, Union

from autocredit.domain.models import RiskLevel


@dataclass(frozen=True)
class ScoreBand:
    """Credit-score bracket mapped to a risk factor"""

    min_score: int
    level: RiskLevel
    points: int
    label: str


@dataclass(frozen=True)
class RatioBand:
    """Ratio bracket (ratio <= max_ratio) mapped to a risk factor"""

    max_ratio: Optional[Decimal]
    level: RiskLevel
    points: int
    label: str


@dataclass(frozen=True)
class AdjustmentBand:
    """Bracket (value <= max_value) adding points to a running score"""

    max_value: Optional[Union[int, Decimal]]
    points: int
    label: str


@dataclass(frozen=True)
class RateBand:
    """Base interest rate for scores >= min_score"""

    min_score: int
    rate: Decimal


B = TypeVar("B")


def lookup_by_score(bands: Sequence[B], score: int) -> B:
    """First band whose min_score the score reaches (bands sorted descending)"""
    for band in bands:
        if score >= band.min_score:
            return band
    raise LookupError(f"No band covers score {score}")


def lookup_by_ratio(bands: Sequence[RatioBand], ratio: Decimal) -> RatioBand:
    for band in bands:
        if band.max_ratio is None or ratio <= band.max_ratio:
            return band
    raise LookupError(f"No band covers ratio {ratio}")


def lookup_adjustment(bands: Sequence[AdjustmentBand], value: Union[int, Decimal]) -> AdjustmentBand:
    for band in bands:
        if band.max_value is None or value <= band.max_value:
            return band
    raise LookupError(f"No band covers value {value}")


AUTHORIZED_BRANDS: FrozenSet[str] = frozenset(
    {"TOYOTA", "CHEVROLET", "RENAULT", "NISSAN", "HYUNDAI", "KIA", "MAZDA", "FORD"}
)


@dataclass(frozen=True)
class EligibilityPolicy:
    min_monthly_income: Decimal = Decimal("300000")
    max_debt_to_income: Decimal = Decimal("0.40")
    max_vehicle_age_years: int = 6
    max_vehicle_kilometers: int = 100_000
    authorized_brands: FrozenSet[str] = AUTHORIZED_BRANDS

    # Maximum eligible amount approximation
    max_payment_to_income: Decimal = Decimal("0.30")
    reference_annual_rate: Decimal = Decimal("0.12")
    reference_term_months: int = 60
    max_loan_to_value: Decimal = Decimal("0.90")


@dataclass(frozen=True)
class RiskPolicy:
    credit_score_bands: Tuple[ScoreBand, ...] = (
        ScoreBand(750, RiskLevel.LOW, 85, "Excellent credit score (>=750)"),
        ScoreBand(700, RiskLevel.LOW, 75, "Very good credit score (700-749)"),
        ScoreBand(650, RiskLevel.MEDIUM, 60, "Good credit score (650-699)"),
        ScoreBand(600, RiskLevel.MEDIUM, 45, "Acceptable credit score (600-649)"),
        ScoreBand(0, RiskLevel.HIGH, 20, "Insufficient credit score (<600)"),
    )

    # Installment estimate for the requested amount
    payment_reference_rate: Decimal = Decimal("0.18")
    payment_reference_term_months: int = 60
    payment_capacity_bands: Tuple[RatioBand, ...] = (
        RatioBand(Decimal("0.20"), RiskLevel.LOW, 90, "Excellent payment capacity"),
        RatioBand(Decimal("0.25"), RiskLevel.LOW, 80, "Good payment capacity"),
        RatioBand(Decimal("0.30"), RiskLevel.MEDIUM, 65, "Acceptable payment capacity"),
        RatioBand(None, RiskLevel.HIGH, 30, "Insufficient payment capacity"),
    )

    vehicle_base_score: int = 70
    vehicle_age_adjustments: Tuple[AdjustmentBand, ...] = (
        AdjustmentBand(2, 15, "New or nearly new vehicle."),
        AdjustmentBand(4, 5, "Recent vehicle."),
        AdjustmentBand(6, -5, "Used vehicle."),
        AdjustmentBand(None, -20, "Very old vehicle."),
    )
    vehicle_mileage_adjustments: Tuple[AdjustmentBand, ...] = (
        AdjustmentBand(50_000, 10, "Low mileage."),
        AdjustmentBand(80_000, 5, "Moderate mileage."),
        AdjustmentBand(100_000, -5, "High mileage."),
        AdjustmentBand(None, -15, "Excessive mileage."),
    )
    vehicle_ltv_adjustments: Tuple[AdjustmentBand, ...] = (
        AdjustmentBand(Decimal("0.70"), 10, "Low loan-to-value ratio."),
        AdjustmentBand(Decimal("0.85"), 5, "Moderate loan-to-value ratio."),
        AdjustmentBand(None, -10, "High loan-to-value ratio."),
    )
    vehicle_low_risk_min_score: int = 80
    vehicle_medium_risk_min_score: int = 60

    debt_to_income_bands: Tuple[RatioBand, ...] = (
        RatioBand(Decimal("0.20"), RiskLevel.LOW, 90, "Low debt-to-income ratio"),
        RatioBand(Decimal("0.30"), RiskLevel.MEDIUM, 70, "Moderate debt-to-income ratio"),
        RatioBand(Decimal("0.40"), RiskLevel.MEDIUM, 50, "High debt-to-income ratio"),
        RatioBand(None, RiskLevel.HIGH, 25, "Excessive debt-to-income ratio"),
    )
    # Until bureau-verified debts are wired in, the factor scores a zero debt figure
    use_reported_debts: bool = False

    # Placeholder factors awaiting external verification
    placeholder_level: RiskLevel = RiskLevel.MEDIUM
    placeholder_score: int = 70

    low_risk_min_score: Decimal = Decimal("75")
    medium_risk_min_score: Decimal = Decimal("60")
    high_factor_override_count: int = 2


@dataclass(frozen=True)
class RecommendedRatePolicy:
    """Rate derived from a finished risk assessment"""

    base_rates: Tuple[RateBand, ...] = (
        RateBand(750, Decimal("0.12")),
        RateBand(700, Decimal("0.14")),
        RateBand(650, Decimal("0.16")),
        RateBand(600, Decimal("0.18")),
        RateBand(0, Decimal("0.22")),
    )
    level_adjustments: Tuple[Tuple[RiskLevel, Decimal], ...] = (
        (RiskLevel.LOW, Decimal("-0.01")),
        (RiskLevel.MEDIUM, Decimal("0")),
        (RiskLevel.HIGH, Decimal("0.02")),
    )
    min_rate: Decimal = Decimal("0.12")
    max_rate: Decimal = Decimal("0.25")

    def adjustment_for(self, level: RiskLevel) -> Decimal:
        for band_level, adjustment in self.level_adjustments:
            if band_level is level:
                return adjustment
        return Decimal("0")


@dataclass(frozen=True)
class InterestRatePolicy:
    """Rate derived from the application profile"""

    base_rates: Tuple[RateBand, ...] = (
        RateBand(800, Decimal("0.1125")),
        RateBand(750, Decimal("0.13")),
        RateBand(700, Decimal("0.15")),
        RateBand(650, Decimal("0.17")),
        RateBand(600, Decimal("0.19")),
        RateBand(0, Decimal("0.21")),
    )
    experienced_worker_months: int = 36
    experience_discount: Decimal = Decimal("-0.005")
    high_income_threshold: Decimal = Decimal("5000000")
    high_income_discount: Decimal = Decimal("-0.005")
    new_vehicle_discount: Decimal = Decimal("-0.01")
    used_vehicle_surcharge: Decimal = Decimal("0.01")
    high_financing_ratio: Decimal = Decimal("0.80")
    high_financing_surcharge: Decimal = Decimal("0.005")
    standard_term_months: int = 60
    long_term_surcharge: Decimal = Decimal("0.005")
    min_rate: Decimal = Decimal("0.10")
    max_rate: Decimal = Decimal("0.25")


@dataclass(frozen=True)
class CreditPolicy:
    eligibility: EligibilityPolicy = field(default_factory=EligibilityPolicy)
    risk: RiskPolicy = field(default_factory=RiskPolicy)
    recommended_rate: RecommendedRatePolicy = field(default_factory=RecommendedRatePolicy)
    interest_rate: InterestRatePolicy = field(default_factory=InterestRatePolicy)
    min_approval_score: int = 600
    default_term_months: int = 60


DEFAULT_POLICY = CreditPolicy()
