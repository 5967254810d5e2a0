"""Unit tests for risk scoring logic"""

import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal
from autocredit.domain.models import RiskAssessment, RiskFactor, RiskLevel
from autocredit.domain.policy import DEFAULT_POLICY, CreditPolicy, RiskPolicy
from autocredit.domain.scoring import (
    assess_risk,
    evaluate_credit_history,
    evaluate_credit_score,
    evaluate_debt_to_income,
    evaluate_employment_stability,
    evaluate_payment_capacity,
    evaluate_vehicle_risk,
    finalize_assessment,
    recommended_rate_from_risk,
)

AS_OF = date(2024, 6, 1)


@pytest.mark.parametrize(
    "score,level,points",
    [
        (900, RiskLevel.LOW, 85),
        (750, RiskLevel.LOW, 85),
        (749, RiskLevel.LOW, 75),
        (700, RiskLevel.LOW, 75),
        (699, RiskLevel.MEDIUM, 60),
        (650, RiskLevel.MEDIUM, 60),
        (649, RiskLevel.MEDIUM, 45),
        (600, RiskLevel.MEDIUM, 45),
        (599, RiskLevel.HIGH, 20),
        (300, RiskLevel.HIGH, 20),
    ],
)
def test_credit_score_factor_brackets(score, level, points):
    factor = evaluate_credit_score(score)
    assert factor.level is level
    assert factor.score == points


def test_payment_capacity_low_share_of_income(application):
    """50M at 18% over 60 months is about 1.27M, under 20% of 8M income"""
    factor = evaluate_payment_capacity(application)

    assert factor.level is RiskLevel.LOW
    assert factor.score == 90
    assert "of income" in factor.detail


def test_payment_capacity_insufficient(make_application, make_customer, make_vehicle):
    """40M at 18% over 60 months is about 1.02M, over half of 2M income"""
    application = make_application(
        requested_amount=Decimal("40000000"),
        customer=make_customer(monthly_income=Decimal("2000000"), current_monthly_debts=Decimal("0")),
        vehicle=make_vehicle(value=Decimal("50000000")),
    )
    factor = evaluate_payment_capacity(application)

    assert factor.level is RiskLevel.HIGH
    assert factor.score == 30


def test_vehicle_risk_clamped_to_100(application):
    """70 + 15 (age 1) + 10 (15,000 km) + 10 (LTV 62.5%) = 105 -> 100"""
    factor = evaluate_vehicle_risk(application)

    assert factor.score == 100
    assert factor.level is RiskLevel.LOW


def test_vehicle_risk_medium(make_application, make_vehicle):
    """70 - 5 (age 5) + 5 (60,000 km) + 5 (LTV 75%) = 75"""
    application = make_application(
        requested_amount=Decimal("7500000"),
        vehicle=make_vehicle(year=2019, kilometers=60_000, value=Decimal("10000000")),
    )
    factor = evaluate_vehicle_risk(application, as_of=AS_OF)

    assert factor.score == 75
    assert factor.level is RiskLevel.MEDIUM


def test_vehicle_risk_high(make_application, make_vehicle):
    """70 - 20 (age 10) - 15 (120,000 km) - 10 (LTV 90%) = 25"""
    application = make_application(
        requested_amount=Decimal("9000000"),
        vehicle=make_vehicle(year=2014, kilometers=120_000, value=Decimal("10000000")),
    )
    factor = evaluate_vehicle_risk(application, as_of=AS_OF)

    assert factor.score == 25
    assert factor.level is RiskLevel.HIGH
    assert "Very old vehicle." in factor.detail


def test_debt_to_income_factor_ignores_unverified_debts(make_customer):
    factor = evaluate_debt_to_income(make_customer(current_monthly_debts=Decimal("2800000")))

    assert factor.level is RiskLevel.LOW
    assert factor.score == 90
    assert "pending bureau verification" in factor.detail


def test_debt_to_income_factor_with_reported_debts(make_customer):
    """2.8M / 8M = 35%"""
    policy = replace(RiskPolicy(), use_reported_debts=True)
    factor = evaluate_debt_to_income(make_customer(current_monthly_debts=Decimal("2800000")), policy)

    assert factor.level is RiskLevel.MEDIUM
    assert factor.score == 50


def test_placeholder_factors_are_not_evaluated(customer):
    for factor in (evaluate_employment_stability(customer), evaluate_credit_history(customer)):
        assert factor.evaluated is False
        assert factor.level is RiskLevel.MEDIUM
        assert factor.score == 70
        assert factor.detail.startswith("Not yet evaluated")


def _factors(*pairs):
    return [RiskFactor(f"F{i}", level, score, "") for i, (level, score) in enumerate(pairs)]


def test_finalize_empty_factors():
    assessment = finalize_assessment([])

    assert assessment.risk_score == Decimal("0.00")
    assert assessment.overall_level is RiskLevel.HIGH
    assert assessment.approved is False


def test_finalize_mean_rounded_half_up():
    """505 / 6 = 84.1666... -> 84.17"""
    assessment = finalize_assessment(
        _factors(
            (RiskLevel.LOW, 85),
            (RiskLevel.LOW, 90),
            (RiskLevel.LOW, 100),
            (RiskLevel.LOW, 90),
            (RiskLevel.MEDIUM, 70),
            (RiskLevel.MEDIUM, 70),
        )
    )

    assert assessment.risk_score == Decimal("84.17")
    assert assessment.overall_level is RiskLevel.LOW
    assert assessment.approved is True


@pytest.mark.parametrize(
    "score,level,approved",
    [(75, RiskLevel.LOW, True), (74, RiskLevel.MEDIUM, True), (60, RiskLevel.MEDIUM, True), (59, RiskLevel.HIGH, False)],
)
def test_finalize_level_thresholds(score, level, approved):
    assessment = finalize_assessment(_factors((RiskLevel.MEDIUM, score)))

    assert assessment.overall_level is level
    assert assessment.approved is approved


def test_two_high_factors_force_decline():
    """Mean 73.33 would be MEDIUM, but two HIGH factors override it"""
    assessment = finalize_assessment(
        _factors(
            (RiskLevel.HIGH, 20),
            (RiskLevel.HIGH, 30),
            (RiskLevel.LOW, 100),
            (RiskLevel.LOW, 90),
            (RiskLevel.MEDIUM, 100),
            (RiskLevel.MEDIUM, 100),
        )
    )

    assert assessment.risk_score == Decimal("73.33")
    assert assessment.overall_level is RiskLevel.HIGH
    assert assessment.approved is False
    assert len(assessment.high_risk_factors) == 2


def test_single_high_factor_does_not_override():
    assessment = finalize_assessment(_factors((RiskLevel.HIGH, 20), (RiskLevel.LOW, 100), (RiskLevel.LOW, 100)))

    assert assessment.overall_level is RiskLevel.MEDIUM
    assert assessment.approved is True


def test_assess_risk_strong_application(application):
    assessment = assess_risk(application, 780)

    assert [f.category for f in assessment.factors] == [
        "CREDIT_SCORE",
        "PAYMENT_CAPACITY",
        "VEHICLE_RISK",
        "DEBT_TO_INCOME",
        "EMPLOYMENT_STABILITY",
        "CREDIT_HISTORY",
    ]
    assert assessment.risk_score == Decimal("84.17")
    assert assessment.overall_level is RiskLevel.LOW
    assert assessment.approved is True
    assert len(assessment.pending_factors) == 2


def test_assess_risk_declined_by_two_high_factors(make_application, make_customer, make_vehicle):
    """Score 550 and an installment over half of income"""
    application = make_application(
        requested_amount=Decimal("40000000"),
        customer=make_customer(monthly_income=Decimal("2000000"), current_monthly_debts=Decimal("0")),
        vehicle=make_vehicle(value=Decimal("50000000")),
    )
    assessment = assess_risk(application, 550)

    assert {f.category for f in assessment.high_risk_factors} == {"CREDIT_SCORE", "PAYMENT_CAPACITY"}
    assert assessment.overall_level is RiskLevel.HIGH
    assert assessment.approved is False


def _assessment(level):
    return RiskAssessment(factors=(), risk_score=Decimal("0"), overall_level=level, approved=level is not RiskLevel.HIGH)


@pytest.mark.parametrize(
    "score,level,rate",
    [
        (780, RiskLevel.LOW, Decimal("0.1200")),  # 12% - 1% clamped to the 12% floor
        (720, RiskLevel.LOW, Decimal("0.1300")),
        (680, RiskLevel.MEDIUM, Decimal("0.1600")),
        (620, RiskLevel.MEDIUM, Decimal("0.1800")),
        (550, RiskLevel.HIGH, Decimal("0.2400")),
    ],
)
def test_recommended_rate_from_risk(score, level, rate):
    assert recommended_rate_from_risk(_assessment(level), score) == rate


def test_recommended_rate_capped():
    policy = replace(
        DEFAULT_POLICY,
        recommended_rate=replace(DEFAULT_POLICY.recommended_rate, max_rate=Decimal("0.23")),
    )
    assert recommended_rate_from_risk(_assessment(RiskLevel.HIGH), 550, policy) == Decimal("0.2300")


def test_default_policy_level_adjustments_cannot_be_mutated():
    with pytest.raises(TypeError):
        DEFAULT_POLICY.recommended_rate.level_adjustments[0] = (RiskLevel.LOW, Decimal("0.05"))

    assert hash(DEFAULT_POLICY) == hash(CreditPolicy())
    assert recommended_rate_from_risk(_assessment(RiskLevel.LOW), 780) == Decimal("0.1200")


def test_recommended_rate_with_custom_level_adjustments():
    policy = replace(
        DEFAULT_POLICY,
        recommended_rate=replace(
            DEFAULT_POLICY.recommended_rate,
            level_adjustments=((RiskLevel.MEDIUM, Decimal("0.01")),),
        ),
    )

    assert recommended_rate_from_risk(_assessment(RiskLevel.MEDIUM), 680, policy) == Decimal("0.1700")
    assert recommended_rate_from_risk(_assessment(RiskLevel.LOW), 720, policy) == Decimal("0.1400")
