"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from autocredit.domain.models import (
    CreditDecision,
    Customer,
    EligibilityResult,
    Vehicle,
    VehicleType,
)


class CustomerSchema(BaseModel):
    """Applicant profile"""

    document_number: str = Field(..., min_length=1, description="Cedula (8-10 digits) or passport")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    birth_date: date
    monthly_income: Decimal = Field(..., gt=0, description="Verified monthly income")
    current_monthly_debts: Decimal = Field(Decimal("0"), ge=0)
    work_experience_months: int = Field(0, ge=0)
    email: Optional[str] = None
    occupation: Optional[str] = None

    def to_domain(self) -> Customer:
        return Customer(
            document_number=self.document_number,
            first_name=self.first_name,
            last_name=self.last_name,
            birth_date=self.birth_date,
            monthly_income=self.monthly_income,
            current_monthly_debts=self.current_monthly_debts,
            work_experience_months=self.work_experience_months,
            email=self.email,
            occupation=self.occupation,
        )


class VehicleSchema(BaseModel):
    """Vehicle to be financed"""

    vin: str = Field(..., min_length=17, max_length=17)
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int
    value: Decimal = Field(..., gt=0, description="Commercial value")
    kilometers: int = Field(..., ge=0)
    vehicle_type: Optional[VehicleType] = None

    def to_domain(self) -> Vehicle:
        return Vehicle(
            vin=self.vin,
            brand=self.brand,
            model=self.model,
            year=self.year,
            value=self.value,
            kilometers=self.kilometers,
            vehicle_type=self.vehicle_type,
        )


class CreditApplicationRequest(BaseModel):
    """Request body for POST /v1/credit-applications"""

    customer: CustomerSchema
    vehicle: VehicleSchema
    requested_amount: Decimal = Field(..., gt=0)
    term_months: Optional[int] = Field(None, description="Defaults to the configured term")
    credit_score: Optional[int] = Field(None, description="Bureau score; fetched from the bureau when omitted")


class RiskFactorSchema(BaseModel):
    category: str
    level: str
    score: int
    detail: str
    evaluated: bool = True


class RiskAssessmentSchema(BaseModel):
    risk_score: Decimal
    overall_level: str
    approved: bool
    factors: List[RiskFactorSchema]


class EligibilityCheckSchema(BaseModel):
    name: str
    passed: bool
    detail: str


class CreditDecisionResponse(BaseModel):
    """Response for POST /v1/credit-applications"""

    application_id: str
    status: str
    credit_score: int
    requested_amount: Decimal
    approved_amount: Decimal
    max_eligible_amount: Optional[Decimal] = None
    term_months: int
    interest_rate: Optional[Decimal] = None
    recommended_rate: Optional[Decimal] = None
    monthly_installment: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    total_interest: Optional[Decimal] = None
    rejection_reason: Optional[str] = None
    reasons: List[str] = []
    eligibility_checks: List[EligibilityCheckSchema]
    risk_assessment: Optional[RiskAssessmentSchema] = None

    @classmethod
    def from_decision(cls, decision: CreditDecision) -> "CreditDecisionResponse":
        application = decision.application
        assessment = decision.assessment
        installment = decision.installment

        return cls(
            application_id=application.id,
            status=decision.status.value,
            credit_score=decision.credit_score.value,
            requested_amount=application.requested_amount,
            approved_amount=decision.approved_amount,
            max_eligible_amount=decision.max_eligible_amount,
            term_months=decision.term_months,
            interest_rate=decision.interest_rate,
            recommended_rate=decision.recommended_rate,
            monthly_installment=installment.monthly_installment if installment else None,
            total_amount=installment.total_amount if installment else None,
            total_interest=installment.total_interest if installment else None,
            rejection_reason=application.rejection_reason,
            reasons=list(decision.reasons),
            eligibility_checks=eligibility_checks(decision.eligibility),
            risk_assessment=RiskAssessmentSchema(
                risk_score=assessment.risk_score,
                overall_level=assessment.overall_level.value,
                approved=assessment.approved,
                factors=[
                    RiskFactorSchema(
                        category=f.category,
                        level=f.level.value,
                        score=f.score,
                        detail=f.detail,
                        evaluated=f.evaluated,
                    )
                    for f in assessment.factors
                ],
            )
            if assessment
            else None,
        )


class ApplicationRecordResponse(BaseModel):
    """Stored application, for GET /v1/credit-applications/{application_id}"""

    application_id: str
    customer_document: str
    customer_name: str
    vehicle_vin: str
    vehicle_brand: str
    vehicle_model: str
    vehicle_year: int
    requested_amount: Decimal
    term_months: int
    status: str
    credit_score: Optional[int] = None
    approved_amount: Decimal
    interest_rate: Optional[Decimal] = None
    monthly_installment: Optional[Decimal] = None
    risk_score: Optional[Decimal] = None
    risk_level: Optional[str] = None
    risk_factors: List[RiskFactorSchema] = []
    rejection_reason: Optional[str] = None
    created_at: str


class ApplicationHistoryResponse(BaseModel):
    """Response for GET /v1/credit-applications?document_number=..."""

    customer_document: str
    applications: List[ApplicationRecordResponse]


class InstallmentRequest(BaseModel):
    """Request body for POST /v1/installments"""

    amount: Decimal = Field(..., gt=0)
    annual_rate: Decimal = Field(..., ge=0, description="Nominal annual rate as a fraction, e.g. 0.18")
    term_months: int = Field(..., gt=0)
    include_schedule: bool = False
    start_date: Optional[date] = None


class InstallmentSchema(BaseModel):
    """Single period in an amortization schedule"""

    number: int
    due_date: date
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


class InstallmentQuoteResponse(BaseModel):
    """Response for POST /v1/installments"""

    loan_amount: Decimal
    annual_rate: Decimal
    term_months: int
    monthly_installment: Decimal
    total_amount: Decimal
    total_interest: Decimal
    schedule: Optional[List[InstallmentSchema]] = None


class VehicleEligibilityResponse(BaseModel):
    """Response for POST /v1/vehicles/eligibility"""

    vin: str
    brand: str
    eligible: bool
    checks: List[EligibilityCheckSchema]


class AuthorizedBrandsResponse(BaseModel):
    brands: List[str]


def eligibility_checks(result: EligibilityResult) -> List[EligibilityCheckSchema]:
    return [EligibilityCheckSchema(name=c.name, passed=c.passed, detail=c.detail) for c in result.checks]
