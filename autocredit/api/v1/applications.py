"""/v1/credit-applications - credit decision and application history endpoints"""

import logging
import time
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from autocredit.api.dependencies import get_credit_bureau_client, get_credit_policy, get_request_id
from autocredit.api.v1.schemas import (
    ApplicationHistoryResponse,
    ApplicationRecordResponse,
    CreditApplicationRequest,
    CreditDecisionResponse,
    RiskFactorSchema,
)
from autocredit.config import settings
from autocredit.domain.decision import make_credit_decision
from autocredit.domain.exceptions import CreditBureauError, InvalidInputError
from autocredit.domain.models import CreditApplication, CreditScore
from autocredit.domain.policy import CreditPolicy
from autocredit.infrastructure.clients.credit_bureau import CreditBureauClient
from autocredit.infrastructure.database.models import CreditApplicationRecord
from autocredit.infrastructure.database.repositories import CreditApplicationRepository
from autocredit.infrastructure.database.session import get_db
from autocredit.infrastructure.observability.logging import log_decision
from autocredit.infrastructure.observability.metrics import record_decision

router = APIRouter()


def _validate_term(term_months: Optional[int]) -> int:
    term = settings.default_term_months if term_months is None else term_months
    if not settings.min_term_months <= term <= settings.max_term_months:
        raise InvalidInputError(
            f"Term must be between {settings.min_term_months} and {settings.max_term_months} months"
        )
    return term


def _to_record_response(record: CreditApplicationRecord) -> ApplicationRecordResponse:
    return ApplicationRecordResponse(
        application_id=str(record.id),
        customer_document=record.customer_document,
        customer_name=record.customer_name,
        vehicle_vin=record.vehicle_vin,
        vehicle_brand=record.vehicle_brand,
        vehicle_model=record.vehicle_model,
        vehicle_year=record.vehicle_year,
        requested_amount=record.requested_amount,
        term_months=record.term_months,
        status=record.status,
        credit_score=record.credit_score,
        approved_amount=record.approved_amount,
        interest_rate=record.interest_rate,
        monthly_installment=record.monthly_installment,
        risk_score=record.risk_score,
        risk_level=record.risk_level,
        risk_factors=[RiskFactorSchema(**f) for f in (record.risk_factors or [])],
        rejection_reason=record.rejection_reason,
        created_at=record.created_at.isoformat(),
    )


@router.post("/credit-applications", response_model=CreditDecisionResponse, status_code=201)
async def create_credit_application(
    request_body: CreditApplicationRequest,
    request: Request,
    db: Session = Depends(get_db),
    bureau_client: CreditBureauClient = Depends(get_credit_bureau_client),
    policy: CreditPolicy = Depends(get_credit_policy),
):
    """
    Evaluate a credit application and persist the decision.

    Flow:
    1. Build and validate customer, vehicle and application
    2. Use the supplied credit score, or fetch it from the bureau
    3. Run eligibility, risk assessment, rate and installment calculation
    4. Persist application + decision
    5. Return decision with its breakdown
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Domain objects validate on construction
        term = _validate_term(request_body.term_months)
        application = CreditApplication(
            customer=request_body.customer.to_domain(),
            vehicle=request_body.vehicle.to_domain(),
            requested_amount=request_body.requested_amount,
        )

        # 2. Credit score
        if request_body.credit_score is not None:
            credit_score = CreditScore(request_body.credit_score)
        else:
            credit_score = await bureau_client.get_credit_score(application.customer.document_number)

        # 3. Decide
        decision = make_credit_decision(application, credit_score, term, policy)

        # 4. Persist
        CreditApplicationRepository(db).create_from_decision(decision)
        db.commit()

        # Record metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        record_decision(decision)
        log_decision(
            request_id,
            application.id,
            application.customer.document_number,
            decision.status.value,
            str(decision.approved_amount),
            str(decision.interest_rate) if decision.interest_rate is not None else None,
            decision.assessment.overall_level.value if decision.assessment else None,
            duration_ms,
        )

        return CreditDecisionResponse.from_decision(decision)

    except InvalidInputError as e:
        db.rollback()
        logging.warning(f"Invalid application: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except CreditBureauError as e:
        db.rollback()
        logging.error(f"Credit bureau error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Credit bureau unavailable")

    except Exception as e:
        db.rollback()
        logging.exception(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/credit-applications/{application_id}", response_model=ApplicationRecordResponse)
def get_credit_application(application_id: str, db: Session = Depends(get_db)):
    """
    Retrieve a stored application with its decision.

    Raises:
        400: Malformed application ID
        404: Application not found
    """
    try:
        application_uuid = uuid.UUID(application_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid application ID format")

    record = CreditApplicationRepository(db).get_by_id(application_uuid)
    if not record:
        raise HTTPException(status_code=404, detail="Credit application not found")

    return _to_record_response(record)


@router.get("/credit-applications", response_model=ApplicationHistoryResponse)
def list_credit_applications(
    document_number: str = Query(..., min_length=1, description="Customer document number"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Recent applications for a customer, newest first"""
    document = document_number.strip().upper()
    records = CreditApplicationRepository(db).list_by_customer(document, limit=limit)

    return ApplicationHistoryResponse(
        customer_document=document,
        applications=[_to_record_response(r) for r in records],
    )
