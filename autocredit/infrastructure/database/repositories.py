"""Data access layer for credit applications"""

import uuid
from typing import List, Optional
from sqlalchemy.orm import Session
from autocredit.infrastructure.database.models import CreditApplicationRecord
from autocredit.domain.models import CreditDecision


class CreditApplicationRepository:
    """Repository for credit applications and their decisions"""

    def __init__(self, db: Session):
        self.db = db

    def create_from_decision(self, decision: CreditDecision) -> CreditApplicationRecord:
        """Persist application and decision outcome"""
        application = decision.application
        customer = application.customer
        vehicle = application.vehicle
        assessment = decision.assessment

        record = CreditApplicationRecord(
            id=uuid.UUID(application.id),
            customer_document=customer.document_number,
            customer_name=customer.full_name,
            monthly_income=customer.monthly_income,
            vehicle_vin=vehicle.vin,
            vehicle_brand=vehicle.brand,
            vehicle_model=vehicle.model,
            vehicle_year=vehicle.year,
            vehicle_value=vehicle.value,
            requested_amount=application.requested_amount,
            term_months=decision.term_months,
            status=decision.status.value,
            credit_score=decision.credit_score.value,
            approved_amount=decision.approved_amount,
            interest_rate=decision.interest_rate,
            recommended_rate=decision.recommended_rate,
            monthly_installment=decision.installment.monthly_installment if decision.installment else None,
            risk_score=assessment.risk_score if assessment else None,
            risk_level=assessment.overall_level.value if assessment else None,
            risk_factors=[
                {
                    "category": f.category,
                    "level": f.level.value,
                    "score": f.score,
                    "detail": f.detail,
                    "evaluated": f.evaluated,
                }
                for f in assessment.factors
            ]
            if assessment
            else None,
            rejection_reason=application.rejection_reason,
        )
        self.db.add(record)
        self.db.flush()  # Get defaults without committing
        return record

    def get_by_id(self, application_id: uuid.UUID) -> Optional[CreditApplicationRecord]:
        """Fetch a single application"""
        return (
            self.db.query(CreditApplicationRecord)
            .filter(CreditApplicationRecord.id == application_id)
            .first()
        )

    def list_by_customer(self, customer_document: str, limit: int = 20) -> List[CreditApplicationRecord]:
        """Fetch recent applications for a customer"""
        return (
            self.db.query(CreditApplicationRecord)
            .filter(CreditApplicationRecord.customer_document == customer_document)
            .order_by(CreditApplicationRecord.created_at.desc())
            .limit(limit)
            .all()
        )
