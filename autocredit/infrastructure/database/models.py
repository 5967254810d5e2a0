"""SQLAlchemy ORM models for credit applications and their decisions"""

import uuid
from sqlalchemy import Column, DateTime, Integer, JSON, Numeric, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from sqlalchemy.types import CHAR, TypeDecorator

Base = declarative_base()


class GUID(TypeDecorator):
    """UUID stored as a 36-char string so the schema runs on PostgreSQL and SQLite alike"""

    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return uuid.UUID(value)


class CreditApplicationRecord(Base):
    """Credit application with the outcome of the decision pipeline"""

    __tablename__ = "credit_application"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)

    # Customer snapshot
    customer_document = Column(Text, nullable=False, index=True)
    customer_name = Column(Text, nullable=False)
    monthly_income = Column(Numeric(18, 2), nullable=False)

    # Vehicle snapshot
    vehicle_vin = Column(Text, nullable=False)
    vehicle_brand = Column(Text, nullable=False)
    vehicle_model = Column(Text, nullable=False)
    vehicle_year = Column(Integer, nullable=False)
    vehicle_value = Column(Numeric(18, 2), nullable=False)

    # Request
    requested_amount = Column(Numeric(18, 2), nullable=False)
    term_months = Column(Integer, nullable=False)

    # Decision
    status = Column(Text, nullable=False, index=True)
    credit_score = Column(Integer, nullable=True)
    approved_amount = Column(Numeric(18, 2), nullable=False)
    interest_rate = Column(Numeric(7, 4), nullable=True)
    recommended_rate = Column(Numeric(7, 4), nullable=True)
    monthly_installment = Column(Numeric(18, 2), nullable=True)
    risk_score = Column(Numeric(5, 2), nullable=True)
    risk_level = Column(Text, nullable=True)
    risk_factors = Column(JSON, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
