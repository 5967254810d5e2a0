"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from autocredit.api.main import create_app
from autocredit.infrastructure.database.models import Base
from autocredit.infrastructure.database.session import get_db, init_db
from autocredit.domain.models import CreditApplication, Customer, Vehicle


# Test database, shared in-memory connection
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

THIS_YEAR = date.today().year
VIN = "JTDBR32E720123456"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    init_db(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def make_customer():
    """Customer factory: salaried applicant, 8M income, 500k current debts"""

    def _make(**overrides) -> Customer:
        fields = dict(
            document_number="1020304050",
            first_name="Laura",
            last_name="Gomez",
            birth_date=date(1985, 5, 20),
            monthly_income=Decimal("8000000"),
            current_monthly_debts=Decimal("500000"),
            work_experience_months=60,
            email="laura.gomez@example.com",
        )
        fields.update(overrides)
        return Customer(**fields)

    return _make


@pytest.fixture
def make_vehicle():
    """Vehicle factory: one-year-old Toyota worth 80M with 15,000 km"""

    def _make(**overrides) -> Vehicle:
        fields = dict(
            vin=VIN,
            brand="Toyota",
            model="Corolla",
            year=THIS_YEAR - 1,
            value=Decimal("80000000"),
            kilometers=15_000,
        )
        fields.update(overrides)
        return Vehicle(**fields)

    return _make


@pytest.fixture
def make_application(make_customer, make_vehicle):
    """Application factory; customer/vehicle overrides go through their factories"""

    def _make(requested_amount=Decimal("50000000"), customer=None, vehicle=None) -> CreditApplication:
        return CreditApplication(
            customer=customer or make_customer(),
            vehicle=vehicle or make_vehicle(),
            requested_amount=requested_amount,
        )

    return _make


@pytest.fixture
def customer(make_customer) -> Customer:
    return make_customer()


@pytest.fixture
def vehicle(make_vehicle) -> Vehicle:
    return make_vehicle()


@pytest.fixture
def application(make_application) -> CreditApplication:
    return make_application()


@pytest.fixture
def application_payload() -> dict:
    """Request body for POST /v1/credit-applications matching the default application"""
    return {
        "customer": {
            "document_number": "1020304050",
            "first_name": "Laura",
            "last_name": "Gomez",
            "birth_date": "1985-05-20",
            "monthly_income": "8000000",
            "current_monthly_debts": "500000",
            "work_experience_months": 60,
            "email": "laura.gomez@example.com",
        },
        "vehicle": {
            "vin": VIN,
            "brand": "Toyota",
            "model": "Corolla",
            "year": THIS_YEAR - 1,
            "value": "80000000",
            "kilometers": 15000,
        },
        "requested_amount": "50000000",
        "term_months": 60,
        "credit_score": 780,
    }
