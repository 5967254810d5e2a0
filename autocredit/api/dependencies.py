"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from autocredit.domain.policy import DEFAULT_POLICY, CreditPolicy
from autocredit.infrastructure.clients.credit_bureau import CreditBureauClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_credit_bureau_client() -> CreditBureauClient:
    """Provide credit bureau client instance"""
    return CreditBureauClient()


def get_credit_policy() -> CreditPolicy:
    """Policy applied to every decision; override in tests to exercise other thresholds"""
    return DEFAULT_POLICY
