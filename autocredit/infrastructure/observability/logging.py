"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

DEFAULT_SERVICE_NAME = "autocredit-engine"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping UTC timestamp, level and service name on every record"""

    def __init__(self, *args, service_name: str = DEFAULT_SERVICE_NAME, **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = DEFAULT_SERVICE_NAME) -> None:
    """Route the root logger to stdout as one JSON object per line"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name))
    logger.addHandler(handler)


def mask_document(document_number: str) -> str:
    """Keep the last four characters of a customer document: 1020304050 -> ******4050"""
    if len(document_number) <= 4:
        return "*" * len(document_number)
    return "*" * (len(document_number) - 4) + document_number[-4:]


def log_decision(
    request_id: str,
    application_id: str,
    customer_document: str,
    status: str,
    approved_amount: str,
    interest_rate: Optional[str],
    risk_level: Optional[str],
    duration_ms: float,
) -> None:
    """One record per credit decision, for approval-rate and pricing analysis"""
    logging.info(
        "Decision completed",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "customer_document": mask_document(customer_document),
            "step": "decision_complete",
            "decision_status": status,
            "approved_amount": approved_amount,
            "interest_rate": interest_rate,
            "risk_level": risk_level,
            "duration_ms": round(duration_ms, 2),
        },
    )
