"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter

from loan_approval.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_decision(
    application_id: str,
    requested_amount: Decimal,
    approved_amount: Decimal,
    duration_ms: float,
) -> None:
    """Log structured analysis outcome"""
    logging.info(
        "Decision completed",
        extra={
            "application_id": application_id,
            "step": "decision_complete",
            "requested_amount": str(requested_amount),
            "approved_amount": str(approved_amount),
            "duration_ms": duration_ms,
        },
    )


def log_submission(
    application_id: str | None,
    tenor_months: int,
    outcome: str,
    duration_ms: float,
) -> None:
    """Log structured submission outcome (confirmed | failed)"""
    level = logging.INFO if outcome == "confirmed" else logging.WARNING
    logging.log(
        level,
        "Approval submission %s",
        outcome,
        extra={
            "application_id": application_id,
            "step": "submission_complete",
            "tenor_months": tenor_months,
            "submission_outcome": outcome,
            "duration_ms": duration_ms,
        },
    )
