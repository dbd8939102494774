"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from autosave_ledger.domain.models import Operation

SERVICE_NAME = "autosave-ledger"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_operation(operation: Operation) -> None:
    """Log one appended operation-log entry"""
    level = logging.WARNING if operation.status == "failed" else logging.INFO
    logging.log(
        level,
        "Operation recorded",
        extra={
            "step": "operation_recorded",
            "operation_id": operation.id,
            "operation_type": operation.type,
            "operation_status": operation.status,
            "amount_cents": operation.amount_cents,
            "goal": operation.goal,
            "loan": operation.loan,
            "error": operation.error,
        },
    )
