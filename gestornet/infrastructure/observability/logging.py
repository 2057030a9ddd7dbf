"""Structured JSON logging for the GestorNet service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from gestornet.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
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


logger = logging.getLogger("gestornet")


def log_payment(client_id: str, amount: float, method: str, debt_after: Optional[float]) -> None:
    """Log a client payment; debt_after is None when the client was not found"""
    logger.info(
        "Payment recorded",
        extra={
            "step": "payment",
            "client_id": client_id,
            "amount": amount,
            "method": method,
            "debt_after": debt_after,
            "persisted": debt_after is not None,
        },
    )


def log_transaction(transaction_id: str, type_: str, category: str, amount: float) -> None:
    logger.info(
        "Transaction recorded",
        extra={
            "step": "transaction",
            "transaction_id": transaction_id,
            "type": type_,
            "category": category,
            "amount": amount,
        },
    )


def log_auth_event(event: str, outcome: str, manager_name: Optional[str] = None) -> None:
    """Log login/logout/password/manager events (never the password itself)"""
    logger.info(
        "Auth event",
        extra={
            "step": "auth",
            "event": event,
            "outcome": outcome,
            "manager_name": manager_name,
        },
    )


def log_persistence_failure(operation: str, collection: str, record_id: Optional[str], error: Exception) -> None:
    """Log a write that failed after the in-memory state was already updated"""
    logger.error(
        f"Persistence write failed: {error}",
        extra={
            "step": "persistence",
            "operation": operation,
            "collection": collection,
            "record_id": record_id,
            "error_type": type(error).__name__,
        },
    )
