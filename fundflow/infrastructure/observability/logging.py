"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from fundflow.config import settings


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


def _money(value: Decimal) -> str:
    return str(value)


def log_distribution(user_id: str, income_id: str, debt_amount: Decimal, savings_amount: Decimal, remainder_amount: Decimal) -> None:
    """Log how an income was split across the funds"""
    logging.info(
        "Income distributed",
        extra={
            "user_id": user_id,
            "income_id": income_id,
            "step": "income_distributed",
            "debt_amount": _money(debt_amount),
            "savings_amount": _money(savings_amount),
            "remainder_amount": _money(remainder_amount),
        },
    )


def log_transfer(user_id: str, transfer_id: str, from_fund: str, to_fund: str, amount: Decimal, step: str) -> None:
    """Log a journal mutation (step: transfer_created | transfer_reverted)"""
    logging.info(
        "Fund transfer",
        extra={
            "user_id": user_id,
            "transfer_id": transfer_id,
            "step": step,
            "from_fund": from_fund,
            "to_fund": to_fund,
            "amount": _money(amount),
        },
    )


def log_milestone_run(summary: Dict[str, Any], duration_ms: float) -> None:
    """Log counters of one milestone detection run"""
    logging.info(
        "Milestone check completed",
        extra={"step": "milestone_run_complete", "duration_ms": duration_ms, **summary},
    )
