"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from lunch_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat()
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


def log_recompute(
    sequence: int,
    user_id: Optional[str],
    outcome: str,
    spent_cents: int,
    experiences_logged: int,
    duration_ms: float,
    error: Optional[str] = None,
) -> None:
    """Log structured recompute outcome for analysis"""
    extra = {
        "sequence": sequence,
        "user_id": user_id,
        "step": "recompute_complete",
        "outcome": outcome,
        "spent_cents": spent_cents,
        "experiences_logged": experiences_logged,
        "duration_ms": duration_ms,
    }
    if error is not None:
        extra["error"] = error
        logging.warning("Recompute failed", extra=extra)
    else:
        logging.info("Recompute completed", extra=extra)


def log_achievement_unlocked(user_id: Optional[str], achievement_id: str, points: int, total_points: int) -> None:
    """Log a one-time achievement unlock"""
    logging.info(
        "Achievement unlocked",
        extra={
            "user_id": user_id,
            "step": "achievement_unlocked",
            "achievement_id": achievement_id,
            "points": points,
            "total_points": total_points,
        },
    )


def log_request(
    request_id: str,
    user_id: Optional[str],
    method: str,
    endpoint: str,
    status: int,
    duration_ms: float,
) -> None:
    """Log one completed HTTP request"""
    logging.info(
        "Request completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "request_complete",
            "method": method,
            "endpoint": endpoint,
            "status": status,
            "duration_ms": duration_ms,
        },
    )
