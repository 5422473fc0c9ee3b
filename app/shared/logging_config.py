"""
Structured logging configuration for the journal service and CLI.

The backend logs one JSON object per line in production; the CLI and local
development use a human-readable format. Both carry the correlation ID of
the request (or CLI invocation) that produced the record.

Usage:
    from app.shared.logging_config import setup_logging

    # At startup (main.py, app.cli):
    setup_logging(service_name="reflection-journal")

    # In modules:
    logger = logging.getLogger("Journal.Store")
    logger.info("Entry created", extra={"entry_id": "123"})

Output format (JSON, one line per log):
    {
        "timestamp": "2026-01-28T10:30:00.123456Z",
        "level": "INFO",
        "logger": "Journal.Store",
        "message": "Entry created",
        "service": "reflection-journal",
        "correlation_id": "abc123",
        "entry_id": "123"
    }
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from app.shared.correlation import get_correlation_id


# Attributes every LogRecord has; anything else came in through `extra=`
STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in STANDARD_ATTRS and not key.startswith("_")
    }


class CorrelationIdFilter(logging.Filter):
    """Inject the current correlation_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON for structured logging.

    Includes standard fields (timestamp, level, message) plus any
    extra fields passed to the logger.
    """

    def __init__(self, service_name: str = "reflection-journal"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id and correlation_id != "-":
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for local development and the CLI."""

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", "-")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        prefix = f"{timestamp} [{record.levelname}] [{correlation_id}]"

        extra_parts = [f"{key}={value}" for key, value in _extra_fields(record).items()]
        extras = " | " + ", ".join(extra_parts) if extra_parts else ""

        formatted = f"{prefix} {record.name}: {record.getMessage()}{extras}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(
    service_name: str,
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    stream=None,
) -> None:
    """
    Configure logging for the application.

    Args:
        service_name: Name of the service (e.g., "reflection-journal")
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO
               or value from LOG_LEVEL environment variable.
        json_output: If True, output JSON logs. If False, human-readable.
                     Defaults to True in production (ENVIRONMENT != "development")
        stream: Output stream, stdout by default. The CLI logs to stderr so
                its rendered entries stay clean on stdout.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    log_level = getattr(logging, level, logging.INFO)

    if json_output is None:
        environment = os.getenv("ENVIRONMENT", "production").lower()
        json_output = environment != "development"

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)

    if json_output:
        formatter = JSONFormatter(service_name=service_name)
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for logger_name in ("httpx", "httpcore", "asyncio", "anthropic"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(f"{service_name}.startup").debug(
        "Logging configured",
        extra={
            "log_level": level,
            "json_output": json_output,
            "environment": os.getenv("ENVIRONMENT", "production"),
        }
    )
