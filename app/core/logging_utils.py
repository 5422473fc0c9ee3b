"""
Logging utilities for safe logging of user data and sensitive information.

Journal entries are personal text, so anything derived from a prompt or a
reflection goes through these helpers before it reaches a log line.
"""
import re
from typing import Any


# Sensitive keys that should be redacted in logs
SENSITIVE_KEYS = [
    "api_key", "token", "password", "secret", "auth",
    "email", "phone", "access_token", "bearer", "authorization",
]


def sanitize_for_logging(data: Any, max_len: int = 100) -> Any:
    """
    Sanitize data for safe logging - redacts PII and secrets.

    Args:
        data: The data to sanitize (can be dict, list, str, or other types)
        max_len: Maximum length for string values before truncation

    Returns:
        Sanitized version of the data safe for logging
    """
    if data is None:
        return "None"

    # Handle dictionaries - recursively sanitize values
    if isinstance(data, dict):
        sanitized = {}
        for k, v in data.items():
            if any(sensitive in k.lower() for sensitive in SENSITIVE_KEYS):
                sanitized[k] = "***REDACTED***"
            else:
                sanitized[k] = sanitize_for_logging(v, max_len)
        return sanitized

    if isinstance(data, list):
        return [sanitize_for_logging(item, max_len) for item in data]

    if isinstance(data, str):
        cleaned = sanitize_log_message(data)
        if len(cleaned) > max_len:
            return cleaned[:max_len] + "..."
        return cleaned

    return sanitize_for_logging(str(data), max_len)


def redact_emails(text: str) -> str:
    """Replace email addresses with [EMAIL_REDACTED]."""
    email_pattern = r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'
    return re.sub(email_pattern, '[EMAIL_REDACTED]', text)


def redact_phone_numbers(text: str) -> str:
    """Replace phone-number-looking digit runs with [PHONE_REDACTED]."""
    phone_patterns = [
        r'\+\d{1,3}[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{2,4}[-.\s]?\d{3,9}',  # International
        r'\(?\b\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b',  # US format
    ]

    result = text
    for pattern in phone_patterns:
        result = re.sub(pattern, '[PHONE_REDACTED]', result)

    return result


def sanitize_log_message(message: str) -> str:
    """
    Sanitize a log message by redacting PII.

    Args:
        message: The log message to sanitize

    Returns:
        Sanitized message safe for logging
    """
    message = redact_emails(message)
    message = redact_phone_numbers(message)
    # Single-line output
    message = re.sub(r'[\x00-\x1F\x7F]', ' ', message)
    return message


def preview(text: str, max_len: int = 50) -> str:
    """Short, redacted preview of user text for log lines."""
    return sanitize_for_logging(text or "", max_len)
