"""
Logging configuration: suppresses health check access logs and redacts
credentials from log records.
"""

import logging
import logging.config
import re
from typing import Any, Dict

_SECRET_PATTERNS = [
    (re.compile(r"(password[_-]?(?:hash)?['\"]?\s*[:=]\s*['\"]?)[^'\",\s}]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(session[_-]?id['\"]?\s*[:=]\s*['\"]?)[0-9a-f]{8,}", re.IGNORECASE), r"\1***"),
    (re.compile(r"\$2[abxy]?\$\d{2}\$[./A-Za-z0-9]{53}"), "***"),
]


class HealthCheckFilter(logging.Filter):
    """Filter to suppress health check endpoint logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out health check requests from uvicorn access logs."""
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if "/health" in message and "GET" in message:
                return False
        return True


class SecretRedactionFilter(logging.Filter):
    """Mask passwords, bcrypt digests and session ids in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern, replacement in _SECRET_PATTERNS:
            redacted = pattern.sub(replacement, redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def get_logging_config(log_level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with health check suppression and redaction."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
            },
            "secret_redaction_filter": {
                "()": SecretRedactionFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["secret_redaction_filter"]
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "userbase": {
                "handlers": ["default"],
                "level": log_level,
                "propagate": False
            }
        },
        "root": {
            "level": "INFO",
            "handlers": ["default"]
        }
    }
