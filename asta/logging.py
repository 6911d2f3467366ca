"""
Structured Logging for asta

Provides consistent, structured logging across the codebase.
Compatible with JSON logging for production environments.
"""

import json
import logging
import sys
from typing import Any

# ==============================================================================
# Logger Configuration
# ==============================================================================


def setup_logger(
    name: str = "asta",
    level: int = logging.WARNING,
    structured: bool = False,
) -> logging.Logger:
    """Setup logger with optional structured logging.

    Args:
        name: Logger name
        level: Logging level
        structured: Use JSON structured logging

    Returns:
        Configured logger

    Example:
        logger = setup_logger("asta", level=logging.DEBUG)
        logger.debug("Compiled pattern", extra={"predicates": 2})
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields
        if hasattr(record, "extra"):
            log_data.update(record.extra)  # type: ignore[arg-type]

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


# ==============================================================================
# Default Logger
# ==============================================================================


default_logger = logging.getLogger("asta")


def get_logger(name: str | None = None) -> logging.Logger:
    """Get logger instance.

    Args:
        name: Logger name (defaults to "asta")

    Returns:
        Logger instance
    """
    if name is None:
        return default_logger
    return logging.getLogger(f"asta.{name}")


__all__ = [
    "setup_logger",
    "get_logger",
    "StructuredFormatter",
]
