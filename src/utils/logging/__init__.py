"""
Structured logging for the anonymization engine.

Usage:
    import logging

    from utils.logging import setup_logging

    # Setup logging (call once at application startup)
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Registry loaded", extra={"session_id": "study-42", "entries": 7})

Never pass field values as log context; they are the data being protected.
"""

from .config import configure_from_env, setup_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "configure_from_env",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
