"""Logging configuration for autoupdater.

Provides centralized logging with secret redaction to ensure API tokens
are never written to log files.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional


# Secret patterns to redact from logs
SECRET_PATTERNS = [
    # Authorization header values
    (re.compile(r'(authorization["\'\s:=]+(?:token|bearer)\s+)[^\s,}\]"\']+', re.IGNORECASE),
     r'\1[REDACTED]'),
    # Token in various formats
    (re.compile(r'(token["\'\s:=]+)[^\s,}\]"\']+', re.IGNORECASE), r'\1[REDACTED]'),
    # GitHub personal access tokens
    (re.compile(r'\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})'),
     '[REDACTED]'),
    # URLs with credentials
    (re.compile(r'(https?://)[^/\s:@]+:[^/\s@]+@'), r'\1[REDACTED]@'),
]


class SecretRedactingFormatter(logging.Formatter):
    """Custom formatter that redacts secrets from log messages."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, redacting any secrets."""
        message = super().format(record)
        for pattern, replacement in SECRET_PATTERNS:
            message = pattern.sub(replacement, message)
        return message


LOGGER_NAME = "autoupdater"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def get_logger(module: str) -> logging.Logger:
    """
    Get the logger of a package module.

    Args:
        module: Module name, e.g. "resolver" for autoupdater.resolver

    Returns:
        Logger instance below the package logger
    """
    if module == LOGGER_NAME or module.startswith(LOGGER_NAME + "."):
        return logging.getLogger(module)
    return logging.getLogger(f"{LOGGER_NAME}.{module}")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure package logging with secret redaction.

    The console shows records at level and above. The log file, when
    given, keeps everything down to DEBUG so a failed update can be
    diagnosed after the fact.

    Args:
        level: Console logging level (default INFO)
        log_file: Optional file path for log output
        console: Whether to output to stderr (default True)

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Repeated setup replaces the previous handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(SecretRedactingFormatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            SecretRedactingFormatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)

    return logger
