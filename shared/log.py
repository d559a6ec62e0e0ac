#!/usr/bin/env python3
"""
Socket Mode Logging Configuration

Centralized logging setup for consistent formatting across the project.
Supports both development (coloured console) and production (plain) modes,
and always writes a file log under ``logs/``.

Usage:
    from shared.log import get_logger

    logger = get_logger(__name__)
    logger.info("Opening connection...")
    logger.error("Ack failed", extra={"envelope_id": "1d4f...", "msg_type": "slash_commands"})
"""

from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional


# ========================================
#           LOGGING FORMATTERS
# ========================================

class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    # ANSI Color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class GenericFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        # Envelope context passed through ``extra=``
        context = []

        if getattr(record, 'conn', None):
            context.append(f"conn={record.conn}")
        if getattr(record, 'msg_type', None):
            context.append(f"msg={record.msg_type}")
        if getattr(record, 'envelope_id', None):
            context.append(f"env={record.envelope_id[:8]}...")

        message = super().format(record)
        if context:
            return f"[{' '.join(context)}] {message}"
        return message


# ========================================
#           LOGGING CONFIGURATION
# ========================================

_loggers_configured = set()

def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger for the given module.

    Args:
        name: Usually __name__ from the calling module
        level: Override log level ("DEBUG", "INFO", "WARNING", "ERROR")

    Returns:
        Configured logger instance

    Examples:
        logger = get_logger(__name__)
        logger.info("Session starting")

        # With context
        logger.warning("Undecodable frame", extra={
            "conn": "socket-mode",
            "msg_type": "events_api",
        })
    """
    logger = logging.getLogger(name)

    # Only configure each logger once
    if name not in _loggers_configured:
        _configure_logger(logger, level)
        _loggers_configured.add(name)

    return logger


def _configure_logger(logger: logging.Logger, level: Optional[str] = None) -> None:
    """Configure a logger with appropriate handlers and formatters"""

    logger.setLevel(_get_log_level(level))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    _add_console_handler(logger, colored=_is_development())
    _add_file_handler(logger)

    # Prevent duplicate messages from parent loggers
    logger.propagate = False


def set_level(level: str) -> None:
    """Apply ``level`` to every logger configured through this module."""
    log_level = _get_log_level(level)
    for name in _loggers_configured:
        logging.getLogger(name or None).setLevel(log_level)


def _get_log_level(level: Optional[str] = None) -> int:
    """Determine appropriate log level"""

    if level:
        return getattr(logging, level.upper(), logging.INFO)

    # Default based on environment
    return logging.DEBUG if _is_development() else logging.INFO


def _is_development() -> bool:
    """Detect if we're in development mode"""
    return (
        os.getenv('PYTHON_ENV', '').lower() in ['dev', 'development'] or
        'pytest' in sys.modules
    )


def _add_console_handler(logger: logging.Logger, colored: bool = True) -> None:
    """Add console handler with appropriate formatter"""

    fmt = '[%(levelname)-8s][%(asctime)s][%(name)-5s]: %(message)s'
    handler = logging.StreamHandler(sys.stdout)

    if colored and _supports_color():
        formatter = ColoredFormatter(
            fmt=fmt,
            datefmt='%H:%M:%S'
        )
    else:
        formatter = GenericFormatter(
            fmt=fmt,
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _add_file_handler(logger: logging.Logger) -> None:
    """Add file handler, logs go to $SOCKETMODE_LOG_DIR (default ./logs)"""

    log_dir = Path(os.getenv('SOCKETMODE_LOG_DIR', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_dir / "socketmode.log")

    formatter = GenericFormatter(
        fmt='%(asctime)s | %(name)-30s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _supports_color() -> bool:
    """Check if terminal supports color output"""

    # stdout must be a terminal
    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False

    # TERM should not be dumb
    if os.getenv("TERM", "") == "dumb":
        return False

    if sys.platform == "win32":
        return (
            os.getenv("ANSICON") is not None
            or os.getenv("WT_SESSION") is not None
            or os.getenv("TERM_PROGRAM") == "vscode"
        )

    return True


# ========================================
#           CONVENIENCE FUNCTIONS
# ========================================

def configure_root_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the entire application.
    Call this once at application startup.

    Args:
        level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
    """
    root_logger = logging.getLogger()
    _configure_logger(root_logger, level)
    _loggers_configured.add("")
    set_level(level)


def log_envelope(logger: logging.Logger, level: str, message: str,
                 envelope: Optional[Any] = None,
                 **context: Any) -> None:
    """
    Log a Socket Mode envelope event with structured context.

    Args:
        logger: Logger instance
        level: Log level ("debug", "info", "warning", "error")
        message: Log message
        envelope: decoded inbound envelope, used for automatic context extraction
        **context: Additional context fields

    Example:
        log_envelope(logger, "info", "Acknowledged", envelope=env, conn="socket-mode")
    """

    extra_context: Dict[str, Any] = {}

    if envelope is not None:
        extra_context['msg_type'] = getattr(envelope, 'type', None)
        extra_context['envelope_id'] = getattr(envelope, 'envelope_id', None)

    extra_context.update(context)

    log_func = getattr(logger, level.lower())
    log_func(message, extra=extra_context)
