#!/usr/bin/env python3
"""
Duplex chat client logging configuration

Centralized logging setup for consistent formatting across the project.
Log records go to stderr so they never mix with chat output on stdout.

Usage:
    from shared.log import get_logger

    logger = get_logger(__name__)
    logger.info("Connecting...")
    logger.error("Send failed", extra={"user": "alice", "peer": "127.0.0.1:4000"})
"""

from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from typing import Optional


# ========================================
#           LOGGING FORMATTERS
# ========================================

class GenericFormatter(logging.Formatter):
    """Prefixes the message with session context passed through ``extra``"""

    CONTEXT_FIELDS = (("user", "user"), ("peer", "peer"), ("loop", "loop"))

    def format(self, record: logging.LogRecord) -> str:
        context = []
        for attr, label in self.CONTEXT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                context.append(f"{label}={value}")

        if not context:
            return super().format(record)

        original = record.msg, record.args
        record.msg = f"[{' '.join(context)}] {record.getMessage()}"
        record.args = ()
        try:
            return super().format(record)
        finally:
            record.msg, record.args = original


class ColoredFormatter(GenericFormatter):
    """Colored level names on top of the session context prefix"""

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


# ========================================
#           LOGGING CONFIGURATION
# ========================================

_loggers_configured = set()

CONSOLE_FMT = '[%(levelname)-8s][%(asctime)s][%(name)-5s]: %(message)s'
FILE_FMT = '%(asctime)s | %(name)-30s | %(levelname)-8s | %(message)s'


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger for the given module.

    Args:
        name: Usually __name__ from the calling module
        level: Override log level ("DEBUG", "INFO", "WARNING", "ERROR")

    Returns:
        Logger instance. Module loggers propagate to the root logger, which
        ``configure_root_logging`` sets up once at startup.
    """
    logger = logging.getLogger(name)

    if name not in _loggers_configured:
        if level:
            logger.setLevel(_get_log_level(level))
        _loggers_configured.add(name)

    return logger


def configure_root_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """
    Configure root logging for the entire application.
    Call this once at application startup.

    Args:
        level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        log_file: Optional file that receives a copy of every record
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_get_log_level(level))

    # Clear existing handlers to avoid duplicates on repeated configuration
    root_logger.handlers.clear()

    _add_console_handler(root_logger, colored=_supports_color())
    if log_file is not None:
        _add_file_handler(root_logger, Path(log_file))


def _get_log_level(level: Optional[str] = None) -> int:
    """Determine appropriate log level"""

    if level:
        return getattr(logging, level.upper(), logging.WARNING)

    return logging.DEBUG if _is_development() else logging.WARNING


def _is_development() -> bool:
    """Detect if we're in development mode"""
    return os.getenv('PYTHON_ENV', '').lower() in ['dev', 'development']


def _add_console_handler(logger: logging.Logger, colored: bool = True) -> None:
    """Add stderr handler with appropriate formatter"""

    handler = logging.StreamHandler(sys.stderr)

    if colored:
        formatter = ColoredFormatter(fmt=CONSOLE_FMT, datefmt='%H:%M:%S')
    else:
        formatter = GenericFormatter(fmt=CONSOLE_FMT, datefmt='%Y-%m-%d %H:%M:%S')

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _add_file_handler(logger: logging.Logger, log_file: Path) -> None:
    """Add file handler"""

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")

    formatter = GenericFormatter(fmt=FILE_FMT, datefmt='%Y-%m-%d %H:%M:%S')

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _supports_color(stream=None) -> bool:
    """Check if the log stream supports color output"""

    stream = stream if stream is not None else sys.stderr

    # stream must be a terminal
    if not (hasattr(stream, "isatty") and stream.isatty()):
        return False

    # TERM should not be dumb
    if os.getenv("TERM", "") == "dumb":
        return False

    # Windows-specific check
    if sys.platform == "win32":
        # On modern Windows terminals, ANSI colors are supported
        return os.getenv("ANSICON") is not None or os.getenv("WT_SESSION") is not None or os.getenv("TERM_PROGRAM") == "vscode" or "WindowsTerminal" in os.getenv("TERM", "")

    return True
