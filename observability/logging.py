"""Logging configuration for structured JSON logging."""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import logfire

DEFAULT_LOG_FILE = "logs/schema_registry.log"

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

# Attributes every LogRecord carries; anything else came in via `extra`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "exception": (
                self.formatException(record.exc_info) if record.exc_info else None
            ),
            "stack_info": (
                self.formatStack(record.stack_info) if record.stack_info else None
            ),
        }
        for key, value in record.__dict__.items():
            if key not in log_entry and key not in _RESERVED_ATTRS:
                log_entry[key] = value

        # Non-JSON values are stringified, None values dropped
        serializable_entry = {
            k: (
                v
                if isinstance(v, (str, int, float, bool, list, dict, tuple))
                else str(v)
            )
            for k, v in log_entry.items()
            if v is not None
        }
        return json.dumps(serializable_entry, default=str)


def _resolve_level(log_level_arg: Optional[str]) -> tuple[str, int]:
    level_str = (log_level_arg or os.getenv("LOG_LEVEL", "INFO")).upper()
    if level_str not in LOG_LEVELS:
        return "INFO", logging.INFO
    return level_str, LOG_LEVELS[level_str]


def _configure_logfire(root_logger: logging.Logger) -> None:
    """Send traces to Logfire when LOGFIRE_ENABLED and LOGFIRE_TOKEN are set."""
    if os.getenv("LOGFIRE_ENABLED", "false").lower() != "true":
        return
    token = os.getenv("LOGFIRE_TOKEN")
    if not token:
        root_logger.warning(
            "Logfire enabled but LOGFIRE_TOKEN environment variable not set."
        )
        return
    try:
        logfire.configure(send_to_logfire=True, token=token)
        logfire.instrument_httpx()
        root_logger.info("Logfire integration enabled and configured.")
    except Exception as e:
        root_logger.error(f"Failed to configure Logfire: {e}")


def setup_logging(log_level_arg: Optional[str] = None) -> None:
    """Configure the root logger for JSON output to stdout and a log file.

    Args:
        log_level_arg: Console log level (e.g. "DEBUG"). Falls back to the
            LOG_LEVEL environment variable, then INFO. Invalid names mean INFO.
    """
    log_file_path = Path(os.getenv("LOG_FILE", DEFAULT_LOG_FILE))
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    level_str, log_level = _resolve_level(log_level_arg)

    root_logger = logging.getLogger()
    # The file handler records DEBUG regardless of the console level
    root_logger.setLevel(logging.DEBUG)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    formatter = JsonFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(
        log_file_path, maxBytes=10 * 1024 * 1024, backupCount=5  # 10 MB
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    _configure_logfire(root_logger)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging setup complete. Console Level: {level_str}, File Level: DEBUG"
    )
