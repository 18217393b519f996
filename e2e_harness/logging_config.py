"""
Harness logging.

Log lines emitted while a scenario runs carry that scenario's id, so output
interleaved by parallel workers can be traced back to one scenario. Extra
context is passed as ``extra={"extra_fields": {...}}`` and rendered by both
formatters.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

scenario_id_context: ContextVar[Optional[str]] = ContextVar("scenario_id", default=None)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that are chatty at INFO during a run
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_fields", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for CI log collection."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        scenario_id = scenario_id_context.get()
        if scenario_id:
            entry["scenario_id"] = scenario_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(_extra_fields(record))
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Colored single-line output for local runs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        parts = [f"{color}{record.levelname:8}{self.RESET}", f"[{record.name}]"]

        scenario_id = scenario_id_context.get()
        if scenario_id:
            parts.append(f"[scn:{scenario_id[:24]}]")

        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in _extra_fields(record).items())

        line = " ".join(parts)
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(log_level: str = "INFO", use_json: bool = False) -> logging.Logger:
    """
    Route all harness logging to stdout.

    Args:
        log_level: Level name, e.g. "DEBUG"
        use_json: Emit JSON lines instead of colored text

    Returns:
        The ``e2e_harness`` logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter_class = StructuredFormatter if use_json else HumanReadableFormatter

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter_class(datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers[:] = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("e2e_harness")
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "e2e_harness")


def set_scenario_id(scenario_id: str) -> str:
    """Tag log lines of the current task with a scenario id."""
    scenario_id_context.set(scenario_id)
    return scenario_id


def get_scenario_id() -> Optional[str]:
    return scenario_id_context.get()


def clear_scenario_id() -> None:
    scenario_id_context.set(None)
