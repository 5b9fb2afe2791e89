"""Logging for Kindling tools.

All handlers write to stderr (or a rotating file) so that command output on
stdout stays machine readable. Loggers live under the ``KINDLING.`` namespace.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from typing import Dict, Optional

# LogRecord attributes that are not user supplied ``extra`` fields
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, including any ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                entry[key] = value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class StandardFormatter(logging.Formatter):
    """``time LEVEL [logger] message``, level colored when stderr is a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: Optional[bool] = None):
        super().__init__()
        self.use_color = sys.stderr.isatty() if use_color is None else use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8s}"
        if self.use_color and record.levelname in self.COLORS:
            level = f"{self.COLORS[record.levelname]}{level}{self.RESET}"
        text = f"{self.formatTime(record)} {level} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def _level(name: str, default: int = logging.WARNING) -> int:
    value = getattr(logging, str(name).upper(), None)
    return value if isinstance(value, int) else default


def setup_logging(
    log_level: str = "WARNING",
    log_format: str = "standard",
    log_file: Optional[str] = None,
    component_levels: Optional[Dict[str, str]] = None,
) -> None:
    """Replace root handlers with a stderr handler and an optional rotating file.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "standard" or "json"
        log_file: Optional path of a rotating log file (10MB x 5)
        component_levels: Per-logger overrides, e.g. {"KINDLING.Heat": "DEBUG"}
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    level = _level(log_level)
    root.setLevel(level)
    formatter = JSONFormatter() if log_format.lower() == "json" else StandardFormatter()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            handlers.append(logging.handlers.RotatingFileHandler(
                log_file, maxBytes=10_000_000, backupCount=5, encoding="utf-8"
            ))
        except OSError as e:
            root.warning(f"Failed to set up file logging: {e}")

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for component, component_level in (component_levels or {}).items():
        logging.getLogger(component).setLevel(_level(component_level, logging.INFO))

    logging.getLogger("KINDLING").debug(f"Logging initialized: level={log_level}, format={log_format}")


def get_logger(name: str) -> logging.Logger:
    """Logger under the KINDLING namespace ("Heat" -> "KINDLING.Heat")."""
    if name == "KINDLING" or name.startswith("KINDLING."):
        return logging.getLogger(name)
    return logging.getLogger(f"KINDLING.{name}")


__all__ = ["setup_logging", "get_logger", "JSONFormatter", "StandardFormatter"]
