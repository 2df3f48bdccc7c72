"""Logging configuration for the storefront.

Console output for interactive runs plus a daily JSONL file that keeps
structured page events (fetch failures, skipped sections, form submissions).
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = [
    "setup_logging",
    "get_logger",
    "log_page_event",
    "LOG_DIR",
]

ROOT_LOGGER = "storefront"

LOG_DIR = Path(os.getenv("STOREFRONT_LOG_DIR", str(Path(__file__).parent.parent / "logs")))

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# ANSI colours per level name, used only on terminals
LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET_COLOR = "\033[0m"

# Keys every JSONL line starts with; event data never overwrites them
_RESERVED_KEYS = ("timestamp", "level", "logger", "event_type", "message")


class JSONLFileHandler(logging.Handler):
    """Appends one JSON object per record to ``<prefix>_YYYYMMDD.jsonl``."""

    def __init__(self, log_dir: Path, prefix: str = ROOT_LOGGER):
        super().__init__()
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix

    def current_file(self) -> Path:
        return self.log_dir / f"{self.prefix}_{datetime.now():%Y%m%d}.jsonl"

    def to_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event_type": getattr(record, "event_type", None),
            "message": record.getMessage(),
        }
        for key, value in getattr(record, "extra_data", {}).items():
            if key not in _RESERVED_KEYS:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = logging.Formatter().formatException(record.exc_info)
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.to_entry(record), ensure_ascii=False, default=str)
            with open(self.current_file(), "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """Stream handler that colours the level name when writing to a tty."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        isatty = getattr(self.stream, "isatty", None)
        color = LEVEL_COLORS.get(record.levelname)
        if color and isatty is not None and isatty():
            text = text.replace(record.levelname, f"{color}{record.levelname}{RESET_COLOR}", 1)
        return text


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Configure the ``storefront`` logger tree.

    Args:
        level: Console and logger level (default: INFO)
        log_to_file: Also write every record, DEBUG included, to the JSONL file
        log_to_console: Write to stdout
        log_dir: Directory for JSONL files (default: LOG_DIR)

    Returns:
        The ``storefront`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if log_to_file else level)
    logger.handlers.clear()

    if log_to_console:
        console = ColoredConsoleHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(console)

    if log_to_file:
        logger.addHandler(JSONLFileHandler(log_dir or LOG_DIR))

    # Connection pool chatter only when debugging
    logging.getLogger("urllib3").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger below the storefront namespace ('page' -> 'storefront.page')."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_page_event(
    event_type: str,
    data: Dict[str, Any],
    level: int = logging.INFO,
    logger_name: str = ROOT_LOGGER,
) -> None:
    """Log a structured storefront event.

    ``data`` lands as top-level keys of the JSONL line; an optional
    ``message`` key becomes the record text (default: the event type).
    """
    logger = get_logger(logger_name)
    if not logger.isEnabledFor(level):
        return

    record = logger.makeRecord(
        logger.name,
        level,
        "(storefront)",
        0,
        data.get("message", event_type),
        (),
        None,
    )
    record.event_type = event_type
    record.extra_data = {k: v for k, v in data.items() if k != "message"}
    logger.handle(record)
