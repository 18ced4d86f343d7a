"""
Logging configuration for heatloss.

Console lines go to stderr so ``--json`` output on stdout stays parseable.
Resolver and engine records carry context through ``extra``:

    logger.warning("Step failed", extra={"postcode": "SS89HB", "step": "table"})

Console lines append the context as ``[postcode=SS89HB, step=table]``. When a
log file is configured (``HEATLOSS_LOG_FILE`` or ``heatloss --log-file``),
every record is also written there as one JSON object per line.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

CONTEXT_KEYS = ("postcode", "room", "step", "provider")

# Third-party loggers that only matter when something is wrong
QUIET_LOGGERS = ("urllib3", "requests", "asyncio")


def _context(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)}


class HeatlossFormatter(logging.Formatter):
    """Console formatter: level colours and a trailing context block."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream=None):
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()
        super().__init__(fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
        if self.use_colors:
            return f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"
        return line


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per record, for log files."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Replace the root handlers with a stderr console handler and, if
    ``log_file`` is given, a DEBUG-level JSON-lines file handler.
    """
    numeric = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else numeric)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(HeatlossFormatter(stream=sys.stderr))
    console.setLevel(numeric)
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(JsonLinesFormatter())
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


_initialized = False


def ensure_logging(level: Optional[str] = None, log_file: Optional[Union[str, Path]] = None) -> None:
    """Set up logging once per process; later calls are no-ops."""
    global _initialized
    if not _initialized:
        setup_logging(level or "INFO", log_file)
        _initialized = True
