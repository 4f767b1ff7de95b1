"""
Logging setup for bankgen.

Text output by default; JSON lines when BANKGEN_JSON_LOGS is set, so long
stress runs can be shipped to a log collector. Pipeline code attaches
structured fields through ``extra=`` (run_id, phase, batch, ...).
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Optional, TextIO

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(phase_tag)s%(message)s"

# Third-party loggers that are noisy below WARNING
QUIET_LOGGERS = ("faker",)


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per record.
    Captures the pipeline's structured fields from the record if present.
    """

    structured_keys = [
        "run_id",
        "stage",
        "event",
        "phase",
        "table",
        "rows_affected",
        "row_count",
        "batch",
        "chunk",
        "attempt",
        "workers",
        "duration_seconds",
        "error",
    ]

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(
            {key: getattr(record, key) for key in self.structured_keys if hasattr(record, key)}
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        # Decimals, datetimes and exceptions end up in extra= now and then
        return json.dumps(data, default=str)


class PhaseFormatter(logging.Formatter):
    """Human-readable format, prefixed with ``[phase]`` when the record carries one."""

    def format(self, record: logging.LogRecord) -> str:
        phase = getattr(record, "phase", None) or getattr(record, "stage", None)
        record.phase_tag = f"[{phase}] " if phase else ""
        return super().format(record)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "0").lower() in ("1", "true", "yes")


def configure_logging(
    level: int = logging.INFO,
    json_format: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the root logger with a single handler.

    Args:
        level: Logging level (default INFO)
        json_format: Whether to use JSON formatting.
                     If None, checks BANKGEN_JSON_LOGS env var.
        stream: Output stream (default stdout)
    """
    if json_format is None:
        json_format = _env_flag("BANKGEN_JSON_LOGS")

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(PhaseFormatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; configuration happens once in configure_logging()."""
    return logging.getLogger(name)
