from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Iterable, Sequence

from settings import get_settings

# Context carried on correlator, loader and runner records via ``extra=``.
CONTEXT_KEYS = (
    "a_id",
    "b_id",
    "distance_m",
    "record_id",
    "row_number",
    "reason",
    "path",
    "record_count",
    "match_count",
    "processing_ms",
)

# Per-request chatter from the API client is only interesting when it fails.
_QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def _render_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    text = str(value)
    return f'"{text}"' if " " in text else text


class ContextualFormatter(logging.Formatter):
    """Appends ``key=value`` pairs for the known context keys set on a record."""

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._context_keys: Sequence[str] = tuple(context_keys or CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context: list[str] = []
        for key in self._context_keys:
            value = getattr(record, key, None)
            if value is not None:
                context.append(f"{key}={_render_value(value)}")
        if context:
            return f"{message} | {' '.join(context)}"
        return message


def configure_logging(level: str | int | None = None) -> None:
    """Route correlator logs to stderr with UTC timestamps and record context."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ %(levelname)-7s %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "context_keys": list(CONTEXT_KEYS),
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "contextual",
                }
            },
            "loggers": {
                name: {"level": "WARNING"} for name in _QUIET_LOGGERS
            },
            "root": {"handlers": ["stderr"], "level": log_level},
        }
    )

    _configured = True
