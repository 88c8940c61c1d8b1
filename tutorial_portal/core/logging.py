from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from tutorial_portal.core.config import get_settings

_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    return level


def setup_logging(level: int | str | None = None) -> None:
    """Configure structlog to emit JSON logs with request-scoped contextvars."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        stream=sys.stdout,
    )

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(resolved),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
