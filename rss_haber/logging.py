from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

import structlog


def _add_ts(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("ts", datetime.now(timezone.utc).isoformat(timespec="milliseconds"))
    return event_dict


def _add_service(service_name: str):
    def _inner(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict
    return _inner


def configure_logging(
    service_name: str = "rss_haber",
    *,
    level: int | str = logging.INFO,
    json: bool = True,
) -> None:
    """
    Configure a single structlog stack for the library, CLI and workers.

    JSON lines go to stderr by default; `json=False` switches to the console renderer.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            _add_ts,
            structlog.processors.add_log_level,
            _add_service(service_name),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_library_default() -> None:
    # Stdlib routing: below WARNING is dropped, the rest reaches stderr or host handlers
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(**initial: Any) -> structlog.BoundLogger:
    # Lazy proxy: binds to whatever configuration is active at first use
    return structlog.get_logger(**initial)


if not structlog.is_configured():
    _configure_library_default()
