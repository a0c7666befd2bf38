"""Probe logging: stdlib loggers rendered through structlog.

Modules log with ``logging.getLogger(__name__)``. ``configure_logging``
installs one structlog ``ProcessorFormatter`` on the root handlers, so stdlib
records and structlog events share the same rendering. Fields bound with
``bind_run_context`` (target, loader number, run state) are merged into every
record emitted while a run is in progress.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from lp_common.config.env import parse_bool_env

LEVEL_ENV = "LP_LOG_LEVEL"
JSON_ENV = "LP_LOG_JSON"
FILE_ENV = "LP_LOG_FILE"


def _resolve_level(value: str | int | None, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if value is None:
        return logging.INFO
    if isinstance(value, int):
        return value
    if value.strip().isdigit():
        return int(value)
    return logging.getLevelNamesMapping().get(value.strip().upper(), logging.INFO)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _configure_structlog() -> None:
    structlog.configure(
        processors=[*_shared_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _build_handlers(formatter: logging.Formatter, log_file: str | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    *,
    level: str | int | None = None,
    debug: bool = False,
    log_file: str | None = None,
    json: bool | None = None,
    force: bool = False,
) -> None:
    """Configure root logging for the probe.

    Explicit arguments win over ``LP_LOG_LEVEL``, ``LP_LOG_JSON`` and
    ``LP_LOG_FILE``. Without ``force``, handlers already installed on the root
    logger (by a host application or the test runner) are left alone and only
    structlog is configured.
    """
    _configure_structlog()
    root = logging.getLogger()
    if root.handlers and not force:
        return

    use_json = parse_bool_env(os.environ.get(JSON_ENV)) if json is None else json
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_shared_processors(),
    )
    handlers = _build_handlers(
        formatter, os.environ.get(FILE_ENV) if log_file is None else log_file
    )

    if force:
        for handler in list(root.handlers):
            root.removeHandler(handler)
    root.setLevel(_resolve_level(level or os.environ.get(LEVEL_ENV), debug))
    for handler in handlers:
        root.addHandler(handler)


def bind_run_context(**fields: Any) -> None:
    """Attach ``fields`` to every record logged until ``clear_run_context``."""
    structlog.contextvars.bind_contextvars(**fields)


def clear_run_context() -> None:
    structlog.contextvars.clear_contextvars()
