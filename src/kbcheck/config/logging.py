"""structlog setup for kbcheck.

All log output goes to stderr; stdout is reserved for reports. Records
from stdlib ``logging`` loggers (every kbcheck module uses
``logging.getLogger(__name__)``) and from structlog loggers pass through
the same processor chain, so ``--log-json`` yields one JSON object per
line regardless of origin.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from typing import Any

import structlog

LOGGER_NAME = "kbcheck"

# Third-party loggers held at WARNING even with --verbose.
QUIET_LOGGERS: tuple[str, ...] = ("pluggy",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install a single stderr handler rendering through structlog.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        verbose: Log kbcheck's own DEBUG records.
        log_json: Render JSON lines instead of the console format.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_scan_context(root: str, **fields: object) -> None:
    """Attach *root* (and *fields*) to every log line of the current scan."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(scan_root=root, **fields)


def carry_scan_context[T](fn: Callable[..., T]) -> Callable[..., T]:
    """Wrap *fn* to run with the context bound now, e.g. in pool threads.

    Context variables do not cross into ``ThreadPoolExecutor`` workers on
    their own.
    """
    bound = structlog.contextvars.get_contextvars()

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        with structlog.contextvars.bound_contextvars(**bound):
            return fn(*args, **kwargs)

    return wrapper
