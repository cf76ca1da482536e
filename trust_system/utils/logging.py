"""structlog setup for the moderation and audit trail.

Moderation, audit and job-run logs are event-style (``log.info("claim_rejected",
pending_id=...)``) so they can be correlated with the audit collections. A job
run binds its correlation id into contextvars with ``run_context()``; every
structlog line emitted inside the run carries it.
"""

import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars

from trust_system.config.settings import settings


def configure_structured_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install structlog processors; console rendering only on a TTY."""
    level = (level or settings.log_level).upper()
    fmt = (fmt or settings.log_format).lower()

    if fmt == "console" and sys.stderr.isatty():
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(
    name: str,
    correlation_id: Optional[str] = None,
    **context: Any,
) -> structlog.BoundLogger:
    """
    Logger bound with ``component=name`` plus any extra context.

    Example:
        >>> log = get_structured_logger("ModerationGate", policy="service")
        >>> log.info("claim_accepted", pending_id="abc", event_id="e-1")
    """
    log = structlog.get_logger(name).bind(component=name)
    if correlation_id:
        log = log.bind(correlation_id=correlation_id)
    if context:
        log = log.bind(**context)
    return log


def get_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def run_context(job: str, correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind ``job`` and a correlation id for the duration of one job run."""
    correlation_id = correlation_id or get_correlation_id()
    bind_contextvars(job=job, correlation_id=correlation_id)
    try:
        yield correlation_id
    finally:
        unbind_contextvars("job", "correlation_id")


configure_structured_logging()


__all__ = [
    "configure_structured_logging",
    "get_correlation_id",
    "get_structured_logger",
    "run_context",
]
