"""
Dockside logging - structlog setup for the runtime core.

The core never writes to a user-facing surface. Resolution decisions,
compose probes and process spawns are reported as structured events, and
the application embedding the core decides how they are rendered.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="dockside")
            │
            ▼
        processor chain:
          1. TimeStamper (iso, optional)
          2. merge_contextvars        ← capability=..., bound by log_context()
          3. add_log_level
          4. service name
          5. JSONRenderer (piped stderr) or ConsoleRenderer (terminal)
            │
            ▼
        stderr  (stdout belongs to the commands being run)

        logger = get_logger(__name__)
        logger.info("compose_probe_failed", client_id="docker-compose")

Examples:
    >>> from dockside.core.logging import configure_logging, get_logger, log_context
    >>> configure_logging(level="DEBUG", service="dockside-cli")
    >>> with log_context(capability="orchestrator"):
    ...     get_logger(__name__).debug("client_resolved", client_id="podman-compose")

Tags:
    logging, structlog, dockside

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "dockside"


class _CurrentStderr:
    """Writes to whatever ``sys.stderr`` is at call time.

    Cached loggers outlive stream swaps (test capture, CLI runners), so the
    stream is looked up per write rather than bound at configuration.
    """

    def write(self, text: str) -> int:
        return sys.stderr.write(text)

    def flush(self) -> None:
        sys.stderr.flush()


def _add_service_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "WARNING",
    json_format: bool | None = None,
    service: str = "dockside",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON lines, False for console output,
            None to pick JSON when stderr is not a terminal
        service: Value of the ``service`` key on every record
        add_timestamp: Prefix records with an ISO timestamp
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_service_name,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_CurrentStderr()),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Logger for module ``name``; the name is bound lazily as ``logger_name``."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger_name=name)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` to every record logged inside the block."""
    tokens = structlog.contextvars.bind_contextvars(**values)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


__all__ = [
    "configure_logging",
    "get_logger",
    "log_context",
]
