# src/dualpin/core/logging.py
"""Structured logging for dualpin.

Modules log key/value events with structlog.get_logger(__name__). This module
wires structlog into stdlib logging once per process, so that httpx and
SQLAlchemy records render through the same chain as dualpin's own events.

Logs never go to stdout: the CLI prints results there (pin --json must stay
machine-readable).
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Third-party loggers clamped to WARNING or above. httpx logs every request
# line, and some gateways carry credentials in query strings.
_THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool")

# Event keys whose values are credentials
_SECRET_KEYS = frozenset({"authorization", "auth_token", "password", "token"})

REDACTED = "***"


def _redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in event_dict.keys() & _SECRET_KEYS:
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _drop_formatter_bookkeeping(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    # ProcessorFormatter adds these to every record it handles
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def _pre_chain() -> list[Any]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        _redact_secrets,
    ]


def _render_chain(json_output: bool, stream: TextIO) -> list[Any]:
    if json_output:
        return [
            _drop_formatter_bookkeeping,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    colors = hasattr(stream, "isatty") and stream.isatty()
    return [_drop_formatter_bookkeeping, structlog.dev.ConsoleRenderer(colors=colors)]


def configure_logging(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route structlog and stdlib logging to one handler.

    Safe to call repeatedly; each call replaces the root handler. The CLI
    calls it once from its callback and again after settings are loaded.

    Args:
        json_output: One JSON object per line instead of console rendering
        level: DEBUG, INFO, WARNING or ERROR
        stream: Destination (default: sys.stderr at call time)
    """
    log_level = logging.getLevelNamesMapping()[level.upper()]
    target = stream if stream is not None else sys.stderr
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration (CLI settings, tests) must reach existing loggers
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(target)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output, target), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    third_party_level = max(log_level, logging.WARNING)
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
