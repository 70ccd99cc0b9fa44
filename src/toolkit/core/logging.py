"""
Structured logging for toolkit.

The API process (request handlers plus the dispatcher thread) and the
CLI all log through structlog:

- JSON lines when stdout is not a terminal, which is how
  ``docker compose logs`` sees the container
- coloured key/value lines on a terminal
- CLI commands log to stderr so ``--json`` output on stdout stays
  parseable

Processor chain, in order: timestamp, bound context (``request_id``,
``schedule_id``, ...), level, stack/exception info, ``service``,
secret redaction, renderer.

Push tokens, ID tokens and OAuth access tokens never reach a log line
in full: values under :data:`SECRET_KEYS` are cut down to their last
few characters.

Usage:
    >>> from toolkit.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO")
    >>> get_logger(__name__).info("schedule_sent", schedule_id=42)
"""

from __future__ import annotations

import logging
import sys
from functools import partial
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SECRET_KEYS = frozenset({"push_token", "token", "access_token", "id_token", "firebase_auth", "authorization"})
_VISIBLE_TAIL = 6

# Chatty at INFO; raised to WARNING unless toolkit itself runs at DEBUG
_NOISY_LOGGERS = ("selenium", "urllib3", "httpx", "httpcore", "google.auth", "uvicorn.access")

_service = "toolkit"


def _stamp_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", _service)
    return event_dict


def mask_secret(value: Any) -> str:
    """``"abcdefghijkl"`` -> ``"***ghijkl"``; short values are hidden entirely."""
    text = str(value)
    if len(text) <= _VISIBLE_TAIL * 2:
        return "***"
    return "***" + text[-_VISIBLE_TAIL:]


def _redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = mask_secret(event_dict[key])
    return event_dict


def _print_logger(to_stderr: bool, *args: Any) -> structlog.PrintLogger:
    # Stream looked up per logger; test runners swap sys.stdout/sys.stderr
    return structlog.PrintLogger(sys.stderr if to_stderr else sys.stdout)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "toolkit",
    add_timestamp: bool = True,
    to_stderr: bool = False,
) -> None:
    """(Re)configure structlog and the stdlib root logger.

    Args:
        level: Minimum level name; unknown names fall back to INFO.
        json_format: JSON lines when True, console when False, and
            auto-detected from the output stream when None.
        service: Value of the ``service`` key on every line.
        add_timestamp: Prefix an ISO-8601 ``timestamp``.
        to_stderr: Send all logging to stderr.
    """
    global _service
    _service = service

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    stream = sys.stderr if to_stderr else sys.stdout
    if json_format is None:
        json_format = not stream.isatty()

    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _stamp_service,
        _redact_secrets,
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=partial(_print_logger, to_stderr),
        # reconfigured per CLI invocation and per app startup
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=stream, level=numeric_level, force=True)
    library_level = numeric_level if numeric_level <= logging.DEBUG else max(numeric_level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str | None = None) -> Any:
    """A lazy structlog logger, with ``logger_name=<name>`` bound when *name* is given.

    ``logger`` itself cannot be used as the key: structlog reserves it for
    the wrapped logger.
    """
    return structlog.get_logger(logger_name=name) if name else structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Attach *kwargs* to every later log line in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind keys for the duration of a ``with`` block.

    Used by the dispatcher so every line about one send carries the
    schedule id::

        with LogContext(schedule_id=7, project="demo"):
            logger.info("fcm_sent")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context)


__all__ = [
    "SECRET_KEYS",
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "mask_secret",
    "unbind_context",
]
