"""structlog setup for MediPass.

Each entry is one snake_case event name plus key/value context, rendered
as a JSON line (deployed) or for the console (local). Level and format
come from ``MediPassSettings`` (``LOG_LEVEL`` / ``LOG_FORMAT``).

Two processors are specific to this service: the request id bound by
``RequestIDMiddleware`` is attached to every entry, and any ``sharing_id``
value is cut down to its redacted prefix before rendering.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any, MutableMapping, TextIO

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

LOG_FORMATS: tuple[str, ...] = ("json", "console")
SHARING_ID_KEYS: tuple[str, ...] = ("sharing_id",)


def level_number(level: str) -> int:
    """Map a level name (``info``, ``WARNING``...) to its numeric value."""
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def _add_request_id(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    request_id = request_id_ctx.get()
    if request_id is not None:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def redact_sharing_ids(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace ``sharing_id`` values with ``share_<millis>_...``."""
    from medipass.sharing.audit import redact_sharing_id

    for key in SHARING_ID_KEYS:
        if key in event_dict:
            value = event_dict[key]
            event_dict[key] = redact_sharing_id(value if isinstance(value, str) else None)
    return event_dict


def configure_logging(
    *,
    level: str = "INFO",
    log_format: str = "json",
    stream: TextIO | None = None,
) -> None:
    """(Re)configure structlog for the process.

    Raises:
        ValueError: Unknown level name or format.
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_request_id,
        redact_sharing_ids,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if log_format == "json":
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_number(level)),
        logger_factory=structlog.PrintLoggerFactory(stream or sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Lazy logger that picks up the configuration current at each call."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger=name)
