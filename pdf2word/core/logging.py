"""Structured JSON logging for the conversion service.

Every event is one JSON line on stdout carrying ``service``, ``version``,
``level``, ``timestamp`` and the ``request_id``/``path`` of the request that
produced it (``null`` outside a request). Paths may be passed to loggers as
:class:`pathlib.Path` objects; they are rendered as strings.
"""

from __future__ import annotations

import logging
import sys
import time
import uuid
from pathlib import PurePath
from typing import Any, Awaitable, Callable, FrozenSet

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from structlog.types import EventDict, Processor

from pdf2word import __version__

__all__: list[str] = [
    "configure_logging",
    "RequestLoggingMiddleware",
]

SERVICE_NAME = "pdf2word"

# Polled endpoints and static assets are only logged at debug level.
_QUIET_PREFIXES: FrozenSet[str] = frozenset({"/health", "/static/"})


def _ensure_request_context(
    logger: Any,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Guarantee *request_id* and *path* keys exist in *event_dict*."""

    event_dict.setdefault("request_id", None)
    event_dict.setdefault("path", None)
    return event_dict


def _add_service_info(
    logger: Any,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def _stringify_paths(
    logger: Any,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """JSONRenderer cannot serialise ``Path``; render them as plain strings."""

    for key, value in event_dict.items():
        if isinstance(value, PurePath):
            event_dict[key] = str(value)
    return event_dict


_JSON_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    _ensure_request_context,
    _add_service_info,
    _stringify_paths,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]


def _configure_stdlib_logging(level: int) -> None:
    """Route uvicorn/starlette records to stderr with a bare formatter."""

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s %(levelname)s %(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # pdfminer reports every malformed object at WARNING; keep it out of the
    # service log unless debugging.
    pdfminer_level = level if level <= logging.DEBUG else logging.ERROR
    logging.getLogger("pdfminer").setLevel(pdfminer_level)


_LOGGING_CONFIGURED: bool = False


def configure_logging(debug: bool = False) -> None:
    """Initialise `structlog` for the entire process.

    Only the first call has any effect; the app module calls this at import
    time and the console entry point may call it again.
    """

    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    level: int = logging.DEBUG if debug else logging.INFO
    _configure_stdlib_logging(level)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        processors=_JSON_PROCESSORS,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _LOGGING_CONFIGURED = True


def _is_quiet(path: str) -> bool:
    return any(path == p or path.startswith(p) for p in _QUIET_PREFIXES)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of each request and log its outcome.

    The id is taken from an incoming ``X-Request-ID`` header when present,
    stored on ``request.state`` for the error handlers and echoed back on the
    response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id: str = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        path = request.url.path
        logger = structlog.get_logger("http")
        log = logger.debug if _is_quiet(path) else logger.info

        started = time.perf_counter()
        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            path=path,
            method=request.method,
        ):
            try:
                response: Response = await call_next(request)
            except Exception:
                logger.exception(
                    "request_failed",
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                raise

            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

        response.headers["X-Request-ID"] = request_id
        return response
