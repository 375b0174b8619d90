from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdf2word.core.config import get_settings
from pdf2word.core.exceptions import ConversionError

__all__: list[str] = ["add_exception_handlers"]

logger = structlog.get_logger("errors")


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get(
        "x-request-id"
    )


def _build_error_payload(
    message: str,
    request_id: Optional[str] = None,
    details: Any = None,
) -> Dict[str, Any]:
    """Return the JSON error body shown to clients.

    Parameters
    ----------
    message:
        Human-readable description, displayed as-is by the web client.
    request_id:
        Correlation ID injected by `RequestLoggingMiddleware`.
    details:
        Optional extra context. Omitted from the body when ``None``.
    """

    payload: Dict[str, Any] = {"error": message, "request_id": request_id}
    if details is not None:
        payload["details"] = details
    return payload


def _expose_details(status_code: int) -> bool:
    """Server-side failure details are only shown in development mode."""
    return status_code < 500 or get_settings().is_development


async def _conversion_error_handler(
    request: Request,
    exc: ConversionError,
) -> JSONResponse:
    """Map pipeline errors onto their HTTP status."""

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "conversion_error",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.message,
        details=exc.details,
    )

    details = exc.details if _expose_details(exc.status_code) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_error_payload(exc.message, _request_id(request), details),
    )


async def _http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle routing errors (unknown path, wrong method) and explicit raises."""

    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=str(exc.detail),
    )

    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_error_payload(message, _request_id(request)),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed form data is reported as a bad request."""

    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=str(exc.errors()),
    )

    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_build_error_payload("Invalid request", _request_id(request), details),
    )


async def _unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:  # noqa: D401 – FastAPI handler sig
    """Catch-all for unexpected errors – returns HTTP 500."""

    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
    )

    details = str(exc) if _expose_details(HTTPStatus.INTERNAL_SERVER_ERROR) else None
    request_id = _request_id(request)
    # Rendered by ServerErrorMiddleware, outside RequestLoggingMiddleware, so the
    # correlation header has to be set here.
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content=_build_error_payload("Internal server error", request_id, details),
        headers=headers,
    )


def add_exception_handlers(app: FastAPI) -> None:  # noqa: D401 – imperative
    """Register all global exception handlers on **app**."""

    app.add_exception_handler(ConversionError, _conversion_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
