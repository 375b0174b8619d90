"""pdf2word ─ FastAPI application
================================

Run locally with::

    uvicorn pdf2word.api.app:app --reload

or through the ``pdf2word`` console script (see :pymod:`pdf2word.main`).
"""

from __future__ import annotations

# third-party
import structlog
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

# local imports
from pdf2word import __version__
from pdf2word.api.errors import add_exception_handlers
from pdf2word.api.routes import admin as admin_router_module
from pdf2word.api.routes import convert as convert_router_module
from pdf2word.api.routes import download as download_router_module
from pdf2word.api.state import ServiceState
from pdf2word.core.config import get_settings
from pdf2word.core.logging import RequestLoggingMiddleware, configure_logging
from pdf2word.retention import RetentionManager

__all__: list[str] = ["app"]

# ---------------------------------------------------------------------------
# Initialise *process-wide* logging before any logger instantiation.
# ---------------------------------------------------------------------------
settings = get_settings()
configure_logging(settings.debug)
logger = structlog.get_logger(__name__)


def _register_routes(app_instance: FastAPI) -> None:
    """Include every API router into the application."""
    routers: list[APIRouter] = [
        convert_router_module.router,
        download_router_module.router,
        admin_router_module.router,
    ]
    for router in routers:
        app_instance.include_router(router)


def _create_fastapi_app() -> FastAPI:  # noqa: D401 – factory
    """Build and configure the FastAPI application."""

    app_instance = FastAPI(
        title="pdf2word",
        description="Convert PDF uploads into downloadable Word documents.",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
    )
    app_instance.state.service_state = ServiceState()
    app_instance.state.retention = RetentionManager()

    # ------------------------------------------------------------------
    # Middleware – logging is added last so it wraps CORS and sees every
    # request first.
    # ------------------------------------------------------------------
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )
    app_instance.add_middleware(RequestLoggingMiddleware)

    # ------------------------------------------------------------------
    # Lifespan events
    # ------------------------------------------------------------------
    @app_instance.on_event("startup")
    async def _on_startup() -> None:
        current = get_settings()
        current.ensure_directories()
        app_instance.state.retention = RetentionManager()
        app_instance.state.service_state.mark_ready()
        logger.info(
            "fastapi_startup",
            commit_sha=current.commit_sha,
            environment=current.environment,
            upload_dir=str(current.upload_dir),
            output_dir=str(current.output_dir),
        )

    @app_instance.on_event("shutdown")
    async def _on_shutdown() -> None:
        app_instance.state.service_state.mark_draining()
        await app_instance.state.retention.shutdown()
        logger.info("fastapi_shutdown")

    # ------------------------------------------------------------------
    # Web client
    # ------------------------------------------------------------------
    app_instance.mount(
        "/static", StaticFiles(directory=settings.static_dir), name="static"
    )

    @app_instance.get("/", include_in_schema=False)
    async def root() -> FileResponse:  # noqa: D401
        return FileResponse(settings.static_dir / "index.html")

    _register_routes(app_instance)
    add_exception_handlers(app_instance)

    return app_instance


# Instantiate once at import time.
app: FastAPI = _create_fastapi_app()
