"""Process-wide service state and the FastAPI dependencies that expose it.

Route handlers never reach for module globals: the readiness flag and the
retention manager live on ``app.state`` and are injected with ``Depends``.
"""

from __future__ import annotations

import time

from fastapi import Depends, Request

from pdf2word.conversion.pipeline import ConversionPipeline
from pdf2word.core.config import Settings, get_settings
from pdf2word.retention import RetentionManager

__all__: list[str] = [
    "ServiceState",
    "get_service_state",
    "get_retention_manager",
    "get_pipeline",
]


class ServiceState:
    """Readiness flag checked before new conversions are admitted."""

    def __init__(self) -> None:
        self._ready = False
        self._started_at = time.monotonic()

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def uptime(self) -> float:
        """Seconds since the state was created."""
        return time.monotonic() - self._started_at

    def mark_ready(self) -> None:
        self._ready = True

    def mark_draining(self) -> None:
        self._ready = False


def get_service_state(request: Request) -> ServiceState:
    return request.app.state.service_state


def get_retention_manager(request: Request) -> RetentionManager:
    return request.app.state.retention


def get_pipeline(
    settings: Settings = Depends(get_settings),  # noqa: B008
    retention: RetentionManager = Depends(get_retention_manager),  # noqa: B008
) -> ConversionPipeline:
    return ConversionPipeline(settings=settings, retention=retention)
