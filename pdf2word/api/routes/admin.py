from __future__ import annotations

import resource
import sys
from datetime import datetime, timezone
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends

from pdf2word.api.state import ServiceState, get_service_state

__all__: list[str] = [
    "router",
]

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Admin"])

STATE_DEP: ServiceState = Depends(get_service_state)

_RSS_IN_BYTES = sys.platform == "darwin"


def _peak_rss_kb() -> int:
    """Peak resident set size of this process in KiB.

    ``ru_maxrss`` is a high-water mark, reported in KiB on Linux and in bytes
    on macOS.
    """
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    if _RSS_IN_BYTES:
        peak //= 1024
    return peak


@router.get("/health")
async def health(service_state: ServiceState = STATE_DEP) -> Dict[str, Any]:
    """Return liveness information: status, timestamp, uptime and memory."""
    return {
        "status": "OK" if service_state.ready else "SHUTTING_DOWN",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(service_state.uptime, 3),
        "memory": {"peak_rss_kb": _peak_rss_kb()},
        "ready": service_state.ready,
    }
