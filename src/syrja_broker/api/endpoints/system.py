"""System status and metrics endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from syrja_broker.api.dependencies import DirectoryStoreDep, RelayDep
from syrja_broker.core.settings import settings

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status")
async def get_system_status(request: Request) -> dict[str, object]:
    """Get overall service status for monitoring dashboards.

    Returns:
        Dictionary with service name, version, status and uptime in seconds
    """
    started_at = getattr(request.app.state, "started_at", None)
    return {
        "service": "syrja-broker",
        "version": settings.app_version,
        "status": "operational",
        "timestamp": int(time.time()),
        "uptime_seconds": int(time.time() - started_at) if started_at else 0,
        "environment": "production" if not settings.debug else "development",
    }


@router.get("/metrics")
def get_system_metrics(relay: RelayDep, store: DirectoryStoreDep) -> dict[str, object]:
    """Expose relay counters and state sizes.

    Drops and rate-limit denials are never reported to senders, so these
    counters are the only place they become visible.

    Returns:
        Dictionary with relay counters, presence/room/session sizes, tracked
        rate-limit origins and the number of live directory entries
    """
    return {
        "timestamp": int(time.time()),
        "relay": relay.metrics.as_dict(),
        "presence": {
            "registered_keys": len(relay.registry),
            "sessions": relay.session_count,
            "rooms": relay.room_count,
        },
        "rate_limit": {
            "tracked_origins": relay.limiter.tracked_origins,
            "limit": relay.limiter.limit,
            "window_seconds": relay.limiter.window_seconds,
        },
        "directory": {
            "entries": store.count(),
        },
    }
