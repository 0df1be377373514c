"""Main entry point for the Syrja broker."""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from syrja_broker.api import directory_router, realtime_router, system_router
from syrja_broker.api.errors import register_exception_handlers
from syrja_broker.core.logging import configure_logging
from syrja_broker.core.settings import settings
from syrja_broker.db.session import init_storage
from syrja_broker.services.maintenance import MaintenanceWorker
from syrja_broker.services.presence import PresenceRegistry
from syrja_broker.services.rate_limit import RateLimiter
from syrja_broker.services.relay import SignalingRelay

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Presence, signaling relay and id directory for peer-to-peer clients",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

register_exception_handlers(app)

# Include API routers
app.include_router(directory_router)
app.include_router(realtime_router)
app.include_router(system_router)


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    init_storage()
    relay = SignalingRelay(PresenceRegistry(), RateLimiter())
    worker = MaintenanceWorker(relay.limiter)
    await worker.start()
    app.state.relay = relay
    app.state.maintenance_worker = worker
    app.state.started_at = time.time()
    logger.info("%s %s ready", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: MaintenanceWorker | None = getattr(app.state, "maintenance_worker", None)
    if worker:
        await worker.stop()


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness text confirming the broker is up."""
    return "Signaling server is running"


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
