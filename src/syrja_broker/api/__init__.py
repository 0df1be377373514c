"""HTTP and WebSocket surfaces of the broker."""

from .endpoints import directory_router, realtime_router, system_router

__all__ = ["directory_router", "realtime_router", "system_router"]
