"""API endpoint modules."""

from .directory import router as directory_router
from .realtime import router as realtime_router
from .system import router as system_router

__all__ = [
    "directory_router",
    "realtime_router",
    "system_router",
]
