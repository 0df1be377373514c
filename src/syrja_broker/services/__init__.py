"""Business logic services for the Syrja broker."""

from .directory import DirectoryStore
from .maintenance import MaintenanceWorker
from .presence import PresenceRegistry
from .rate_limit import RateLimiter
from .relay import SignalingRelay
from .sessions import PeerSession

__all__ = [
    "DirectoryStore",
    "MaintenanceWorker",
    "PeerSession",
    "PresenceRegistry",
    "RateLimiter",
    "SignalingRelay",
]
