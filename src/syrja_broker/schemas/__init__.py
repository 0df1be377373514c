"""
Pydantic schemas for API request/response models and relay event payloads.
"""

from .directory import (
    ClaimIdRequest,
    ClaimIdResponse,
    DeleteIdRequest,
    DeleteIdResponse,
    IdByPubkeyResponse,
    InviteResponse,
    SuggestIdResponse,
)
from .relay import CallRequestEvent, DirectEvent, RoomEvent

__all__ = [
    "ClaimIdRequest", "ClaimIdResponse",
    "DeleteIdRequest", "DeleteIdResponse",
    "IdByPubkeyResponse", "InviteResponse", "SuggestIdResponse",
    "CallRequestEvent", "DirectEvent", "RoomEvent",
]
