"""Payload schemas for inbound real-time relay events."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DirectEvent(BaseModel):
    """Event addressed from one identity key to another."""

    to: str
    from_: str = Field(..., alias="from")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class CallRequestEvent(DirectEvent):
    """Call invitation; ``callType`` is passed through untouched."""

    call_type: Any = Field(None, alias="callType")


class RoomEvent(BaseModel):
    """Opaque payload broadcast to the other members of a room."""

    room: str
    payload: Any = None
