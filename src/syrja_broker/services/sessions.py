"""Transport-neutral view of one live real-time connection."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Final

from syrja_broker.services.presence import PresenceBinding

logger = logging.getLogger(__name__)

OUTBOX_MAXSIZE: Final[int] = 256


@dataclass
class PeerSession:
    """A connected peer as seen by the relay.

    Outbound events are queued on ``outbox`` and written to the socket by a
    separate writer task, so relaying to a session never waits on its network.
    """

    origin: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    binding: PresenceBinding | None = None
    rooms: set[str] = field(default_factory=set)
    outbox: asyncio.Queue[dict[str, Any]] = field(
        default_factory=lambda: asyncio.Queue(maxsize=OUTBOX_MAXSIZE)
    )

    def send(self, event: str, data: Any) -> bool:
        """Queue ``event`` for delivery; return False if the outbox is full."""
        try:
            self.outbox.put_nowait({"event": event, "data": data})
        except asyncio.QueueFull:
            logger.warning("Outbox full for session %s, dropping %s", self.session_id, event)
            return False
        return True

    def drain(self) -> list[dict[str, Any]]:
        """Return and remove every queued event without waiting."""
        events: list[dict[str, Any]] = []
        while not self.outbox.empty():
            events.append(self.outbox.get_nowait())
        return events
