"""Signaling relay between peer sessions.

Direct events are addressed by identity key and forwarded to the one session
currently registered for that key. Room events are broadcast to every other
member of a named group. Delivery is fire-and-forget: events that are rate
limited, malformed or addressed to an absent peer are dropped, counted in
:class:`RelayMetrics` and logged, never reported back to the sender.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Final

from pydantic import ValidationError

from syrja_broker.core.logging import fingerprint
from syrja_broker.schemas.relay import CallRequestEvent, DirectEvent, RoomEvent
from syrja_broker.services.presence import PresenceRegistry, normalize_key
from syrja_broker.services.rate_limit import RateLimiter
from syrja_broker.services.sessions import PeerSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectRoute:
    """How one inbound direct event is forwarded."""

    outbound: str
    rate_limited: bool = False
    schema: type[DirectEvent] = DirectEvent


DIRECT_ROUTES: Final[dict[str, DirectRoute]] = {
    "request-connection": DirectRoute("incoming-request", rate_limited=True),
    "accept-connection": DirectRoute("connection-accepted"),
    "call-request": DirectRoute("incoming-call", schema=CallRequestEvent),
    "call-accepted": DirectRoute("call-accepted"),
    "call-rejected": DirectRoute("call-rejected"),
    "call-ended": DirectRoute("call-ended"),
}

ROOM_EVENTS: Final[frozenset[str]] = frozenset({"signal", "auth"})


@dataclass
class RelayMetrics:
    """Counters describing what the relay did with inbound events."""

    delivered: int = 0
    broadcast: int = 0
    dropped_unroutable: int = 0
    rate_limited: int = 0
    malformed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class SignalingRelay:
    """Route real-time events between connected sessions."""

    def __init__(self, registry: PresenceRegistry, limiter: RateLimiter) -> None:
        self.registry = registry
        self.limiter = limiter
        self.metrics = RelayMetrics()
        self._sessions: dict[str, PeerSession] = {}
        self._rooms: dict[str, set[str]] = {}

    # --- Session lifecycle ----------------------------------------------------------
    def connect(self, session: PeerSession) -> None:
        """Track a newly accepted session."""
        self._sessions[session.session_id] = session
        logger.info("Client connected: %s (%s)", session.session_id, session.origin)

    def disconnect(self, session: PeerSession) -> None:
        """Forget a closed session, its presence binding and its room memberships."""
        self._sessions.pop(session.session_id, None)
        for room in list(session.rooms):
            self._leave(session, room)

        if session.binding is not None:
            if self.registry.release(session.binding):
                logger.info("Unregistered: %s", fingerprint(session.binding.identity_key))
            else:
                logger.info(
                    "Kept registration for %s, owned by a newer session",
                    fingerprint(session.binding.identity_key),
                )
            session.binding = None
        logger.info("Client disconnected: %s", session.session_id)

    # --- Inbound events -------------------------------------------------------------
    def dispatch(self, session: PeerSession, event: str, data: Any) -> None:
        """Handle one inbound event from ``session``."""
        if event == "register":
            self.register(session, data)
        elif event in DIRECT_ROUTES:
            self.forward(session, event, data)
        elif event == "join":
            self.join(session, data)
        elif event in ROOM_EVENTS:
            self.broadcast(session, event, data)
        else:
            self.metrics.malformed += 1
            logger.debug("Ignoring unknown event %r from %s", event, session.session_id)

    def register(self, session: PeerSession, data: Any) -> None:
        """Bind the identity key in ``data`` to ``session``."""
        if not self._admit(session, "register"):
            return

        pub_key = data.get("pubKey") if isinstance(data, dict) else data
        if not pub_key:
            return
        if not isinstance(pub_key, str):
            self.metrics.malformed += 1
            logger.warning("Rejected non-string registration key from %s", session.session_id)
            return

        key = str(normalize_key(pub_key))
        if not key:
            return
        if session.binding is not None and session.binding.identity_key != key:
            self.registry.release(session.binding)
        session.binding = self.registry.register(key, session.session_id)
        logger.info("Registered: %s -> %s", fingerprint(key), session.session_id)

    def forward(self, session: PeerSession, event: str, data: Any) -> None:
        """Forward a direct event to the session registered for its ``to`` key."""
        route = DIRECT_ROUTES[event]
        if route.rate_limited and not self._admit(session, event):
            return

        try:
            message = route.schema.model_validate(data)
        except ValidationError:
            self.metrics.malformed += 1
            logger.warning("Dropping malformed %s from %s", event, session.session_id)
            return

        sender = str(normalize_key(message.from_))
        recipient = str(normalize_key(message.to))
        payload: dict[str, Any] = {"from": sender}
        if isinstance(message, CallRequestEvent):
            payload["callType"] = message.call_type

        target = self._lookup(recipient)
        if target is None:
            self.metrics.dropped_unroutable += 1
            logger.info(
                "Could not deliver %s to %s (not registered/online)",
                event,
                fingerprint(recipient),
            )
            return

        if target.send(route.outbound, payload):
            self.metrics.delivered += 1
            logger.info("%s: %s -> %s", event, fingerprint(sender), fingerprint(recipient))

    def join(self, session: PeerSession, room: Any) -> None:
        """Add ``session`` to ``room``."""
        if isinstance(room, dict):
            room = room.get("room")
        if not isinstance(room, str) or not room:
            self.metrics.malformed += 1
            logger.warning("Rejected join with invalid room from %s", session.session_id)
            return
        self._rooms.setdefault(room, set()).add(session.session_id)
        session.rooms.add(room)
        logger.info("Client %s joined %s", session.session_id, room)

    def broadcast(self, session: PeerSession, event: str, data: Any) -> None:
        """Send ``payload`` unmodified to every other member of ``room``."""
        try:
            message = RoomEvent.model_validate(data)
        except ValidationError:
            self.metrics.malformed += 1
            logger.warning("Dropping malformed %s from %s", event, session.session_id)
            return

        for member_id in self._rooms.get(message.room, set()) - {session.session_id}:
            member = self._sessions.get(member_id)
            if member is not None and member.send(event, message.payload):
                self.metrics.broadcast += 1

    # --- Introspection --------------------------------------------------------------
    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def room_members(self, room: str) -> set[str]:
        """Return the session ids currently joined to ``room``."""
        return set(self._rooms.get(room, set()))

    # --- Helpers --------------------------------------------------------------------
    def _admit(self, session: PeerSession, event: str) -> bool:
        if self.limiter.admit(session.origin):
            return True
        self.metrics.rate_limited += 1
        logger.warning("Rate limit exceeded for %s by %s", event, session.origin)
        return False

    def _lookup(self, identity_key: str) -> PeerSession | None:
        session_id = self.registry.resolve(identity_key)
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def _leave(self, session: PeerSession, room: str) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(session.session_id)
            if not members:
                del self._rooms[room]
        session.rooms.discard(room)
