"""WebSocket endpoint carrying presence and signaling events.

Frames are JSON envelopes ``{"event": <name>, "data": <payload>}`` in both
directions.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from syrja_broker.services.relay import SignalingRelay
from syrja_broker.services.sessions import PeerSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _origin(websocket: WebSocket) -> str:
    if websocket.client is None:
        return "unknown"
    return websocket.client.host


def _parse_envelope(raw: str | bytes | None) -> tuple[str, Any] | None:
    """Return ``(event, data)`` from a frame, or None if it is not a valid envelope."""
    if raw is None:
        return None
    try:
        envelope = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(envelope, dict) or not isinstance(envelope.get("event"), str):
        return None
    return envelope["event"], envelope.get("data")


async def _pump_outbox(websocket: WebSocket, session: PeerSession) -> None:
    """Write queued events to the socket until the connection goes away."""
    try:
        while True:
            event = await session.outbox.get()
            await websocket.send_json(event)
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug("Writer for session %s stopped: %s", session.session_id, e)


async def _close_session(
    relay: SignalingRelay, session: PeerSession, writer: asyncio.Task[None]
) -> None:
    """Drop the session from the relay, then stop its writer."""
    relay.disconnect(session)
    writer.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await writer


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket) -> None:
    """Serve one peer connection for its whole lifetime."""
    relay: SignalingRelay = websocket.app.state.relay
    await websocket.accept()

    session = PeerSession(origin=_origin(websocket))
    relay.connect(session)
    writer = asyncio.create_task(_pump_outbox(websocket, session))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            parsed = _parse_envelope(message.get("text") or message.get("bytes"))
            if parsed is None:
                relay.metrics.malformed += 1
                logger.warning("Ignoring malformed frame from %s", session.session_id)
                continue
            event, data = parsed
            relay.dispatch(session, event, data)
    except WebSocketDisconnect:
        pass
    finally:
        await _close_session(relay, session, writer)
