"""Presence registry mapping identity keys to live session handles."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from syrja_broker.core.logging import fingerprint

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_key(key: object) -> object:
    """Strip every whitespace character from a string key; case is preserved.

    Non-string values are returned unchanged so callers can reject them.
    """
    if isinstance(key, str):
        return _WHITESPACE.sub("", key)
    return key


@dataclass(frozen=True)
class PresenceBinding:
    """The exact mapping a session installed when it registered."""

    identity_key: str
    session_id: str


class PresenceRegistry:
    """In-memory map from normalized identity key to session id.

    A later registration for the same key silently supersedes an earlier one.
    Sessions keep the ``PresenceBinding`` returned by :meth:`register` and hand
    it back to :meth:`release` on disconnect, so a superseded session never
    removes the mapping of the session that replaced it.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, str] = {}

    def register(self, identity_key: str, session_id: str) -> PresenceBinding:
        """Map ``identity_key`` to ``session_id``, replacing any previous session."""
        key = str(normalize_key(identity_key))
        previous = self._sessions.get(key)
        self._sessions[key] = session_id
        if previous is not None and previous != session_id:
            logger.info("Registration for %s superseded session %s", fingerprint(key), previous)
        return PresenceBinding(identity_key=key, session_id=session_id)

    def resolve(self, identity_key: str) -> str | None:
        """Return the session currently registered for ``identity_key``, if any."""
        return self._sessions.get(str(normalize_key(identity_key)))

    def unregister(self, identity_key: str) -> None:
        """Remove the mapping for ``identity_key`` unconditionally."""
        self._sessions.pop(str(normalize_key(identity_key)), None)

    def release(self, binding: PresenceBinding) -> bool:
        """Remove ``binding`` only if it is still the current mapping for its key.

        Returns:
            True if the mapping was removed, False if it was absent or had
            already been superseded by another session
        """
        if self._sessions.get(binding.identity_key) != binding.session_id:
            return False
        del self._sessions[binding.identity_key]
        return True

    def clear(self) -> None:
        """Drop every mapping."""
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, identity_key: object) -> bool:
        return normalize_key(identity_key) in self._sessions
