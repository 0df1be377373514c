"""Directory of human-readable ids mapped to invite codes.

Each id is owned by the public key that claimed it. Only that key may
overwrite it; temporary ids expire after a configurable TTL and behave as
absent from then on.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from threading import Lock
from typing import Final

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from syrja_broker.core.errors import (
    DirectoryConflictError,
    DirectoryNotFoundError,
    DirectoryValidationError,
)
from syrja_broker.core.logging import fingerprint
from syrja_broker.core.settings import settings
from syrja_broker.db.time import utcnow
from syrja_broker.models import DirectoryEntry

logger = logging.getLogger(__name__)

PERSISTENCE_TEMPORARY: Final[str] = "temporary"
PERSISTENCE_PERMANENT: Final[str] = "permanent"

# Word lists for memorable suggested ids
ADJECTIVES: Final[tuple[str, ...]] = (
    "alpha", "beta", "gamma", "delta", "zeta", "nova", "comet", "solar", "lunar", "star",
)
NOUNS: Final[tuple[str, ...]] = (
    "fox", "wolf", "hawk", "lion", "tiger", "bear", "crane", "iris", "rose", "maple",
)
_SUGGEST_ATTEMPTS: Final[int] = 32


class KeyedLock:
    """Serialize work per key while letting different keys proceed in parallel."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if not self._waiters[key]:
                    del self._waiters[key]
                    del self._locks[key]


_CLAIM_LOCKS = KeyedLock()


class DirectoryStore:
    """Claim, resolve and delete directory entries through a SQLAlchemy session."""

    def __init__(
        self,
        db: Session,
        *,
        ttl_seconds: int | None = None,
        clock: Callable[[], datetime] = utcnow,
        locks: KeyedLock | None = None,
    ) -> None:
        self.db = db
        self.ttl = timedelta(
            seconds=settings.temporary_id_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._locks = locks or _CLAIM_LOCKS

    def claim(
        self,
        custom_id: str | None,
        invite_code: str | None,
        persistence: str | None,
        owner_pubkey: str | None,
    ) -> DirectoryEntry:
        """Create or overwrite the entry for ``custom_id`` on behalf of its owner.

        Args:
            custom_id: Full id, namespace prefix included
            invite_code: Opaque invite payload to publish under the id
            persistence: ``"temporary"`` for an expiring entry; any other value
                stores a permanent entry
            owner_pubkey: Identity key of the claimant

        Returns:
            The stored entry

        Raises:
            DirectoryValidationError: If any field is missing or empty
            DirectoryConflictError: If a live entry is owned by another key
        """
        if not custom_id or not invite_code or not persistence or not owner_pubkey:
            raise DirectoryValidationError("Missing required fields")

        with self._locks.hold(custom_id):
            now = self._clock()
            entry = self.db.get(DirectoryEntry, custom_id)
            if entry is not None and entry.is_expired(now):
                self.db.delete(entry)
                self.db.flush()
                entry = None

            if entry is not None and entry.owner_pubkey != owner_pubkey:
                raise DirectoryConflictError("ID already taken")

            if entry is None:
                entry = DirectoryEntry(id=custom_id)
                self.db.add(entry)

            temporary = persistence == PERSISTENCE_TEMPORARY
            entry.invite_code = invite_code
            entry.owner_pubkey = owner_pubkey
            entry.permanent = not temporary
            entry.expires_at = now + self.ttl if temporary else None
            self.db.commit()

        logger.info("ID claimed/updated: %s (permanent: %s)", custom_id, entry.permanent)
        return entry

    def resolve(self, full_id: str) -> str:
        """Return the invite code published under ``full_id``.

        Raises:
            DirectoryNotFoundError: If the id is unknown or has expired
        """
        entry = self.db.scalars(
            select(DirectoryEntry).where(DirectoryEntry.id == full_id, self._live())
        ).first()
        if entry is None:
            logger.info("Failed to resolve id: %s", full_id)
            raise DirectoryNotFoundError("ID not found or has expired")
        logger.info("Resolved id: %s", full_id)
        return entry.invite_code

    def find_by_owner(self, owner_pubkey: str) -> DirectoryEntry:
        """Return the live entry owned by ``owner_pubkey``.

        When a key owns several entries the lexicographically smallest id wins.

        Raises:
            DirectoryNotFoundError: If the key owns no live entry
        """
        entry = self.db.scalars(
            select(DirectoryEntry)
            .where(DirectoryEntry.owner_pubkey == owner_pubkey, self._live())
            .order_by(DirectoryEntry.id)
            .limit(1)
        ).first()
        if entry is None:
            raise DirectoryNotFoundError("No ID found for this public key")
        return entry

    def delete_by_owner(self, owner_pubkey: str) -> int:
        """Delete every entry owned by ``owner_pubkey`` and return how many were removed."""
        result = self.db.execute(
            delete(DirectoryEntry).where(DirectoryEntry.owner_pubkey == owner_pubkey)
        )
        self.db.commit()
        removed = int(result.rowcount or 0)
        if removed:
            logger.info("Deleted %d id(s) for pubKey: %s", removed, fingerprint(owner_pubkey))
        return removed

    def purge_expired(self) -> int:
        """Physically remove temporary entries whose TTL has elapsed."""
        result = self.db.execute(
            delete(DirectoryEntry).where(
                DirectoryEntry.expires_at.is_not(None),
                DirectoryEntry.expires_at <= self._clock(),
            )
        )
        self.db.commit()
        removed = int(result.rowcount or 0)
        if removed:
            logger.info("Purged %d expired id(s)", removed)
        return removed

    def count(self) -> int:
        """Return the number of live entries."""
        return int(
            self.db.scalar(select(func.count()).select_from(DirectoryEntry).where(self._live()))
            or 0
        )

    def suggest_id(self, prefix: str, rng: random.Random | None = None) -> str:
        """Return a memorable id of the form ``<prefix><adjective>-<noun>-<NN>`` not in use.

        Raises:
            DirectoryConflictError: If no free id was found after several attempts
        """
        rng = rng or random.SystemRandom()
        now = self._clock()
        for _ in range(_SUGGEST_ATTEMPTS):
            candidate = (
                f"{prefix}{rng.choice(ADJECTIVES)}-{rng.choice(NOUNS)}-{rng.randint(10, 99)}"
            )
            entry = self.db.get(DirectoryEntry, candidate)
            if entry is None or entry.is_expired(now):
                return candidate
        raise DirectoryConflictError("Could not find a free ID, try again")

    def _live(self):  # type: ignore[no-untyped-def]
        return or_(
            DirectoryEntry.expires_at.is_(None),
            DirectoryEntry.expires_at > self._clock(),
        )
