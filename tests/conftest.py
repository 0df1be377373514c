from __future__ import annotations

import base64
import os
import tempfile
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("ID_STORE_DIR", tempfile.mkdtemp(prefix="syrja-test-store-"))
os.environ.setdefault("MAINTENANCE_INTERVAL_SECONDS", "0")

from syrja_broker.db.session import Base
from syrja_broker.db.session import get_db as app_get_session
from syrja_broker.main import app as fastapi_app
from syrja_broker.services.directory import DirectoryStore
from syrja_broker.services.presence import PresenceRegistry
from syrja_broker.services.rate_limit import RateLimiter
from syrja_broker.services.relay import SignalingRelay
from syrja_broker.services.sessions import PeerSession

TEST_DB_URL = "sqlite://"
TEMPORARY_TTL_SECONDS = 24 * 60 * 60


class FakeClock:
    """Manually advanced clock returning timezone-aware UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeMonotonic:
    """Manually advanced monotonic clock in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Callable[[], Session]:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(engine: Engine, session_factory: Callable[[], Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture()
def directory_store(db_session: Session, clock: FakeClock) -> DirectoryStore:
    """Directory store driven by a fake clock so TTL expiry can be simulated."""
    return DirectoryStore(db_session, ttl_seconds=TEMPORARY_TTL_SECONDS, clock=clock)


@pytest.fixture()
def limiter(monotonic: FakeMonotonic) -> RateLimiter:
    return RateLimiter(limit=20, window_seconds=60.0, max_origins=100, clock=monotonic)


@pytest.fixture()
def registry() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture()
def relay(registry: PresenceRegistry, limiter: RateLimiter) -> SignalingRelay:
    return SignalingRelay(registry, limiter)


@pytest.fixture()
def connect(relay: SignalingRelay) -> Callable[..., PeerSession]:
    """Return a factory connecting fresh sessions to the relay."""

    counter = iter(range(1, 1_000_000))

    def _connect(origin: str | None = None) -> PeerSession:
        session = PeerSession(origin=origin or f"10.0.0.{next(counter)}")
        relay.connect(session)
        return session

    return _connect


def _encode_b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def _generate_identity() -> dict[str, Any]:
    signing_key = SigningKey.generate()
    pubkey_bytes = signing_key.verify_key.encode()
    return {
        "private_key": signing_key,
        "pubkey_bytes": pubkey_bytes,
        "pubkey": _encode_b64(pubkey_bytes),
    }


@pytest.fixture()
def alice() -> dict[str, Any]:
    """Return identity data for the primary test peer."""
    return _generate_identity()


@pytest.fixture()
def bob() -> dict[str, Any]:
    """Return identity data for the secondary test peer."""
    return _generate_identity()
