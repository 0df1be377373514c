"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from syrja_broker.db.session import get_db
from syrja_broker.services.directory import DirectoryStore
from syrja_broker.services.relay import SignalingRelay

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_directory_store(db: SessionDep) -> DirectoryStore:
    """Return a directory store bound to the request's database session."""
    return DirectoryStore(db)


def get_relay(request: Request) -> SignalingRelay:
    """Return the relay created at application startup."""
    return request.app.state.relay


DirectoryStoreDep = Annotated[DirectoryStore, Depends(get_directory_store)]
RelayDep = Annotated[SignalingRelay, Depends(get_relay)]
