"""Database configuration and utilities."""

from .session import SessionLocal, get_db, init_storage

__all__ = ["get_db", "SessionLocal", "init_storage"]
