"""SQLAlchemy models for the Syrja broker."""

from .directory_entry import DirectoryEntry

__all__ = ["DirectoryEntry"]
