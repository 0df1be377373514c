"""Tests for the Alembic migration scripts."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_upgrade_creates_directory_table(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = Config()
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", url)

    command.upgrade(config, "head")

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert "directory_entry" in inspector.get_table_names()
        columns = {column["name"] for column in inspector.get_columns("directory_entry")}
        assert columns == {"id", "invite_code", "owner_pubkey", "permanent", "expires_at"}
        indexes = {index["name"] for index in inspector.get_indexes("directory_entry")}
        assert "ix_directory_entry_owner_pubkey" in indexes
    finally:
        engine.dispose()
