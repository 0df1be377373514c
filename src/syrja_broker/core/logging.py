"""Process-wide logging setup."""

from __future__ import annotations

import logging

from syrja_broker.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level and format to the root logger."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )


def fingerprint(key: object, length: int = 12) -> str:
    """Return a short, log-safe prefix of an identity key."""
    if not isinstance(key, str):
        return repr(key)
    return f"{key[:length]}..."
