"""Process-wide logging setup."""

from __future__ import annotations

import logging

from nutriplan.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once, at app startup."""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # httpx logs every request at INFO; the backend client already traces them.
    logging.getLogger("httpx").setLevel(logging.WARNING)
