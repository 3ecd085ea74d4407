from __future__ import annotations

import logging

from src.app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the service process."""
    resolved = (level or get_settings().log_level or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("src").setLevel(resolved)
    # pymongo heartbeat logs are noisy at DEBUG.
    logging.getLogger("pymongo").setLevel(max(logging.getLevelName(resolved), logging.INFO))
