"""Root logger setup for the command line and tests."""

from __future__ import annotations

import logging
import os
from typing import Final

from .errors import ConfigurationError

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_LEVEL_ENV: Final[str] = "CONTENTPULSE_LOG_LEVEL"


def log_level_from_env(*, default: int = logging.INFO) -> int:
    """Level named by ``CONTENTPULSE_LOG_LEVEL`` (``debug``, ``WARNING``, ...)."""

    raw = os.getenv(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level for {LOG_LEVEL_ENV}: {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    Without an explicit ``level`` the environment decides, defaulting to INFO.
    Pass ``force=True`` to replace handlers installed earlier.
    """

    logging.basicConfig(
        level=log_level_from_env() if level is None else level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
