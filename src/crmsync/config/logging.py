"""Root logger setup for processes that run crmsync reconciliations."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Configure the root logger for a reconciliation run.

    ``level`` falls back to ``CRMSYNC_LOG_LEVEL`` and then INFO. Reconcilers log every
    ambiguous match at WARNING, so keep the level at WARNING or below to see them.
    """

    resolved = level if level is not None else os.getenv("CRMSYNC_LOG_LEVEL", "INFO")
    if isinstance(resolved, str):
        name = resolved.strip().upper()
        numeric = logging.getLevelNamesMapping().get(name)
        if numeric is None:
            raise ConfigurationError(
                f"CRMSYNC_LOG_LEVEL must be a logging level name, got {resolved!r}"
            )
        resolved = numeric

    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
