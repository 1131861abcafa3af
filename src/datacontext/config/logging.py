"""Logging setup for processes hosting persistence contexts."""

from __future__ import annotations

import logging
from typing import Final

PACKAGE_LOGGER: Final[str] = "datacontext"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Install root handlers and apply ``level`` to the ``datacontext`` loggers.

    ``logging.basicConfig`` is a no-op once the host application has installed handlers,
    so the package logger level is set separately. Pass ``force=True`` to replace
    existing root handlers.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
