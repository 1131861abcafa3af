"""Application composition root."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from datacontext.adapters.sqlalchemy import is_started, open_context, startup
from datacontext.config import configure_logging, get_context_config

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import MetaData

__all__ = ["bootstrap", "open_context"]

log = getLogger(__name__)


def bootstrap(
    *,
    metadata: MetaData | None = None,
    database_uri: str | None = None,
    env_file: str | Path | None = None,
    force: bool = False,
) -> None:
    """Load ``.env``, configure logging and start the SQLAlchemy adapter.

    Call once per process before :func:`open_context`.
    """

    load_dotenv(env_file)
    config = get_context_config()
    configure_logging(level=config.log_level)
    if is_started() and not force:
        log.info("SQLAlchemy adapter already started; skipping bootstrap")
        return
    startup(metadata=metadata, database_uri=database_uri, force=force)
