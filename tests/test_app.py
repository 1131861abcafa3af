from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from datacontext import app
from datacontext.adapters.sqlalchemy import configured_engine, is_started, shutdown
from tests.helpers.mapped import Customer, start_mappers

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_adapter_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


@pytest.fixture
def logging_levels(monkeypatch: pytest.MonkeyPatch) -> list[int | str]:
    levels: list[int | str] = []
    monkeypatch.setattr(
        app,
        "configure_logging",
        lambda *, level=logging.INFO, force=False: levels.append(level),  # noqa: ARG005
    )
    return levels


def test_bootstrap_reads_env_file_and_starts_adapter(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    logging_levels: list[int | str],
) -> None:
    # registered first so the value loaded from .env is removed afterwards
    monkeypatch.setenv("DATACONTEXT_LOG_LEVEL", "INFO")
    monkeypatch.delenv("DATACONTEXT_LOG_LEVEL")
    env_file = tmp_path / ".env"
    env_file.write_text("DATACONTEXT_LOG_LEVEL=WARNING\n")

    app.bootstrap(
        metadata=start_mappers().metadata,
        database_uri="sqlite+pysqlite:///:memory:",
        env_file=env_file,
    )

    assert is_started()
    assert logging_levels == [logging.WARNING]
    with app.open_context() as context:
        context.add(Customer(name="Ada"))
        assert context.save() == 1


def test_bootstrap_is_idempotent_without_force(logging_levels: list[int | str]) -> None:
    app.bootstrap(database_uri="sqlite+pysqlite:///:memory:")
    engine = configured_engine()

    app.bootstrap(database_uri="sqlite+pysqlite:///:memory:")

    assert configured_engine() is engine
    assert len(logging_levels) == 2
