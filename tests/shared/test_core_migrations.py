"""Tests for startup migration orchestration."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from packages.labeler_core.migrations import (
    MigrationExecutionError,
    build_alembic_config,
    run_startup_migrations,
)
from packages.labeler_shared.config import LabelerSettings


def _settings(url: str) -> LabelerSettings:
    return LabelerSettings(components={"substrate": {"postgres": {"url": url}}})


def test_config_points_at_repo_migrations() -> None:
    """The built config should target ``migrations/`` and the configured URL."""
    config = build_alembic_config(settings=_settings("sqlite:///labeler.db"))

    assert Path(config.get_main_option("script_location")).name == "migrations"
    assert config.get_main_option("sqlalchemy.url") == "sqlite:///labeler.db"
    assert config.attributes["configure_logger"] is False


def test_upgrade_failure_is_wrapped() -> None:
    """Upgrade errors should surface as ``MigrationExecutionError``."""

    def _fail(_config: Config, _revision: str) -> None:
        raise RuntimeError("boom")

    with pytest.raises(MigrationExecutionError):
        run_startup_migrations(settings=_settings("sqlite://"), upgrade_fn=_fail)


def test_upgrade_head_creates_tables(tmp_path: Path) -> None:
    """Running every revision on SQLite should create both tables."""
    url = f"sqlite:///{tmp_path / 'labeler.db'}"

    result = run_startup_migrations(settings=_settings(url))

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"label_events", "verification_states"} <= tables
    assert result.revision == "head"
