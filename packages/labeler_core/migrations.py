"""Startup migration orchestration for the labeler database."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config

from packages.labeler_shared.config import LabelerSettings
from packages.labeler_shared.logging import get_logger
from resources.substrates.postgres.config import resolve_postgres_settings

_LOGGER = get_logger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[2]


class MigrationExecutionError(RuntimeError):
    """Raised when startup migration execution fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one startup migration pass."""

    config_path: str
    revision: str


def build_alembic_config(
    *,
    settings: LabelerSettings,
    repo_root: Path | None = None,
) -> Config:
    """Build an Alembic config pointing at ``migrations/`` and the configured DB."""
    root = (repo_root or _REPO_ROOT).resolve()
    config = Config(str(root / "alembic.ini"))
    config.set_main_option("script_location", str(root / "migrations"))
    config.set_main_option(
        "sqlalchemy.url", resolve_postgres_settings(settings).url.replace("%", "%%")
    )
    # Keep the process logging setup; env.py only applies fileConfig otherwise.
    config.attributes["configure_logger"] = False
    return config


def run_startup_migrations(
    *,
    settings: LabelerSettings,
    repo_root: Path | None = None,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Upgrade the labeler schema to ``head``."""
    config = build_alembic_config(settings=settings, repo_root=repo_root)
    try:
        upgrade_fn(config, "head")
    except Exception as exc:
        raise MigrationExecutionError(
            f"startup migration failed for config '{config.config_file_name}'"
        ) from exc
    _LOGGER.info("database migrations applied")
    return MigrationRunResult(
        config_path=str(config.config_file_name),
        revision="head",
    )
