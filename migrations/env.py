"""Alembic environment for the labeler database schema."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from packages.labeler_shared.config import load_settings
from resources.substrates.postgres.config import resolve_postgres_settings
from services.state.conversation_phase.data.schema import metadata as phase_metadata
from services.state.label_ledger.data.schema import metadata as ledger_metadata

config = context.config

if config.config_file_name is not None and config.attributes.get(
    "configure_logger", True
):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = [ledger_metadata, phase_metadata]

if not config.get_main_option("sqlalchemy.url"):
    sqlalchemy_url = resolve_postgres_settings(load_settings()).url
    if not sqlalchemy_url:
        raise ValueError("components.substrate.postgres.url is required for migrations")
    config.set_main_option("sqlalchemy.url", sqlalchemy_url.replace("%", "%%"))


def run_migrations_offline() -> None:
    """Run migrations without a live DB connection."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations using a live DB connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
