"""Label-ledger-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine

from packages.labeler_shared.config import LabelerSettings
from resources.substrates.postgres import (
    SessionProvider,
    create_postgres_engine,
    create_session_factory,
    ping,
    resolve_postgres_settings,
)


@dataclass(frozen=True)
class LedgerPostgresRuntime:
    """Concrete handle for label ledger database access."""

    engine: Engine
    sessions: SessionProvider
    health_timeout_seconds: float = 1.0

    @classmethod
    def from_settings(cls, settings: LabelerSettings) -> "LedgerPostgresRuntime":
        """Build ledger DB runtime from typed application settings."""
        postgres_settings = resolve_postgres_settings(settings)
        return cls.from_engine(
            create_postgres_engine(postgres_settings),
            health_timeout_seconds=postgres_settings.health_timeout_seconds,
        )

    @classmethod
    def from_engine(
        cls, engine: Engine, *, health_timeout_seconds: float = 1.0
    ) -> "LedgerPostgresRuntime":
        """Wrap an already constructed engine."""
        return cls(
            engine=engine,
            sessions=SessionProvider(session_factory=create_session_factory(engine)),
            health_timeout_seconds=health_timeout_seconds,
        )

    def is_healthy(self) -> bool:
        """Return ``True`` when backing Postgres connection is reachable."""
        return ping(self.engine, timeout_seconds=self.health_timeout_seconds)
