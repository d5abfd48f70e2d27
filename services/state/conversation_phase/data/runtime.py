"""Conversation-phase-owned Postgres runtime wiring."""

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
class PhasePostgresRuntime:
    """Concrete handle for verification state database access."""

    engine: Engine
    sessions: SessionProvider

    @classmethod
    def from_settings(cls, settings: LabelerSettings) -> "PhasePostgresRuntime":
        """Build DB runtime from typed application settings."""
        engine = create_postgres_engine(resolve_postgres_settings(settings))
        return cls(
            engine=engine,
            sessions=SessionProvider(session_factory=create_session_factory(engine)),
        )

    def is_healthy(self) -> bool:
        """Return ``True`` when backing Postgres connection is reachable."""
        return ping(self.engine)
