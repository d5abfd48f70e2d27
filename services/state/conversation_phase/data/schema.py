"""SQLAlchemy table definitions owned by Conversation Phase Service."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, MetaData, String, Table, func

metadata = MetaData()

verification_states = Table(
    "verification_states",
    metadata,
    Column("subject", String(256), primary_key=True),
    Column("phase", String(32), nullable=False),
    Column("verified_handle", String(128), nullable=True),
    Column("verified_at", DateTime(timezone=True), nullable=True),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    CheckConstraint(
        "phase IN ('unverified', 'verified')",
        name="ck_verification_states_phase",
    ),
)
