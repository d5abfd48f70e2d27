"""SQLAlchemy table definitions owned by Label Ledger Service.

Column names follow the atproto label shape (``src``, ``uri``, ``val``,
``neg``, ``cts``) so rows can be served as labels without remapping.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    false,
    func,
)

metadata = MetaData()

label_events = Table(
    "label_events",
    metadata,
    Column(
        "id",
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    ),
    Column("src", String(256), nullable=False),
    Column("uri", String(512), nullable=False),
    Column("val", String(128), nullable=False),
    Column("neg", Boolean, nullable=False, server_default=false()),
    Column(
        "cts",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    Index("ix_label_events_uri_id", "uri", "id"),
)
