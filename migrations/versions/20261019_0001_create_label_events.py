"""create label events"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the append-only label event log."""
    op.create_table(
        "label_events",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("src", sa.String(length=256), nullable=False),
        sa.Column("uri", sa.String(length=512), nullable=False),
        sa.Column("val", sa.String(length=128), nullable=False),
        sa.Column("neg", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "cts",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_label_events_uri_id", "label_events", ["uri", "id"])


def downgrade() -> None:
    """Drop the label event log."""
    op.drop_index("ix_label_events_uri_id", table_name="label_events")
    op.drop_table("label_events")
