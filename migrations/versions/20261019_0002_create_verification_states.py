"""create verification states"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create explicit per-subject verification state."""
    op.create_table(
        "verification_states",
        sa.Column("subject", sa.String(length=256), primary_key=True, nullable=False),
        sa.Column("phase", sa.String(length=32), nullable=False),
        sa.Column("verified_handle", sa.String(length=128), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "phase IN ('unverified', 'verified')",
            name="ck_verification_states_phase",
        ),
    )


def downgrade() -> None:
    """Drop verification state."""
    op.drop_table("verification_states")
