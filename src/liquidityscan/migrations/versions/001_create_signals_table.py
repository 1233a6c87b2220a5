"""Create the signals table.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Schema is created by env.py before migrations run.
    op.create_table(
        "signals",
        sa.Column("pk", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("signal_id", sa.Text, nullable=False, unique=True),
        sa.Column("strategy_type", sa.Text, nullable=False),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column("timeframe", sa.Text, nullable=False),
        sa.Column("signal_type", sa.Text, nullable=False),
        sa.Column("price", sa.Numeric, nullable=False),
        sa.Column("detected_at", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="ACTIVE"),
        sa.Column("metadata", postgresql.JSONB, nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        schema="liquidityscan",
    )
    op.create_index(
        "ix_signals_strategy_type",
        "signals",
        ["strategy_type"],
        schema="liquidityscan",
    )


def downgrade() -> None:
    op.drop_index("ix_signals_strategy_type", table_name="signals", schema="liquidityscan")
    op.drop_table("signals", schema="liquidityscan")
