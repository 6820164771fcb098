"""connections: one active row per unordered user pair

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

Adds a partial unique index so that two racing requests (A→B twice, or A→B
crossed with B→A) cannot both leave a PENDING/ACCEPTED row behind.  REJECTED
history rows stay outside the index.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index(
        "uq_connections_active_pair",
        "connections",
        [
            sa.text("(CASE WHEN sender_id < receiver_id THEN sender_id ELSE receiver_id END)"),
            sa.text("(CASE WHEN sender_id < receiver_id THEN receiver_id ELSE sender_id END)"),
        ],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'ACCEPTED')"),
    )


def downgrade() -> None:
    op.drop_index("uq_connections_active_pair", table_name="connections")
