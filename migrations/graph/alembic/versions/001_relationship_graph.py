"""Relationship graph: users projection, connections, follows, blocks, reports

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables created:
  - users        Read projection of identity-service users (profile fields only)
  - connections  Connection requests; PENDING → ACCEPTED | REJECTED, history kept
  - follows      Unidirectional follow edges, unique per ordered pair
  - blocks       Block edges, unique per ordered pair
  - reports      User / content reports awaiting moderation

PostgreSQL ENUM types created:
  - connectionstatus   PENDING / ACCEPTED / REJECTED
  - reporttargettype   USER / POST / COMMENT / MESSAGE
  - reportreason       SPAM / HARASSMENT / MISINFORMATION / INAPPROPRIATE / OTHER
  - reportstatus       PENDING / REVIEWED / ACTIONED / DISMISSED
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ENUMS: dict[str, tuple[str, ...]] = {
    "connectionstatus": ("PENDING", "ACCEPTED", "REJECTED"),
    "reporttargettype": ("USER", "POST", "COMMENT", "MESSAGE"),
    "reportreason": ("SPAM", "HARASSMENT", "MISINFORMATION", "INAPPROPRIATE", "OTHER"),
    "reportstatus": ("PENDING", "REVIEWED", "ACTIONED", "DISMISSED"),
}


def _uuid_pk(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text("gen_random_uuid()"),
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


def _user_fk(column: str, table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column], ["users.id"], name=f"fk_{table}_{column}", ondelete="CASCADE"
    )


# ─────────────────────────────────────────────────────────────────────────────
#  UPGRADE
# ─────────────────────────────────────────────────────────────────────────────

def upgrade() -> None:
    # ── 1. ENUM types ─────────────────────────────────────────────────────────
    for name, values in _ENUMS.items():
        labels = ", ".join(f"'{v}'" for v in values)
        op.execute(
            f"""
            DO $$ BEGIN
                CREATE TYPE {name} AS ENUM ({labels});
            EXCEPTION WHEN duplicate_object THEN NULL;
            END $$;
            """
        )

    # ── 2. users (projection) ─────────────────────────────────────────────────
    op.create_table(
        "users",
        _uuid_pk("id"),
        sa.Column("display_name", sa.String(150), nullable=False),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("headline", sa.String(220), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )

    # ── 3. connections ────────────────────────────────────────────────────────
    op.create_table(
        "connections",
        _uuid_pk("id"),
        sa.Column("sender_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("receiver_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(name="connectionstatus", create_type=False),
            nullable=False,
            server_default=sa.text("'PENDING'"),
        ),
        sa.Column("message", sa.String(300), nullable=True),
        _created_at(),
        # Set on accept / reject
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        # Set on reject only
        sa.Column("cooldown_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_connections"),
        _user_fk("sender_id", "connections"),
        _user_fk("receiver_id", "connections"),
        sa.CheckConstraint("sender_id != receiver_id", name="ck_connections_no_self"),
    )
    op.create_index("idx_connections_sender_status", "connections", ["sender_id", "status"])
    op.create_index("idx_connections_receiver_status", "connections", ["receiver_id", "status"])
    op.create_index("idx_connections_responded_at_id", "connections", ["responded_at", "id"])

    # ── 4. follows ────────────────────────────────────────────────────────────
    op.create_table(
        "follows",
        _uuid_pk("id"),
        sa.Column("follower_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("following_id", postgresql.UUID(as_uuid=True), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_follows"),
        _user_fk("follower_id", "follows"),
        _user_fk("following_id", "follows"),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
    )
    op.create_index("idx_follows_follower_id", "follows", ["follower_id"])
    op.create_index("idx_follows_following_id", "follows", ["following_id"])

    # ── 5. blocks ─────────────────────────────────────────────────────────────
    op.create_table(
        "blocks",
        _uuid_pk("id"),
        sa.Column("blocker_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("blocked_id", postgresql.UUID(as_uuid=True), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_blocks"),
        _user_fk("blocker_id", "blocks"),
        _user_fk("blocked_id", "blocks"),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="ck_blocks_no_self"),
    )
    op.create_index("idx_blocks_blocker_id", "blocks", ["blocker_id"])
    op.create_index("idx_blocks_blocked_id", "blocks", ["blocked_id"])

    # ── 6. reports ────────────────────────────────────────────────────────────
    op.create_table(
        "reports",
        _uuid_pk("id"),
        sa.Column("reporter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "target_type",
            postgresql.ENUM(name="reporttargettype", create_type=False),
            nullable=False,
        ),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "reason",
            postgresql.ENUM(name="reportreason", create_type=False),
            nullable=False,
        ),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="reportstatus", create_type=False),
            nullable=False,
            server_default=sa.text("'PENDING'"),
        ),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_reports"),
        _user_fk("reporter_id", "reports"),
    )
    op.create_index("idx_reports_reporter_id", "reports", ["reporter_id"])
    op.create_index("idx_reports_status", "reports", ["status"])
    op.create_index("idx_reports_target", "reports", ["target_type", "target_id"])


# ─────────────────────────────────────────────────────────────────────────────
#  DOWNGRADE
# ─────────────────────────────────────────────────────────────────────────────

def downgrade() -> None:
    for table in ("reports", "blocks", "follows", "connections", "users"):
        op.drop_table(table)
    for name in reversed(list(_ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
