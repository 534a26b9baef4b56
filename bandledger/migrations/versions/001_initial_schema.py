"""Initial schema — bands, memberships, expenses, splits, user index, clock.

Revision: 001_initial_schema

Append-only: never edit this file once applied to a database; add a new
revision instead.

Creation order follows FK dependencies:
  bands → band_members, user_bands, expenses → expense_splits; ledger_clock.

Every money column (balance, amount, amount_owed) is BIGINT: amounts are
integer minor units, never floats.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: tuple | None = None
depends_on: tuple | None = None


def upgrade() -> None:

    # ── bands ──────────────────────────────────────────────────────────────
    # AUTOINCREMENT on SQLite so ids are never reused.

    op.create_table(
        "bands",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("creator", sa.String(64), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("LENGTH(name) > 0", name="ck_bands_name_nonempty"),
        sqlite_autoincrement=True,
    )

    # ── band_members ───────────────────────────────────────────────────────
    # Composite key (band_id, member). joined_at is a logical timestamp.

    op.create_table(
        "band_members",
        sa.Column(
            "band_id",
            sa.Integer(),
            sa.ForeignKey("bands.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("member", sa.String(64), nullable=False),
        sa.Column("nickname", sa.String(30), nullable=False),
        sa.Column("joined_at", sa.Integer(), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("band_id", "member"),
    )

    # ── user_bands ─────────────────────────────────────────────────────────
    # Per-identity band list; row id gives join order.

    op.create_table(
        "user_bands",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("member", sa.String(64), nullable=False),
        sa.Column(
            "band_id",
            sa.Integer(),
            sa.ForeignKey("bands.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("member", "band_id", name="uq_user_bands_member_band"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_user_bands_member", "user_bands", ["member"])

    # ── expenses ───────────────────────────────────────────────────────────

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "band_id",
            sa.Integer(),
            sa.ForeignKey("bands.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("description", sa.String(100), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("paid_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("settled", sa.Boolean(), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_expenses_band_id", "expenses", ["band_id"])

    # ── expense_splits ─────────────────────────────────────────────────────
    # Composite key (expense_id, member); position preserves member order.

    op.create_table(
        "expense_splits",
        sa.Column(
            "expense_id",
            sa.Integer(),
            sa.ForeignKey("expenses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("member", sa.String(64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("amount_owed", sa.BigInteger(), nullable=False),
        sa.Column("paid", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("expense_id", "member"),
        sa.CheckConstraint("amount_owed >= 0", name="ck_splits_amount_non_negative"),
    )

    # ── ledger_clock ───────────────────────────────────────────────────────
    # Single row (id = 1), created lazily by clock_service.

    op.create_table(
        "ledger_clock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("next_value", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drops everything upgrade() created, in reverse FK order. Local resets only."""
    op.drop_table("ledger_clock")
    op.drop_table("expense_splits")
    op.drop_index("ix_expenses_band_id", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_user_bands_member", table_name="user_bands")
    op.drop_table("user_bands")
    op.drop_table("band_members")
    op.drop_table("bands")
