"""
models/expense.py — Expense table definition.

No business logic. No imports from services or routes.

Key design points:
  - `amount` is a positive integer in the band's smallest currency unit.
  - Expenses are immutable once created; there is no edit or delete path.
  - `settled` is preserved for forward-compatibility. No exposed operation
    sets it to true, so settle_split's ALREADY_SETTLED branch is dormant.
  - `category` is a free-form label chosen by the payer.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bandledger.app.extensions import db
from bandledger.app.models.band import IDENTITY_MAX_LENGTH


DESCRIPTION_MAX_LENGTH = 100
CATEGORY_MAX_LENGTH = 30

# Largest value a BIGINT amount column holds.
MAX_AMOUNT = 2**63 - 1


class Expense(db.Model):
    __tablename__ = "expenses"

    __table_args__ = (
        # Also enforced by expense_service (INVALID_INPUT) before the write.
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        # Expense ids are never reused, even on SQLite.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    band_id: Mapped[int] = mapped_column(
        ForeignKey("bands.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    description: Mapped[str] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    paid_by: Mapped[str] = mapped_column(
        String(IDENTITY_MAX_LENGTH),
        nullable=False,
    )

    # Logical timestamp from clock_service, not wall-clock time.
    created_at: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    settled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    category: Mapped[str] = mapped_column(
        String(CATEGORY_MAX_LENGTH),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    band: Mapped["Band"] = relationship(  # noqa: F821
        "Band",
        back_populates="expenses",
    )

    splits: Mapped[list["Split"]] = relationship(  # noqa: F821
        "Split",
        back_populates="expense",
        order_by="Split.position",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Expense id={self.id} "
            f"band_id={self.band_id} "
            f"amount={self.amount} "
            f"paid_by={self.paid_by!r}>"
        )
