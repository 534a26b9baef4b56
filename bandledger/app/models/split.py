"""
models/split.py — Split table definition.

Keyed by the composite primary key (expense_id, member). No business logic.

One Split is written per band member when the expense is created, including
the payer (amount_owed 0, paid true). `paid` moves from false to true exactly
once, in expense_service.settle_split. `position` records the member's place
in the band's member list at creation time so splits list in join order.
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


class Split(db.Model):
    __tablename__ = "expense_splits"

    __table_args__ = (
        CheckConstraint("amount_owed >= 0", name="ck_splits_amount_non_negative"),
    )

    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id", ondelete="RESTRICT"),
        primary_key=True,
    )

    member: Mapped[str] = mapped_column(
        String(IDENTITY_MAX_LENGTH),
        primary_key=True,
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    amount_owed: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    expense: Mapped["Expense"] = relationship(  # noqa: F821
        "Expense",
        back_populates="splits",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Split expense_id={self.expense_id} "
            f"member={self.member!r} "
            f"amount_owed={self.amount_owed} "
            f"paid={self.paid}>"
        )
