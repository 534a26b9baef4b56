"""
models/band.py — Band table definition.

No business logic. No imports from services or routes.

The ordered member list of a band is not stored as a column: it is the
band's Membership rows ordered by joined_at. "Has a Membership" and "appears
in the member list" are therefore the same fact and can never diverge.

Bands are never deleted. `active` exists for forward-compatibility; no
operation currently clears it.
"""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bandledger.app.extensions import db


# Caller identities are opaque strings supplied by the hosting layer.
IDENTITY_MAX_LENGTH = 64

BAND_NAME_MAX_LENGTH = 50


class Band(db.Model):
    __tablename__ = "bands"

    __table_args__ = (
        CheckConstraint("LENGTH(name) > 0", name="ck_bands_name_nonempty"),
        # Band ids are never reused, even on SQLite.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(BAND_NAME_MAX_LENGTH),
        nullable=False,
    )

    creator: Mapped[str] = mapped_column(
        String(IDENTITY_MAX_LENGTH),
        nullable=False,
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    # joined_at is a strictly increasing logical timestamp, so this ordering
    # is the join order and the creator always comes first.
    memberships: Mapped[list["Membership"]] = relationship(  # noqa: F821
        "Membership",
        back_populates="band",
        order_by="Membership.joined_at",
    )

    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense",
        back_populates="band",
        order_by="Expense.id",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Band id={self.id} name={self.name!r} creator={self.creator!r}>"
