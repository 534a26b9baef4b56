"""
models/membership.py — Membership table definition.

Keyed by the composite primary key (band_id, member). No business logic.

`balance` is the only column mutated after creation, and only by
expense_service (credit on add_expense, debit on settle_split).
Positive = the band owes this member; negative = this member owes the band.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bandledger.app.extensions import db
from bandledger.app.models.band import IDENTITY_MAX_LENGTH


NICKNAME_MAX_LENGTH = 30

# Nickname given to a band's creator on create_band.
CREATOR_NICKNAME = "Creator"

# BIGINT range of the balance column.
MAX_BALANCE = 2**63 - 1
MIN_BALANCE = -(2**63)


class Membership(db.Model):
    __tablename__ = "band_members"

    band_id: Mapped[int] = mapped_column(
        ForeignKey("bands.id", ondelete="RESTRICT"),
        primary_key=True,
    )

    member: Mapped[str] = mapped_column(
        String(IDENTITY_MAX_LENGTH),
        primary_key=True,
    )

    nickname: Mapped[str] = mapped_column(
        String(NICKNAME_MAX_LENGTH),
        nullable=False,
    )

    # Logical timestamp from clock_service, not wall-clock time.
    joined_at: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    balance: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    band: Mapped["Band"] = relationship(  # noqa: F821
        "Band",
        back_populates="memberships",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Membership band_id={self.band_id} "
            f"member={self.member!r} "
            f"balance={self.balance}>"
        )
