"""
models/user_band.py — Per-identity index of joined bands.

Append-only. One row is written whenever a Membership is created; the rows
for an identity, ordered by id, are that identity's band list.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bandledger.app.extensions import db
from bandledger.app.models.band import IDENTITY_MAX_LENGTH


class UserBand(db.Model):
    __tablename__ = "user_bands"

    __table_args__ = (
        UniqueConstraint("member", "band_id", name="uq_user_bands_member_band"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    member: Mapped[str] = mapped_column(
        String(IDENTITY_MAX_LENGTH),
        nullable=False,
        index=True,
    )

    band_id: Mapped[int] = mapped_column(
        ForeignKey("bands.id", ondelete="RESTRICT"),
        nullable=False,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<UserBand member={self.member!r} band_id={self.band_id}>"
