"""
models/ledger_clock.py — Logical clock state for one ledger.

A single row (id=1) holding the next timestamp to hand out. Living in the
database rather than in a module global means every ledger database has its
own clock.
"""

from __future__ import annotations

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from bandledger.app.extensions import db


CLOCK_ROW_ID = 1


class LedgerClock(db.Model):
    __tablename__ = "ledger_clock"

    id: Mapped[int] = mapped_column(primary_key=True)

    next_value: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<LedgerClock next_value={self.next_value}>"
