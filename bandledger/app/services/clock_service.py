"""
services/clock_service.py — Logical timestamp source.

Hands out strictly increasing integers starting at 1, one per call. Every
mutating event that records a time (band creation, band join, expense
creation) consumes exactly one tick.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the caller's responsibility — only flush here.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from bandledger.app.models.ledger_clock import CLOCK_ROW_ID, LedgerClock


def _get_clock(session: Session) -> LedgerClock:
    """Returns the ledger's clock row, creating it on first use."""
    clock = session.get(LedgerClock, CLOCK_ROW_ID)
    if clock is None:
        clock = LedgerClock(id=CLOCK_ROW_ID, next_value=1)
        session.add(clock)
    return clock


def next_timestamp(session: Session) -> int:
    """Returns the current logical time and advances the clock by one."""
    clock = _get_clock(session)
    current = clock.next_value
    clock.next_value = current + 1
    session.flush()
    return current


def peek_timestamp(session: Session) -> int:
    """Returns the timestamp the next tick will hand out, without consuming it."""
    clock = session.get(LedgerClock, CLOCK_ROW_ID)
    return clock.next_value if clock is not None else 1
