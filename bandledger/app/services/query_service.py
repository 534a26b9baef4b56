"""
services/query_service.py — Read-only projections over the ledger.

Nothing here writes, flushes or raises for a missing record. Absent records
come back as None (or an empty list), with two deliberate exceptions:

  - get_member_balance() returns None for a non-member, never 0, so callers
    can tell "no membership" apart from "balance is zero".
  - is_expense_settled() returns False for an unknown expense.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Returns plain dicts and lists.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from bandledger.app.models.expense import Expense
from bandledger.app.models.membership import Membership
from bandledger.app.models.split import Split
from bandledger.app.models.user_band import UserBand
from bandledger.app.services import band_service


# ── Serialization helpers ──────────────────────────────────────────────────

def _band_dict(band, members: list[str]) -> dict:
    return {
        "id": band.id,
        "name": band.name,
        "creator": band.creator,
        "members": members,
        "active": band.active,
    }


def _membership_dict(membership: Membership) -> dict:
    return {
        "band_id": membership.band_id,
        "member": membership.member,
        "nickname": membership.nickname,
        "joined_at": membership.joined_at,
        "balance": membership.balance,
    }


def _expense_dict(expense: Expense) -> dict:
    return {
        "id": expense.id,
        "band_id": expense.band_id,
        "description": expense.description,
        "amount": expense.amount,
        "paid_by": expense.paid_by,
        "created_at": expense.created_at,
        "settled": expense.settled,
        "category": expense.category,
    }


def _split_dict(split: Split) -> dict:
    return {
        "expense_id": split.expense_id,
        "member": split.member,
        "amount_owed": split.amount_owed,
        "paid": split.paid,
    }


# ── Point lookups ──────────────────────────────────────────────────────────

def get_band(band_id: int, session: Session) -> dict | None:
    """Returns the band with its member list in join order, or None."""
    band = band_service.get_band(band_id, session)
    if band is None:
        return None
    return _band_dict(band, band_service.get_member_ids(band_id, session))


def get_band_member(band_id: int, member: str, session: Session) -> dict | None:
    membership = band_service.get_membership(band_id, member, session)
    if membership is None:
        return None
    return _membership_dict(membership)


def get_expense(expense_id: int, session: Session) -> dict | None:
    expense = session.get(Expense, expense_id)
    if expense is None:
        return None
    return _expense_dict(expense)


def get_expense_split(expense_id: int, member: str, session: Session) -> dict | None:
    split = session.get(Split, (expense_id, member))
    if split is None:
        return None
    return _split_dict(split)


def get_user_bands(member: str, session: Session) -> list[int]:
    """Band ids the identity belongs to, in the order they were joined."""
    stmt = (
        select(UserBand.band_id)
        .where(UserBand.member == member)
        .order_by(UserBand.id.asc())
    )
    return list(session.execute(stmt).scalars().all())


def get_member_balance(band_id: int, member: str, session: Session) -> int | None:
    """The member's running balance, or None if they are not in the band."""
    membership = band_service.get_membership(band_id, member, session)
    return membership.balance if membership is not None else None


def is_expense_settled(expense_id: int, session: Session) -> bool:
    """The expense's settled flag; False for an expense that does not exist."""
    expense = session.get(Expense, expense_id)
    return expense.settled if expense is not None else False


# ── Band-wide projections ──────────────────────────────────────────────────

def list_expense_splits(expense_id: int, session: Session) -> list[dict]:
    """All splits of an expense in band member order."""
    stmt = (
        select(Split)
        .where(Split.expense_id == expense_id)
        .order_by(Split.position.asc())
    )
    return [_split_dict(s) for s in session.execute(stmt).scalars().all()]


def get_expense_detail(expense_id: int, session: Session) -> dict | None:
    """The expense record with its splits embedded, or None."""
    result = get_expense(expense_id, session)
    if result is None:
        return None
    result["splits"] = list_expense_splits(expense_id, session)
    return result


def list_band_expenses(band_id: int, session: Session) -> list[dict]:
    """Every expense of a band, oldest first, each with its splits."""
    stmt = (
        select(Expense.id)
        .where(Expense.band_id == band_id)
        .order_by(Expense.id.asc())
    )
    return [
        get_expense_detail(expense_id, session)
        for expense_id in session.execute(stmt).scalars().all()
    ]


def get_band_balances(band_id: int, session: Session) -> dict | None:
    """
    Every member's balance in join order plus their sum.

    balance_sum is informational. It equals the undistributed remainders of
    all expenses plus every share still unpaid, so it is only zero once all
    splits are settled and every amount divided evenly.
    """
    if band_service.get_band(band_id, session) is None:
        return None

    stmt = (
        select(Membership)
        .where(Membership.band_id == band_id)
        .order_by(Membership.joined_at.asc())
    )
    memberships = session.execute(stmt).scalars().all()

    return {
        "band_id": band_id,
        "balances": [
            {"member": m.member, "nickname": m.nickname, "balance": m.balance}
            for m in memberships
        ],
        "balance_sum": sum(m.balance for m in memberships),
    }
