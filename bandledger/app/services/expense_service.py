"""
services/expense_service.py — Expense recording, splitting and settlement.

Owns the Expense and Split tables and is the only writer of
Membership.balance.

Rules enforced here:
  add_expense
    NOT_FOUND        (404) — band does not exist
    NOT_BAND_MEMBER  (403) — caller is not a member of the band
    INVALID_INPUT    (400) — amount <= 0, above MAX_AMOUNT or not an integer,
                             text too long, or payer balance would overflow
  settle_split
    NOT_FOUND        (404) — expense does not exist, or caller holds no split on it
    ALREADY_SETTLED  (409) — expense-level settled flag is set
    ALREADY_EXISTS   (409) — caller's split is already paid
    NOT_BAND_MEMBER  (403) — caller is no longer a member of the band
    INVALID_INPUT    (400) — debit would take the balance below MIN_BALANCE

Split computation:
  - split_amount = amount // member_count (truncating integer division).
  - Every member except the payer owes split_amount; the payer's own split
    is written as {amount_owed: 0, paid: true}.
  - The payer is credited amount - split_amount. That is what the other
    members owe PLUS the remainder amount % member_count, which nobody owes.
    The remainder is kept with the payer on purpose; see compute_split_amount.

Every precondition is checked before the first write, so a failing call
leaves no partial state behind.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives plain values; returns ids or raises AppError.
  - Commits are the caller's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from bandledger.app.errors import (
    already_exists,
    already_settled,
    invalid_input,
    not_band_member,
    not_found,
)
from bandledger.app.models.band import Band
from bandledger.app.models.expense import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    MAX_AMOUNT,
    Expense,
)
from bandledger.app.models.membership import MAX_BALANCE, MIN_BALANCE
from bandledger.app.models.split import Split
from bandledger.app.services import band_service, clock_service

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _get_band_or_404(band_id: int, session: Session) -> Band:
    """Returns the Band or raises NOT_FOUND (404)."""
    band = band_service.get_band(band_id, session)
    if band is None:
        raise not_found(f"Band {band_id} does not exist.")
    return band


def _get_expense_or_404(expense_id: int, session: Session) -> Expense:
    """Returns the Expense or raises NOT_FOUND (404)."""
    expense = session.get(Expense, expense_id)
    if expense is None:
        raise not_found(f"Expense {expense_id} does not exist.")
    return expense


def _require_member(band_id: int, identity: str, session: Session) -> None:
    """Raises NOT_BAND_MEMBER (403) if identity is not a member of band_id."""
    if not band_service.is_member(band_id, identity, session):
        raise not_band_member(f"{identity} is not a member of band {band_id}.")


def _validate_amount(amount: int) -> None:
    # bool is an int subclass; True must not be accepted as an amount of 1.
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise invalid_input("Amount must be an integer.", field="amount")
    if amount <= 0:
        raise invalid_input("Amount must be greater than zero.", field="amount")
    if amount > MAX_AMOUNT:
        raise invalid_input(f"Amount must be at most {MAX_AMOUNT}.", field="amount")


def _validate_text(value: str, max_length: int, field: str) -> None:
    if len(value) > max_length:
        raise invalid_input(
            f"{field} must be at most {max_length} characters.",
            field=field,
        )


# ── Split computation (pure) ───────────────────────────────────────────────

def compute_split_amount(amount: int, member_count: int) -> int:
    """
    Returns each member's share of amount, truncated toward zero.

    The remainder amount - share * member_count is not distributed.
    Callers credit it to the payer together with the other members' shares;
    existing balances depend on this exact formula.
    """
    return amount // member_count


def build_splits(
        member_ids: list[str],
        payer: str,
        split_amount: int,
) -> list[dict]:
    """
    Returns one split dict per member, in member order.

    The payer's entry is {"amount_owed": 0, "paid": True}; everyone else
    owes split_amount and starts unpaid.
    """
    splits = []
    for member in member_ids:
        if member == payer:
            splits.append({"member": member, "amount_owed": 0, "paid": True})
        else:
            splits.append({"member": member, "amount_owed": split_amount, "paid": False})
    return splits


def payer_credit(amount: int, split_amount: int) -> int:
    """Balance credit for the payer of an expense: everything but their own share."""
    return amount - split_amount


# ── Public service functions ───────────────────────────────────────────────

def add_expense(
        band_id: int,
        description: str,
        amount: int,
        category: str,
        caller: str,
        session: Session,
) -> int:
    """
    Records an expense paid by the caller and splits it across every current
    member of the band.

    Raises:
      AppError(NOT_FOUND, 404)        — band does not exist (or has no members)
      AppError(NOT_BAND_MEMBER, 403)  — caller is not a member
      AppError(INVALID_INPUT, 400)    — amount <= 0 or above MAX_AMOUNT, text too long,
                                        or the payer credit would overflow the balance

    Returns: the new expense id.
    """
    band = _get_band_or_404(band_id, session)
    _require_member(band_id, caller, session)
    _validate_amount(amount)
    _validate_text(description, DESCRIPTION_MAX_LENGTH, "description")
    _validate_text(category, CATEGORY_MAX_LENGTH, "category")

    member_ids = band_service.get_member_ids(band_id, session)
    if not member_ids:
        # Unreachable while the creator is always a member.
        raise not_found(f"Band {band_id} has no members.")

    split_amount = compute_split_amount(amount, len(member_ids))
    payer_membership = band_service.get_membership(band_id, caller, session)
    new_payer_balance = payer_membership.balance + payer_credit(amount, split_amount)
    if new_payer_balance > MAX_BALANCE:
        raise invalid_input(
            f"Expense would push {caller}'s balance above {MAX_BALANCE}.",
            field="amount",
        )

    # ── Writes start here ──────────────────────────────────────────────────

    expense = Expense(
        band=band,
        description=description,
        amount=amount,
        paid_by=caller,
        created_at=clock_service.next_timestamp(session),
        settled=False,
        category=category,
    )
    session.add(expense)
    session.flush()  # populate expense.id before creating splits

    for position, s in enumerate(build_splits(member_ids, caller, split_amount)):
        session.add(Split(
            expense=expense,
            member=s["member"],
            position=position,
            amount_owed=s["amount_owed"],
            paid=s["paid"],
        ))

    payer_membership.balance = new_payer_balance
    session.flush()

    remainder = amount - split_amount * len(member_ids)
    logger.info(
        "Expense %s added to band %s by %s: amount=%d members=%d share=%d remainder=%d",
        expense.id, band_id, caller, amount, len(member_ids), split_amount, remainder,
    )
    return expense.id


def settle_split(expense_id: int, caller: str, session: Session) -> None:
    """
    Marks the caller's split of an expense as paid and debits their balance
    by the amount they owed.

    Raises:
      AppError(NOT_FOUND, 404)        — expense absent, or caller has no split on it
      AppError(ALREADY_SETTLED, 409)  — the expense itself is marked settled
      AppError(ALREADY_EXISTS, 409)   — caller's split is already paid
      AppError(NOT_BAND_MEMBER, 403)  — caller is not a member of the expense's band
      AppError(INVALID_INPUT, 400)    — the debit would overflow the balance column
    """
    expense = _get_expense_or_404(expense_id, session)

    split = session.get(Split, (expense_id, caller))
    if split is None:
        raise not_found(f"{caller} has no split on expense {expense_id}.")

    if expense.settled:
        raise already_settled(f"Expense {expense_id} is already settled.")

    if split.paid:
        raise already_exists(f"{caller} has already paid their split of expense {expense_id}.")

    _require_member(expense.band_id, caller, session)

    membership = band_service.get_membership(expense.band_id, caller, session)
    if membership.balance - split.amount_owed < MIN_BALANCE:
        raise invalid_input(
            f"Settlement would push {caller}'s balance below {MIN_BALANCE}."
        )

    # ── Writes start here ──────────────────────────────────────────────────

    split.paid = True
    membership.balance -= split.amount_owed
    session.flush()

    logger.info(
        "%s settled %d on expense %s (band %s)",
        caller, split.amount_owed, expense_id, expense.band_id,
    )
