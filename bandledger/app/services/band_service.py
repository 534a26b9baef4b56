"""
services/band_service.py — Band creation, joining and membership checks.

Owns the Band, Membership and UserIndex (user_bands) tables. Balances on a
Membership are written by expense_service only; this module creates them
at zero.

Rules enforced here:
  INVALID_INPUT      (400) — empty or over-long band name / nickname
  NOT_FOUND          (404) — band absent or inactive (join_band)
  ALREADY_EXISTS     (409) — caller already has a Membership in the band
  CAPACITY_EXCEEDED  (409) — member list or the caller's band list is full

Every precondition is checked before the first write, so a failing call
leaves no partial state behind.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Caller identity is an explicit argument, never ambient context.
  - Commits are the caller's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bandledger.app.errors import (
    already_exists,
    capacity_exceeded,
    invalid_input,
    not_found,
)
from bandledger.app.models.band import BAND_NAME_MAX_LENGTH, Band
from bandledger.app.models.membership import (
    CREATOR_NICKNAME,
    NICKNAME_MAX_LENGTH,
    Membership,
)
from bandledger.app.models.user_band import UserBand
from bandledger.app.services import clock_service
from bandledger.config import DEFAULT_MAX_BAND_MEMBERS, DEFAULT_MAX_USER_BANDS

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _validate_band_name(name: str) -> None:
    if not name:
        raise invalid_input("Band name must not be empty.", field="name")
    if len(name) > BAND_NAME_MAX_LENGTH:
        raise invalid_input(
            f"Band name must be at most {BAND_NAME_MAX_LENGTH} characters.",
            field="name",
        )


def _validate_nickname(nickname: str) -> None:
    if len(nickname) > NICKNAME_MAX_LENGTH:
        raise invalid_input(
            f"Nickname must be at most {NICKNAME_MAX_LENGTH} characters.",
            field="nickname",
        )


def _count_user_bands(identity: str, session: Session) -> int:
    stmt = select(func.count()).select_from(UserBand).where(UserBand.member == identity)
    return session.execute(stmt).scalar_one()


def _require_user_index_capacity(
        identity: str,
        max_user_bands: int,
        session: Session,
) -> None:
    """Raises CAPACITY_EXCEEDED if identity's band list is already full."""
    if _count_user_bands(identity, session) >= max_user_bands:
        raise capacity_exceeded(
            f"{identity} already belongs to the maximum of {max_user_bands} bands."
        )


def _add_membership(
        band: Band,
        identity: str,
        nickname: str,
        session: Session,
) -> Membership:
    """Writes the Membership and UserIndex rows for a new member."""
    membership = Membership(
        band=band,
        member=identity,
        nickname=nickname,
        joined_at=clock_service.next_timestamp(session),
        balance=0,
    )
    session.add(membership)
    session.add(UserBand(member=identity, band_id=band.id))
    session.flush()
    return membership


# ── Public lookups ─────────────────────────────────────────────────────────

def get_band(band_id: int, session: Session) -> Band | None:
    return session.get(Band, band_id)


def get_membership(
        band_id: int,
        identity: str,
        session: Session,
) -> Membership | None:
    return session.get(Membership, (band_id, identity))


def is_member(band_id: int, identity: str, session: Session) -> bool:
    """
    True if identity has a Membership in band_id.

    Checks the Membership keyspace directly. The band's member list is
    derived from the same rows, so the two answers always agree.
    """
    return get_membership(band_id, identity, session) is not None


def get_member_ids(band_id: int, session: Session) -> list[str]:
    """Returns the band's member identities in join order (creator first)."""
    stmt = (
        select(Membership.member)
        .where(Membership.band_id == band_id)
        .order_by(Membership.joined_at.asc())
    )
    return list(session.execute(stmt).scalars().all())


# ── Public service functions ───────────────────────────────────────────────

def create_band(
        name: str,
        caller: str,
        session: Session,
        max_user_bands: int = DEFAULT_MAX_USER_BANDS,
) -> int:
    """
    Creates a band with the caller as its creator and first member.

    The creator's Membership gets nickname "Creator", balance 0 and the next
    logical timestamp; the new band id is appended to the caller's band list.

    Raises:
      AppError(INVALID_INPUT, 400)      — name empty or too long
      AppError(CAPACITY_EXCEEDED, 409)  — caller's band list is full

    Returns: the new band id.
    """
    _validate_band_name(name)
    _require_user_index_capacity(caller, max_user_bands, session)

    band = Band(name=name, creator=caller, active=True)
    session.add(band)
    session.flush()  # populate band.id before creating membership

    _add_membership(band, caller, CREATOR_NICKNAME, session)

    logger.info("Band %s (%r) created by %s", band.id, name, caller)
    return band.id


def join_band(
        band_id: int,
        nickname: str,
        caller: str,
        session: Session,
        max_members: int = DEFAULT_MAX_BAND_MEMBERS,
        max_user_bands: int = DEFAULT_MAX_USER_BANDS,
) -> None:
    """
    Adds the caller to an existing, active band.

    Raises:
      AppError(NOT_FOUND, 404)          — band does not exist or is inactive
      AppError(ALREADY_EXISTS, 409)     — caller is already a member
      AppError(CAPACITY_EXCEEDED, 409)  — band is full, or caller's band list is full
      AppError(INVALID_INPUT, 400)      — nickname too long
    """
    band = get_band(band_id, session)
    if band is None or not band.active:
        raise not_found(f"Band {band_id} does not exist.")

    if is_member(band_id, caller, session):
        raise already_exists(f"{caller} is already a member of band {band_id}.")

    if len(get_member_ids(band_id, session)) >= max_members:
        logger.debug("Join rejected: band %s is at %d members", band_id, max_members)
        raise capacity_exceeded(
            f"Band {band_id} already has the maximum of {max_members} members."
        )

    _require_user_index_capacity(caller, max_user_bands, session)
    _validate_nickname(nickname)

    _add_membership(band, caller, nickname, session)

    logger.info("%s joined band %s as %r", caller, band_id, nickname)
