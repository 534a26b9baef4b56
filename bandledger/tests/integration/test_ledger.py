"""
tests/integration/test_ledger.py — Service-level ledger properties.

Calls the services directly against a real session, without HTTP:
  - value conservation between the payer's credit and the other splits
  - failed operations write nothing and do not advance the clock
  - separate app instances are separate ledgers
  - is_member agrees with the band's member list
  - the expense-level ALREADY_SETTLED guard
  - the per-identity band list bound
  - BIGINT bounds on amounts and balances
"""

from __future__ import annotations

import pytest

from bandledger.app import create_app
from bandledger.app.errors import AppError
from bandledger.app.extensions import db
from bandledger.app.models.expense import Expense
from bandledger.app.services import (
    band_service,
    clock_service,
    expense_service,
    query_service,
)

from .conftest import ALICE, BOB, CHARLIE, OUTSIDER


def _band_of_three(session) -> int:
    band_id = band_service.create_band("Ledger Band", ALICE, session)
    band_service.join_band(band_id, "Guitarist", BOB, session)
    band_service.join_band(band_id, "Drummer", CHARLIE, session)
    return band_id


def _balance_sum(band_id, session) -> int:
    return query_service.get_band_balances(band_id, session)["balance_sum"]


class TestConservation:

    @pytest.mark.parametrize("amount", [300, 10, 1, 7, 1000])
    def test_payer_credit_equals_what_others_owe_plus_remainder(self, session, amount):
        band_id = _band_of_three(session)
        expense_id = expense_service.add_expense(band_id, "Gear", amount, "Gear", BOB, session)

        splits = query_service.list_expense_splits(expense_id, session)
        owed_by_others = sum(s["amount_owed"] for s in splits if s["member"] != BOB)
        remainder = amount - (amount // 3) * 3

        assert query_service.get_member_balance(band_id, BOB, session) == (
            owed_by_others + remainder
        )

    def test_sum_returns_to_zero_when_every_even_split_is_paid(self, session):
        band_id = _band_of_three(session)
        expense_service.add_expense(band_id, "Studio", 300, "Venue", ALICE, session)
        expense_service.add_expense(band_id, "Food", 90, "Food", BOB, session)

        for expense_id, member in [(1, BOB), (1, CHARLIE), (2, ALICE), (2, CHARLIE)]:
            expense_service.settle_split(expense_id, member, session)

        assert _balance_sum(band_id, session) == 0

    def test_uneven_split_leaves_remainder_in_the_sum(self, session):
        band_id = _band_of_three(session)
        expense_service.add_expense(band_id, "Strings", 10, "Gear", ALICE, session)
        expense_service.settle_split(1, BOB, session)
        expense_service.settle_split(1, CHARLIE, session)

        assert _balance_sum(band_id, session) == 1


class TestAtomicity:

    def test_rejected_expense_consumes_no_tick(self, session):
        band_id = _band_of_three(session)
        before = clock_service.peek_timestamp(session)

        with pytest.raises(AppError) as exc_info:
            expense_service.add_expense(band_id, "Nope", 0, "Gear", ALICE, session)

        assert exc_info.value.code == "INVALID_INPUT"
        assert clock_service.peek_timestamp(session) == before
        assert query_service.list_band_expenses(band_id, session) == []

    def test_rejected_join_consumes_no_tick(self, session):
        band_id = band_service.create_band("Band", ALICE, session)
        before = clock_service.peek_timestamp(session)

        with pytest.raises(AppError) as exc_info:
            band_service.join_band(band_id, "x" * 31, BOB, session)

        assert exc_info.value.code == "INVALID_INPUT"
        assert clock_service.peek_timestamp(session) == before
        assert band_service.get_member_ids(band_id, session) == [ALICE]
        assert query_service.get_user_bands(BOB, session) == []

    def test_rejected_settlement_leaves_balances(self, session):
        band_id = _band_of_three(session)
        expense_service.add_expense(band_id, "Studio", 300, "Venue", ALICE, session)
        expense_service.settle_split(1, BOB, session)

        with pytest.raises(AppError) as exc_info:
            expense_service.settle_split(1, BOB, session)

        assert exc_info.value.code == "ALREADY_EXISTS"
        assert query_service.get_member_balance(band_id, BOB, session) == -100

    def test_clock_ticks_once_per_timestamped_event(self, session):
        assert clock_service.peek_timestamp(session) == 1
        band_id = band_service.create_band("Band", ALICE, session)
        band_service.join_band(band_id, "Bassist", BOB, session)
        expense_service.add_expense(band_id, "Food", 20, "Food", BOB, session)

        assert clock_service.peek_timestamp(session) == 4
        assert query_service.get_expense(1, session)["created_at"] == 3


class TestIndependentLedgers:

    def test_two_apps_do_not_share_state(self):
        first, second = create_app("testing"), create_app("testing")

        with first.app_context():
            band_service.create_band("First", ALICE, db.session)
            band_service.create_band("Second", ALICE, db.session)
            db.session.commit()

        with second.app_context():
            assert band_service.get_band(1, db.session) is None
            band_id = band_service.create_band("Other", BOB, db.session)
            db.session.commit()
            assert band_id == 1
            assert clock_service.peek_timestamp(db.session) == 2

        with first.app_context():
            assert query_service.get_user_bands(ALICE, db.session) == [1, 2]
            assert query_service.get_user_bands(BOB, db.session) == []

        for flask_app in (first, second):
            with flask_app.app_context():
                db.session.remove()
                db.drop_all()


class TestMembershipConsistency:

    def test_is_member_matches_member_list(self, session):
        band_id = _band_of_three(session)
        members = band_service.get_member_ids(band_id, session)

        for identity in (ALICE, BOB, CHARLIE, OUTSIDER):
            assert band_service.is_member(band_id, identity, session) == (identity in members)

    def test_non_member_cannot_add_expense(self, session):
        band_id = _band_of_three(session)
        with pytest.raises(AppError) as exc_info:
            expense_service.add_expense(band_id, "Gear", 100, "Gear", OUTSIDER, session)
        assert exc_info.value.code == "NOT_BAND_MEMBER"
        assert exc_info.value.http_status == 403


class TestExpenseSettledGuard:

    def test_settled_expense_rejects_further_settlement(self, session):
        band_id = _band_of_three(session)
        expense_id = expense_service.add_expense(band_id, "Studio", 300, "Venue", ALICE, session)

        session.get(Expense, expense_id).settled = True
        session.flush()

        with pytest.raises(AppError) as exc_info:
            expense_service.settle_split(expense_id, BOB, session)

        assert exc_info.value.code == "ALREADY_SETTLED"
        assert query_service.is_expense_settled(expense_id, session) is True
        assert query_service.get_member_balance(band_id, BOB, session) == 0


class TestUserIndexCapacity:

    def test_create_band_rejected_when_user_list_full(self, session):
        band_service.create_band("One", ALICE, session, max_user_bands=2)
        band_service.create_band("Two", ALICE, session, max_user_bands=2)

        with pytest.raises(AppError) as exc_info:
            band_service.create_band("Three", ALICE, session, max_user_bands=2)

        assert exc_info.value.code == "CAPACITY_EXCEEDED"
        assert query_service.get_user_bands(ALICE, session) == [1, 2]

    def test_join_rejected_when_user_list_full(self, session):
        band_service.create_band("Mine", BOB, session)
        band_id = band_service.create_band("Theirs", ALICE, session)

        with pytest.raises(AppError) as exc_info:
            band_service.join_band(band_id, "Bassist", BOB, session, max_user_bands=1)

        assert exc_info.value.code == "CAPACITY_EXCEEDED"
        assert not band_service.is_member(band_id, BOB, session)

    def test_join_rejected_when_band_full(self, session):
        band_id = band_service.create_band("Duo", ALICE, session)
        band_service.join_band(band_id, "Bassist", BOB, session, max_members=2)

        with pytest.raises(AppError) as exc_info:
            band_service.join_band(band_id, "Drummer", CHARLIE, session, max_members=2)

        assert exc_info.value.code == "CAPACITY_EXCEEDED"
        assert band_service.get_member_ids(band_id, session) == [ALICE, BOB]


class TestBalanceBounds:

    def test_overflowing_expense_leaves_clock_and_rows_untouched(self, session):
        band_id = band_service.create_band("Duo", ALICE, session)
        band_service.join_band(band_id, "Bassist", BOB, session)
        expense_service.add_expense(band_id, "Big", 2**63 - 1, "Gear", ALICE, session)
        before = clock_service.peek_timestamp(session)

        with pytest.raises(AppError) as exc_info:
            expense_service.add_expense(band_id, "Bigger", 2**63 - 1, "Gear", ALICE, session)

        assert exc_info.value.code == "INVALID_INPUT"
        assert clock_service.peek_timestamp(session) == before
        assert len(query_service.list_band_expenses(band_id, session)) == 1
        assert query_service.get_member_balance(band_id, ALICE, session) == 2**62

    def test_underflowing_settlement_leaves_split_unpaid(self, session):
        band_id = band_service.create_band("Duo", ALICE, session)
        band_service.join_band(band_id, "Bassist", BOB, session)
        expense_id = expense_service.add_expense(band_id, "Gear", 100, "Gear", ALICE, session)
        band_service.get_membership(band_id, BOB, session).balance = -(2**63) + 10
        session.flush()

        with pytest.raises(AppError) as exc_info:
            expense_service.settle_split(expense_id, BOB, session)

        assert exc_info.value.code == "INVALID_INPUT"
        assert query_service.get_expense_split(expense_id, BOB, session)["paid"] is False
        assert query_service.get_member_balance(band_id, BOB, session) == -(2**63) + 10
