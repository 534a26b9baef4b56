"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Every test gets its own app from create_app("testing"), bound to a fresh
    in-memory SQLite database. A new database is a new ledger: band ids,
    expense ids and the logical clock all start at 1.
  - Tables are created by the app factory, so no per-test cleanup is needed.
  - Caller identity travels as the `sub` claim of a bearer JWT signed with
    the testing JWT_SECRET_KEY.

Fixtures:
  - app      → configured Flask app (fresh ledger)
  - client   → Flask test client
  - session  → db.session inside an app context, for service-level tests

Helper functions (not fixtures):
  - auth_headers(identity)          → {"Authorization": "Bearer <token>"}
  - make_band(client, identity, …)  → band data dict
  - join_band(client, identity, …)  → HTTP response
  - make_expense(client, identity, …) → HTTP response
  - settle(client, identity, …)     → HTTP response

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from bandledger.app import create_app
from bandledger.app.extensions import db as _db
from bandledger.config import TestingConfig


# Principal-style identities, as an external identity provider would issue.
ALICE   = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
BOB     = "SP2468GC5M6HPKMR7GB8MUBKFBC9FDVHX3HN5BJFG"
CHARLIE = "SP28YKG4N8YGF3RTGGWXMQWMY5G1ESH6AQZJ4XJ6Z"
OUTSIDER = "SP3FBR2AGK5H9QBDH3EEN6DF8EK8JY7RX8QJ5SVTE"


# ═══════════════════════════════════════════════════════════════════════════
# App / client / session fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app():
    """A testing app with its own empty in-memory ledger."""
    flask_app = create_app("testing")
    yield flask_app
    with flask_app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


@pytest.fixture
def session(app):
    """
    The scoped SQLAlchemy session inside an app context.

    Service functions only flush; tests may commit or not — the whole
    database is discarded with the app.
    """
    with app.app_context():
        yield _db.session
        _db.session.rollback()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def make_token(identity: str, expires_in: timedelta = timedelta(minutes=15)) -> str:
    """Signs a bearer token whose `sub` claim is the caller identity."""
    now = datetime.now(timezone.utc)
    payload = {"sub": identity, "iat": now, "exp": now + expires_in}
    return jwt.encode(
        payload,
        TestingConfig.JWT_SECRET_KEY,
        algorithm=TestingConfig.JWT_ALGORITHM,
    )


def auth_headers(identity: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {make_token(identity)}"}


def make_band(client, identity: str = ALICE, name: str = "Test Band") -> dict:
    """
    Creates a band and returns the band data dict.
    The caller becomes the creator and first member.
    """
    resp = client.post(
        "/api/v1/bands/",
        json={"name": name},
        headers=auth_headers(identity),
    )
    assert resp.status_code == 201, f"make_band failed: {resp.get_json()}"
    return resp.get_json()["data"]


def join_band(client, identity: str, band_id: int, nickname: str = "Guitarist"):
    """Joins a band as identity. Returns the HTTP response."""
    return client.post(
        f"/api/v1/bands/{band_id}/members",
        json={"nickname": nickname},
        headers=auth_headers(identity),
    )


def make_expense(
    client,
    identity: str,
    band_id: int,
    amount,
    description: str = "Studio rental",
    category: str = "Equipment",
):
    """Records an expense paid by identity. Returns the HTTP response."""
    return client.post(
        f"/api/v1/bands/{band_id}/expenses",
        json={"description": description, "amount": amount, "category": category},
        headers=auth_headers(identity),
    )


def settle(client, identity: str, expense_id: int):
    """Settles identity's split of an expense. Returns the HTTP response."""
    return client.post(
        f"/api/v1/expenses/{expense_id}/settle",
        headers=auth_headers(identity),
    )


def get_balance(client, band_id: int, member: str, as_identity: str = ALICE):
    """Returns the member's balance (int or None) as seen by as_identity."""
    resp = client.get(
        f"/api/v1/bands/{band_id}/members/{member}/balance",
        headers=auth_headers(as_identity),
    )
    assert resp.status_code == 200, f"get_balance failed: {resp.get_json()}"
    return resp.get_json()["data"]["balance"]


def band_of_three(client) -> dict:
    """Alice (creator) + Bob + Charlie. Returns the band dict."""
    band = make_band(client, ALICE)
    assert join_band(client, BOB, band["id"], "Guitarist").status_code == 201
    assert join_band(client, CHARLIE, band["id"], "Drummer").status_code == 201
    return band
