"""
routes/expenses.py — Expense and settlement route handlers.

Registered at url_prefix=/api/v1 (not /api/v1/expenses) because this blueprint
owns BOTH the band-scoped paths (/bands/:id/expenses) and the expense-ID
paths (/expenses/:id).

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.

Endpoints:
  POST  /bands/:id/expenses                → 201  record expense paid by caller
  GET   /bands/:id/expenses                → 200  list band expenses (oldest first)
  GET   /expenses/:id                      → 200  expense + splits
  GET   /expenses/:id/settled              → 200  settled flag (false if unknown)
  GET   /expenses/:id/splits/:member       → 200  one member's split
  POST  /expenses/:id/settle               → 200  settle caller's split
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from bandledger.app.errors import not_found
from bandledger.app.extensions import db
from bandledger.app.middleware.auth_middleware import require_caller
from bandledger.app.schemas.expense_schema import CreateExpenseSchema
from bandledger.app.services import expense_service, query_service

expenses_bp = Blueprint("expenses", __name__)


# ── Band-scoped expense routes ─────────────────────────────────────────────

@expenses_bp.route("/bands/<int:band_id>/expenses", methods=["POST"])
@require_caller
def add_expense(band_id: int):
    """POST /bands/:id/expenses — Record an expense and split it across all members."""
    data = CreateExpenseSchema().load(request.get_json(force=True) or {})
    expense_id = expense_service.add_expense(
        band_id=band_id,
        description=data["description"],
        amount=data["amount"],
        category=data["category"],
        caller=g.caller,
        session=db.session,
    )
    db.session.commit()
    result = query_service.get_expense_detail(expense_id, db.session)
    return jsonify({"data": result, "warnings": []}), 201


@expenses_bp.route("/bands/<int:band_id>/expenses", methods=["GET"])
@require_caller
def list_band_expenses(band_id: int):
    """GET /bands/:id/expenses — Every expense of the band with its splits."""
    if query_service.get_band(band_id, db.session) is None:
        raise not_found(f"Band {band_id} does not exist.")
    result = query_service.list_band_expenses(band_id, db.session)
    return jsonify({"data": result, "warnings": []}), 200


# ── Expense-ID routes ──────────────────────────────────────────────────────

@expenses_bp.route("/expenses/<int:expense_id>", methods=["GET"])
@require_caller
def get_expense(expense_id: int):
    """GET /expenses/:id — Expense detail including splits."""
    result = query_service.get_expense_detail(expense_id, db.session)
    if result is None:
        raise not_found(f"Expense {expense_id} does not exist.")
    return jsonify({"data": result, "warnings": []}), 200


@expenses_bp.route("/expenses/<int:expense_id>/settled", methods=["GET"])
@require_caller
def is_expense_settled(expense_id: int):
    """GET /expenses/:id/settled — Always 200; unknown expenses report false."""
    settled = query_service.is_expense_settled(expense_id, db.session)
    return jsonify({
        "data": {"expense_id": expense_id, "settled": settled},
        "warnings": [],
    }), 200


@expenses_bp.route("/expenses/<int:expense_id>/splits/<string:member>", methods=["GET"])
@require_caller
def get_expense_split(expense_id: int, member: str):
    """GET /expenses/:id/splits/:member — One member's share of an expense."""
    result = query_service.get_expense_split(expense_id, member, db.session)
    if result is None:
        raise not_found(f"{member} has no split on expense {expense_id}.")
    return jsonify({"data": result, "warnings": []}), 200


@expenses_bp.route("/expenses/<int:expense_id>/settle", methods=["POST"])
@require_caller
def settle_split(expense_id: int):
    """POST /expenses/:id/settle — Pay off the caller's split of this expense."""
    expense_service.settle_split(
        expense_id=expense_id,
        caller=g.caller,
        session=db.session,
    )
    db.session.commit()
    result = query_service.get_expense_split(expense_id, g.caller, db.session)
    return jsonify({"data": result, "warnings": []}), 200
