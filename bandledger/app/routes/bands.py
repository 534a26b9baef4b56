"""
routes/bands.py — Band, membership and balance route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.
  - Query results of None become NOT_FOUND (404) here; the query layer
    itself never raises.

Endpoints (url_prefix=/api/v1/bands):
  POST  /bands                                → 201  create band
  GET   /bands/:id                            → 200  band + member list
  POST  /bands/:id/members                    → 201  join band as caller
  GET   /bands/:id/members/:member            → 200  membership record
  GET   /bands/:id/members/:member/balance    → 200  balance (null if not a member)
  GET   /bands/:id/balances                   → 200  every member's balance
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from bandledger.app.errors import not_found
from bandledger.app.extensions import db
from bandledger.app.middleware.auth_middleware import require_caller
from bandledger.app.schemas.band_schema import CreateBandSchema, JoinBandSchema
from bandledger.app.services import band_service, query_service

bands_bp = Blueprint("bands", __name__)


@bands_bp.route("/", methods=["POST"])
@require_caller
def create_band():
    """POST /bands — Create a band. Caller becomes creator and first member."""
    data = CreateBandSchema().load(request.get_json(force=True) or {})
    band_id = band_service.create_band(
        name=data["name"],
        caller=g.caller,
        session=db.session,
        max_user_bands=current_app.config["MAX_USER_BANDS"],
    )
    db.session.commit()
    result = query_service.get_band(band_id, db.session)
    return jsonify({"data": result, "warnings": []}), 201


@bands_bp.route("/<int:band_id>", methods=["GET"])
@require_caller
def get_band(band_id: int):
    """GET /bands/:id — Band details with members in join order."""
    result = query_service.get_band(band_id, db.session)
    if result is None:
        raise not_found(f"Band {band_id} does not exist.")
    return jsonify({"data": result, "warnings": []}), 200


@bands_bp.route("/<int:band_id>/members", methods=["POST"])
@require_caller
def join_band(band_id: int):
    """POST /bands/:id/members — Join a band as the authenticated caller."""
    data = JoinBandSchema().load(request.get_json(force=True) or {})
    band_service.join_band(
        band_id=band_id,
        nickname=data["nickname"],
        caller=g.caller,
        session=db.session,
        max_members=current_app.config["MAX_BAND_MEMBERS"],
        max_user_bands=current_app.config["MAX_USER_BANDS"],
    )
    db.session.commit()
    result = query_service.get_band_member(band_id, g.caller, db.session)
    return jsonify({"data": result, "warnings": []}), 201


@bands_bp.route("/<int:band_id>/members/<string:member>", methods=["GET"])
@require_caller
def get_band_member(band_id: int, member: str):
    """GET /bands/:id/members/:member — Membership record incl. balance."""
    result = query_service.get_band_member(band_id, member, db.session)
    if result is None:
        raise not_found(f"{member} is not a member of band {band_id}.")
    return jsonify({"data": result, "warnings": []}), 200


@bands_bp.route("/<int:band_id>/members/<string:member>/balance", methods=["GET"])
@require_caller
def get_member_balance(band_id: int, member: str):
    """
    GET /bands/:id/members/:member/balance

    Always 200. A non-member's balance is null, not 0.
    """
    balance = query_service.get_member_balance(band_id, member, db.session)
    return jsonify({
        "data": {"band_id": band_id, "member": member, "balance": balance},
        "warnings": [],
    }), 200


@bands_bp.route("/<int:band_id>/balances", methods=["GET"])
@require_caller
def get_band_balances(band_id: int):
    """GET /bands/:id/balances — Every member's balance and their sum."""
    result = query_service.get_band_balances(band_id, db.session)
    if result is None:
        raise not_found(f"Band {band_id} does not exist.")
    return jsonify({"data": result, "warnings": []}), 200
