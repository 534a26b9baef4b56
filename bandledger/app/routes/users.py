# bandledger/app/routes/users.py
from flask import Blueprint, g, jsonify

from bandledger.app.extensions import db
from bandledger.app.middleware.auth_middleware import require_caller
from bandledger.app.services import query_service

users_bp = Blueprint("users", __name__)


@users_bp.route("/me/bands", methods=["GET"])
@require_caller
def get_my_bands():
    return _bands_response(g.caller)


@users_bp.route("/<string:member>/bands", methods=["GET"])
@require_caller
def get_user_bands(member: str):
    # Unknown identities simply have no bands.
    return _bands_response(member)


def _bands_response(member: str):
    bands = query_service.get_user_bands(member, db.session)
    return jsonify({
        "data": {"member": member, "bands": bands},
        "warnings": []
    }), 200
