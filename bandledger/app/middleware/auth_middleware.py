"""
middleware/auth_middleware.py — Caller identity from a bearer JWT.

The ledger never authenticates anyone: it receives an already-authenticated
caller identity. In the HTTP hosting layer that identity is the `sub` claim
of an HS256 JWT issued by an external identity provider sharing
JWT_SECRET_KEY.

The @require_caller decorator:
  1. Reads the Authorization header (expected: "Bearer <token>")
  2. Decodes and verifies the JWT signature and expiry
  3. Attaches the `sub` claim (a string identity) to flask.g.caller
  4. Raises the appropriate 401 AppError if any step fails

Strict responsibility boundary:
  - This middleware establishes WHO is calling. It does not check band
    membership; that is a service rule (NOT_BAND_MEMBER, 403).
  - Services receive the identity as a plain string argument.

Error codes:
  TOKEN_MISSING  (401) — no Authorization header
  TOKEN_INVALID  (401) — malformed header, invalid signature, or bad payload
  TOKEN_EXPIRED  (401) — valid token but exp claim is in the past
"""

from __future__ import annotations

import functools
from typing import Callable

import jwt
from flask import current_app, g, request

from bandledger.app.errors import AppError, ErrorCode
from bandledger.app.models.band import IDENTITY_MAX_LENGTH


def require_caller(f: Callable) -> Callable:
    """
    Route decorator that resolves the caller identity.

    Usage:
        @bands_bp.route("/", methods=["POST"])
        @require_caller
        def create_band():
            caller = g.caller  # always a non-empty str when this runs
            ...
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return decorated


def _authenticate_request() -> None:
    """
    Performs the full JWT sequence and sets flask.g.caller.

    Raises AppError on any failure (never returns a response directly —
    the error propagates to the global Flask error handler).
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header:
        raise AppError(
            ErrorCode.TOKEN_MISSING,
            "Authentication required. Provide a Bearer token in the Authorization header.",
            401,
        )

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "Authorization header must be in the format: Bearer <token>.",
            401,
        )

    try:
        payload = jwt.decode(
            parts[1],
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        raise AppError(
            ErrorCode.TOKEN_EXPIRED,
            "The access token has expired.",
            401,
        )
    except jwt.InvalidTokenError:
        # Covers: bad signature, malformed token, non-string sub, etc.
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The access token is invalid or has been tampered with.",
            401,
        )

    caller = payload.get("sub")
    if not isinstance(caller, str) or not caller:
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The access token is missing the required 'sub' claim.",
            401,
        )

    if len(caller) > IDENTITY_MAX_LENGTH:
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            f"The 'sub' claim must be at most {IDENTITY_MAX_LENGTH} characters.",
            401,
        )

    g.caller = caller
