"""
errors.py — AppError base class and error code registry.

Every failure returned by the ledger uses a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - Authentication failures (401) are raised by the middleware only.
    Membership failures (403) are raised by the services only.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_INPUT              = "INVALID_INPUT"      # empty name, amount <= 0

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    # Also used for inactive bands and for a split the caller does not hold.
    NOT_FOUND                  = "NOT_FOUND"

    # ── Membership Errors (403) ────────────────────────────────────────────
    NOT_BAND_MEMBER            = "NOT_BAND_MEMBER"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    ALREADY_EXISTS             = "ALREADY_EXISTS"     # duplicate join, split already paid
    ALREADY_SETTLED            = "ALREADY_SETTLED"    # expense-level settlement finalised
    CAPACITY_EXCEEDED          = "CAPACITY_EXCEEDED"  # member list or user index full

    # ── Auth Errors (401) ──────────────────────────────────────────────────
    TOKEN_MISSING              = "TOKEN_MISSING"
    TOKEN_INVALID              = "TOKEN_INVALID"
    TOKEN_EXPIRED              = "TOKEN_EXPIRED"

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"


# ── Factories ──────────────────────────────────────────────────────────────
# One per failure kind so the HTTP status travels with the code.

def invalid_input(message: str, field: str | None = None) -> AppError:
    return AppError(ErrorCode.INVALID_INPUT, message, 400, field=field)


def not_found(message: str) -> AppError:
    return AppError(ErrorCode.NOT_FOUND, message, 404)


def not_band_member(message: str) -> AppError:
    return AppError(ErrorCode.NOT_BAND_MEMBER, message, 403)


def already_exists(message: str) -> AppError:
    return AppError(ErrorCode.ALREADY_EXISTS, message, 409)


def already_settled(message: str) -> AppError:
    return AppError(ErrorCode.ALREADY_SETTLED, message, 409)


def capacity_exceeded(message: str) -> AppError:
    return AppError(ErrorCode.CAPACITY_EXCEEDED, message, 409)
