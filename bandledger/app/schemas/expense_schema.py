"""
schemas/expense_schema.py — Marshmallow schemas for expense endpoints.

Validation responsibility:
  - This file: request shape (required fields, field types). `amount` must be
    a JSON integer; floats like 10.0 and numeric strings are rejected here.
  - services/expense_service.py:
      - INVALID_INPUT   (amount <= 0, description/category too long)
      - NOT_FOUND / NOT_BAND_MEMBER (require DB lookups)

settle_split takes no body: the expense id comes from the URL and the
settling member is the authenticated caller.
"""

from __future__ import annotations

from marshmallow import Schema, fields


class CreateExpenseSchema(Schema):
    """POST /bands/:id/expenses — the payer is the authenticated caller."""

    description = fields.Str(required=True)

    # Range (> 0) is a service rule so it reports INVALID_INPUT.
    amount = fields.Int(required=True, strict=True)

    category = fields.Str(required=True)
