"""
schemas/band_schema.py — Marshmallow schemas for band endpoints.

Validation responsibility:
  - This file: request shape only (required fields, field types).
  - services/band_service.py:
      - INVALID_INPUT     (empty or over-long name, over-long nickname)
      - NOT_FOUND / ALREADY_EXISTS / CAPACITY_EXCEEDED (require DB lookups)

Name and nickname rules live in the service so the library surface and the
HTTP surface reject the same input with the same code.
"""

from __future__ import annotations

from marshmallow import Schema, fields


class CreateBandSchema(Schema):
    """POST /bands"""

    name = fields.Str(required=True)


class JoinBandSchema(Schema):
    """POST /bands/:id/members — the joining member is the authenticated caller."""

    nickname = fields.Str(required=True)
