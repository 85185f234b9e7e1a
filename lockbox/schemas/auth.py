"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class LoginSchema(Schema):
    """Input payload for authenticating an account."""

    username = fields.String(required=True)
    password = fields.String(required=True, load_only=True)
