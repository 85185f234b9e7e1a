"""Account resource schemas.

Request schemas only check shape and types. Field formats and uniqueness
are the account service's business and come back as ``Invalid`` outcomes.
"""

from __future__ import annotations

from marshmallow import Schema, fields


class AccountCreateSchema(Schema):
    """Payload for ``POST /users``."""

    username = fields.String(required=True)
    password = fields.String(required=True, load_only=True)
    email = fields.String(required=True)


class AccountUpdateSchema(Schema):
    """Payload for ``PATCH /users/me``; omitted fields stay unchanged."""

    profile_picture_url = fields.String()
    username = fields.String()
    password = fields.String(load_only=True)
    email = fields.String()


class AccountPublicSchema(Schema):
    """What any authenticated caller may see about an account."""

    id = fields.Integer(required=True)
    created_at = fields.DateTime(required=True)
    profile_picture_url = fields.String(required=True)
    username = fields.String(required=True)


class AccountPrivateSchema(AccountPublicSchema):
    """The owner's own view; never includes the password hash."""

    email = fields.String(required=True)
    is_email_verified = fields.Boolean(required=True)
    is_password_reset_required = fields.Boolean(required=True)
    is_locked = fields.Boolean(required=True)
    is_banned = fields.Boolean(required=True)
