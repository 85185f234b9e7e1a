"""Field rules for accounts, declared as a Marshmallow schema."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from lockbox.services._shared.validation import ValidationErrors, no_control_characters
from lockbox.services.accounts.dto import Account

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class AccountRulesSchema(Schema):
    """Format and length constraints checked before any storage access.

    ``password`` allows up to 1024 characters because updates carry the
    stored hash back through validation when the password is unchanged.
    """

    class Meta:
        unknown = EXCLUDE

    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=3, max=32),
            validate.Regexp(
                USERNAME_PATTERN,
                error="May only contain letters, digits, '_', '.' and '-'.",
            ),
        ],
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=6, max=1024))
    profile_picture_url = fields.String(
        load_default="",
        validate=[validate.Length(max=2048), no_control_characters],
    )


_rules = AccountRulesSchema()


def validate_account(account: Account) -> ValidationErrors:
    """Return the rule violations of ``account`` (empty when valid)."""
    errors = ValidationErrors()
    errors.merge_messages(
        _rules.validate(
            {
                "username": account.username,
                "email": account.email,
                "password": account.password,
                "profile_picture_url": account.profile_picture_url,
            }
        )
    )
    return errors
