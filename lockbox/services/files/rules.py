"""Field rules for files."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from lockbox.services._shared.validation import ValidationErrors, no_control_characters
from lockbox.services.files.dto import File

# RFC 6838 ``type/subtype`` with restricted-name characters, optional parameters.
MIME_TYPE_PATTERN = (
    r"^[A-Za-z0-9][A-Za-z0-9!#$&^_.+-]{0,126}/[A-Za-z0-9][A-Za-z0-9!#$&^_.+-]{0,126}"
    r"(\s*;\s*[A-Za-z0-9!#$&^_.+-]+=(\"[^\"]*\"|[A-Za-z0-9!#$&^_.+-]+))*$"
)


class FileRulesSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    owner_id = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    mime_type = fields.String(
        required=True,
        validate=[
            validate.Length(min=1, max=256),
            no_control_characters,
            validate.Regexp(MIME_TYPE_PATTERN, error="Must look like 'type/subtype'."),
        ],
    )
    name = fields.String(
        required=True,
        validate=[validate.Length(min=1, max=256), no_control_characters],
    )


_rules = FileRulesSchema()


def validate_file(file: File) -> ValidationErrors:
    """Return the rule violations of ``file`` (empty when valid)."""
    errors = ValidationErrors()
    errors.merge_messages(
        _rules.validate(
            {"owner_id": file.owner_id, "mime_type": file.mime_type, "name": file.name}
        )
    )
    return errors
