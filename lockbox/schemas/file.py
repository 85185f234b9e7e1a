"""File resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields

from .common import Base64Bytes


class FileCreateSchema(Schema):
    """Payload for ``POST /files``; the owner is the caller."""

    mime_type = fields.String(required=True)
    name = fields.String(required=True)
    data = Base64Bytes(required=True)


class FilePatchSchema(Schema):
    """Payload for ``PATCH /files/<id>``; omitted fields stay unchanged."""

    mime_type = fields.String()
    name = fields.String()
    data = Base64Bytes()


class FileSchema(Schema):
    """Representation of a stored file, payload included."""

    id = fields.Integer(required=True)
    owner_id = fields.Integer(required=True)
    created_at = fields.DateTime(required=True)
    mime_type = fields.String(required=True)
    name = fields.String(required=True)
    data = Base64Bytes(required=True)
