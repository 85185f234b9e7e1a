"""Common Marshmallow fields shared across resources."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from marshmallow import fields


class Base64Bytes(fields.Field):
    """Binary payload carried as standard base64 text in JSON."""

    default_error_messages = {"invalid": "Not valid base64 data."}

    def _serialize(self, value: bytes | None, attr: str | None, obj: Any, **kwargs: Any):
        if value is None:
            return None
        return base64.b64encode(value).decode("ascii")

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> bytes:
        if not isinstance(value, str):
            raise self.make_error("invalid")
        try:
            return base64.b64decode(value.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise self.make_error("invalid") from exc
