"""
Field-level validation details returned inside ``Invalid`` outcomes.

Rules themselves are declared as Marshmallow schemas next to each service;
this module only collects their messages, plus service-level findings such as
uniqueness conflicts, into one accumulating structure.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from marshmallow import ValidationError

UNIQUE = "unique"
INVALID = "invalid"

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def no_control_characters(value: str) -> None:
    """Marshmallow validator rejecting C0/C1 control characters."""
    if _CONTROL_CHARACTERS.search(value or ""):
        raise ValidationError("Must not contain control characters.")


@dataclass(frozen=True, slots=True)
class FieldError:
    """
    One problem with one field.

    :param code: Short machine-readable category (``"unique"``, ``"invalid"``).
    :type code: str
    :param message: Human-readable explanation.
    :type message: str
    :param value: Offending value when it is safe to echo back.
    :type value: Any
    """

    code: str
    message: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.value is not None:
            payload["params"] = {"value": self.value}
        return payload


class ValidationErrors:
    """Accumulate :class:`FieldError` entries per field name.

    Instances are falsy while empty, so callers can write
    ``if errors: return Invalid(errors)``.
    """

    def __init__(self) -> None:
        self._fields: dict[str, list[FieldError]] = {}

    def add(self, field: str, code: str, message: str, value: Any = None) -> None:
        self._fields.setdefault(field, []).append(FieldError(code, message, value))

    def add_unique(self, field: str, value: Any) -> None:
        """Record that ``value`` is already taken for ``field``."""
        self.add(field, UNIQUE, f"{field} is already in use.", value)

    def merge_messages(self, messages: Mapping[str, Any]) -> None:
        """Fold Marshmallow ``errors`` mappings into this collection.

        :param messages: Output of :meth:`marshmallow.Schema.validate`, i.e.
            ``{field: [message, ...]}``.
        """
        for field, entries in messages.items():
            if isinstance(entries, str):
                entries = [entries]
            for message in entries:
                self.add(field, INVALID, str(message))

    def fields(self) -> list[str]:
        return list(self._fields)

    def get(self, field: str) -> list[FieldError]:
        return list(self._fields.get(field, ()))

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Serialize for transport (``{field: [{code, message, params}]}``)."""
        return {
            field: [entry.to_dict() for entry in entries]
            for field, entries in self._fields.items()
        }

    def __contains__(self, field: object) -> bool:
        return field in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._fields.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationErrors):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"ValidationErrors({self._fields!r})"
