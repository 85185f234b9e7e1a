"""Ownership checks shared by resource endpoints."""

from __future__ import annotations


def is_owner(*, actor_id: int, owner_id: int) -> bool:
    """Return True if the authenticated account owns the resource.

    Unassigned ids (``0``) never own anything.
    """
    return actor_id > 0 and actor_id == owner_id
