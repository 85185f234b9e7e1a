"""Cryptographic adapters: password hashing and RS256 bearer tokens."""

from __future__ import annotations

from .jwt_secret_service import JWTSecretService
from .keys import generate_key_pair, load_private_key, load_public_key

__all__ = ["JWTSecretService", "generate_key_pair", "load_private_key", "load_public_key"]
