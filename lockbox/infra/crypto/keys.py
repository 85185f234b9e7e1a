"""RSA key loading and generation for RS256 token signing."""

from __future__ import annotations

from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from lockbox.services._shared.errors import SigningKeyError


def _read(pem: str | bytes | None, path: str | None) -> bytes | None:
    if pem:
        return pem.encode() if isinstance(pem, str) else pem
    if path:
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise SigningKeyError(f"Cannot read key file {path!r}.") from exc
    return None


def load_private_key(pem: str | bytes | None = None, path: str | None = None) -> RSAPrivateKey | None:
    """Load an unencrypted PEM private key from text or a file.

    :returns: The key, or ``None`` when neither source is given.
    :raises SigningKeyError: If the source cannot be read or is not an RSA key.
    """
    raw = _read(pem, path)
    if raw is None:
        return None
    try:
        key = serialization.load_pem_private_key(raw, password=None)
    except (ValueError, TypeError) as exc:
        raise SigningKeyError("Private key is not a valid unencrypted PEM key.") from exc
    if not isinstance(key, RSAPrivateKey):
        raise SigningKeyError("Private key must be an RSA key for RS256.")
    return key


def load_public_key(pem: str | bytes | None = None, path: str | None = None) -> RSAPublicKey | None:
    """Load a PEM public key from text or a file.

    :returns: The key, or ``None`` when neither source is given.
    :raises SigningKeyError: If the source cannot be read or is not an RSA key.
    """
    raw = _read(pem, path)
    if raw is None:
        return None
    try:
        key = serialization.load_pem_public_key(raw)
    except (ValueError, TypeError) as exc:
        raise SigningKeyError("Public key is not a valid PEM key.") from exc
    if not isinstance(key, RSAPublicKey):
        raise SigningKeyError("Public key must be an RSA key for RS256.")
    return key


def generate_key_pair(key_size: int = 2048) -> tuple[bytes, bytes]:
    """Generate a fresh RSA key pair.

    :returns: ``(private_pem, public_pem)``; the private key is PKCS#8 and
        unencrypted.
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem
