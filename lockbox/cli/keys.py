"""Flask CLI command generating the RS256 key pair used for bearer tokens."""

from __future__ import annotations

import os
from pathlib import Path

import click

from lockbox.infra.crypto import generate_key_pair

PRIVATE_KEY_FILE = "jwt_private.pem"
PUBLIC_KEY_FILE = "jwt_public.pem"


@click.group("keys")
def keys_cli() -> None:
    """Signing key management."""


@keys_cli.command("generate")
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory receiving jwt_private.pem and jwt_public.pem.",
)
@click.option("--bits", type=click.IntRange(min=2048), default=2048, show_default=True)
@click.option("--force", is_flag=True, help="Overwrite existing key files.")
def generate_command(out_dir: Path, bits: int, force: bool) -> None:
    """Write a fresh RSA key pair as PEM files."""
    private_path = out_dir / PRIVATE_KEY_FILE
    public_path = out_dir / PUBLIC_KEY_FILE
    if not force and (private_path.exists() or public_path.exists()):
        raise click.UsageError(f"Key files already exist in {out_dir}; pass --force to replace.")

    private_pem, public_pem = generate_key_pair(bits)
    out_dir.mkdir(parents=True, exist_ok=True)
    private_path.write_bytes(private_pem)
    os.chmod(private_path, 0o600)
    public_path.write_bytes(public_pem)

    click.echo(f"JWT_PRIVATE_KEY_PATH={private_path}")
    click.echo(f"JWT_PUBLIC_KEY_PATH={public_path}")
