"""Flask CLI commands for seeding accounts through the account service."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from lockbox.core.container import EXTENSION_KEY, Services
from lockbox.services._shared.results import Invalid, Ok
from lockbox.services.accounts.dto import Account

LOGGER = logging.getLogger(__name__)


def _echo_errors(outcome: Invalid) -> None:
    click.echo("Account rejected:", err=True)
    for field, problems in outcome.errors.to_dict().items():
        for problem in problems:
            click.echo(f"  {field}: {problem['message']}", err=True)


@click.group("accounts")
def accounts_cli() -> None:
    """Account administration commands."""


@accounts_cli.command("create")
@click.option("--username", required=True)
@click.option("--email", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_command(username: str, email: str, password: str) -> None:
    """Create an account; the password is hashed like any sign-up."""
    services: Services = current_app.extensions[EXTENSION_KEY]
    outcome = services.accounts.insert(
        Account(
            username=username,
            email=email,
            password=password,
            profile_picture_url=current_app.config.get("DEFAULT_PROFILE_PICTURE_URL", ""),
        )
    )
    if isinstance(outcome, Invalid):
        _echo_errors(outcome)
        raise click.exceptions.Exit(1)
    if not isinstance(outcome, Ok):
        raise click.ClickException("Account creation failed; see the logs for details.")
    LOGGER.info("Seeded account %s", outcome.value.id)
    click.echo(f"Created account {outcome.value.id} ({outcome.value.username}).")
