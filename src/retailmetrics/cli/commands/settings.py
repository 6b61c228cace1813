"""Settings commands."""

from datetime import datetime

import click

from retailmetrics.cli.error_handling import handle_domain_error, require_writable
from retailmetrics.config import load_config
from retailmetrics.domain.errors import DomainError
from retailmetrics.utils.currency import SUPPORTED_CURRENCIES, currency_symbol


@click.group()
def settings_group():
    """Show and change settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show the settings reports are rendered with."""
    db = ctx.obj["db"]
    try:
        stored = db.get_settings()
        config = load_config(db)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Stored currency: {stored.currency}")
    click.echo(f"Report currency: {config.currency} ({currency_symbol(config.currency)})")
    click.echo(f"Locale:          {config.locale}")
    click.echo(f"Timezone:        {datetime.now(config.timezone).tzname()}")


@settings_group.command("set-currency")
@click.argument("currency", type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False))
@click.pass_context
def set_currency(ctx, currency: str):
    """Store the display currency."""
    db = require_writable(ctx)
    try:
        db.update_settings(currency.upper())
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Currency set to {currency.upper()}")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
