"""Initial investment commands."""

import click

from retailmetrics.cli.error_handling import handle_domain_error, require_writable
from retailmetrics.config import load_config
from retailmetrics.domain.errors import DomainError
from retailmetrics.domain.investments import InvestmentService
from retailmetrics.utils.amount_parser import parse_amount
from retailmetrics.utils.currency import format_currency
from retailmetrics.utils.date_parser import parse_date


@click.group()
def investment_group():
    """Record capital invested in the business."""
    pass


@investment_group.command("add")
@click.option("--amount", required=True, help="Invested amount")
@click.option("--description", help="What the money went into")
@click.option("--date", "investment_date", help="Investment date; undated investments skip the monthly ROI series")
@click.pass_context
def add_investment(ctx, amount: str, description: str | None, investment_date: str | None):
    """Record an initial investment."""
    service = InvestmentService(require_writable(ctx))

    try:
        invested = parse_amount(amount)
        invested_on = parse_date(investment_date) if investment_date else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        investment_id = service.add_investment(invested, description, invested_on)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded investment (ID: {investment_id})")


@investment_group.command("list")
@click.pass_context
def list_investments(ctx):
    """List initial investments."""
    db = ctx.obj["db"]
    try:
        config = load_config(db)
        investments = db.list_investments()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not investments:
        click.echo("No investments found.")
        return

    for inv in investments:
        day = inv.investment_date.isoformat() if inv.investment_date else "undated"
        amount = format_currency(inv.amount, config.currency, config.locale)
        click.echo(f"{day:<10}  {(inv.description or '')[:40]:<40} {amount:>14}")


def register_commands(cli):
    """Register investment commands with main CLI."""
    cli.add_command(investment_group, name="investment")
