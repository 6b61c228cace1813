"""Operating expense commands."""

from datetime import date

import click

from retailmetrics.cli.date_filters import date_range_options, resolve_cli_date_range
from retailmetrics.cli.error_handling import handle_domain_error, require_writable
from retailmetrics.config import load_config
from retailmetrics.domain.errors import DomainError
from retailmetrics.domain.expenses import ExpenseService
from retailmetrics.utils.amount_parser import parse_amount
from retailmetrics.utils.currency import format_currency
from retailmetrics.utils.date_parser import parse_date


@click.group()
def expense_group():
    """Record and list operating expenses."""
    pass


@expense_group.command("add")
@click.option("--amount", required=True, help="Expense amount (e.g., 120.00)")
@click.option("--description", required=True, help="What the expense was for")
@click.option("--date", "payment_date", help="Payment date (defaults to today)")
@click.option("--category", help="Category name")
@click.pass_context
def add_expense(
    ctx, amount: str, description: str, payment_date: str | None, category: str | None
):
    """Record an operating expense.

    Examples:
        retailmetrics expense add --amount 900 --description "Rent" --date 2024-01-01
    """
    service = ExpenseService(require_writable(ctx))

    try:
        expense_amount = parse_amount(amount)
        paid_on = parse_date(payment_date) if payment_date else date.today()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        expense_id = service.add_expense(expense_amount, description, paid_on, category)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded expense (ID: {expense_id})")


@expense_group.command("list")
@date_range_options
@click.pass_context
def list_expenses(ctx, start_date: str | None, end_date: str | None, period_flags: dict[str, bool]):
    """List operating expenses."""
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )

    try:
        config = load_config(db)
        expenses = db.list_expenses(start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not expenses:
        click.echo("No expenses found.")
        return

    for expense in expenses:
        amount = format_currency(expense.amount, config.currency, config.locale)
        click.echo(f"{expense.payment_date.isoformat()}  {expense.description[:40]:<40} {amount:>14}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
