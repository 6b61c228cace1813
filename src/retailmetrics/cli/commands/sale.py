"""Checkout and sale history commands."""

from datetime import datetime, time
from decimal import Decimal

import click

from retailmetrics.cli.date_filters import date_range_options, resolve_cli_date_range
from retailmetrics.cli.error_handling import handle_domain_error, require_writable
from retailmetrics.config import load_config
from retailmetrics.domain.calculations import local_date
from retailmetrics.domain.entities import CartLine
from retailmetrics.domain.errors import DomainError
from retailmetrics.domain.sales import SaleService
from retailmetrics.utils.amount_parser import parse_percent
from retailmetrics.utils.currency import format_currency
from retailmetrics.utils.date_parser import parse_date

NOON = time(12, 0)


def parse_cart_line(text: str) -> CartLine:
    """Parse PRODUCT_ID:QUANTITY[:DISCOUNT] into a cart line.

    Raises:
        ValueError: If the text is malformed
    """
    parts = [part.strip() for part in text.split(":")]
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid item '{text}', expected PRODUCT_ID:QUANTITY[:DISCOUNT]")
    try:
        product_id = int(parts[0])
        quantity = int(parts[1])
    except ValueError as e:
        raise ValueError(f"Invalid item '{text}': product ID and quantity must be integers") from e
    discount = parse_percent(parts[2]) if len(parts) == 3 else Decimal("0")
    return CartLine(product_id=product_id, quantity=quantity, discount=discount)


@click.group()
def sale_group():
    """Record checkouts and list sales."""
    pass


@sale_group.command("record")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Cart line as PRODUCT_ID:QUANTITY[:DISCOUNT%], repeat for more lines",
)
@click.option("--payment-method", default="cash", show_default=True, help="How the customer paid")
@click.option("--tax-rate", default="0", show_default=True, help="Tax percentage on the subtotal")
@click.option("--date", "sale_date", help="Record the sale at noon of this day instead of now")
@click.pass_context
def record_sale(ctx, items: tuple[str, ...], payment_method: str, tax_rate: str, sale_date: str | None):
    """Record a sale and take its units out of stock.

    Examples:
        retailmetrics sale record --item 1:2 --item 3:1:10 --tax-rate 8
    """
    db = require_writable(ctx)
    service = SaleService(db)

    try:
        lines = [parse_cart_line(item) for item in items]
        rate = parse_percent(tax_rate)
        day = parse_date(sale_date) if sale_date else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        created_at = None
        if day is not None:
            created_at = datetime.combine(day, NOON, tzinfo=load_config(db).timezone)
        sale_id = service.record_sale(
            lines, payment_method=payment_method, tax_rate=rate, created_at=created_at
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded sale (ID: {sale_id})")


@sale_group.command("list")
@date_range_options
@click.pass_context
def list_sales(ctx, start_date: str | None, end_date: str | None, period_flags: dict[str, bool]):
    """List sales with their totals."""
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )

    try:
        config = load_config(db)
        sales = SaleService(db, tzinfo=config.timezone).list_sales(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not sales:
        click.echo("No sales found.")
        return

    click.echo(f"{'ID':>5}  {'Date':<10}  {'Items':>5}  {'Payment':<12} {'Tax':>12} {'Total':>14}")
    click.echo("-" * 66)
    for sale in sales:
        units = sum(item.quantity for item in sale.items)
        click.echo(
            f"{sale.id!s:>5}  {local_date(sale.created_at, config.timezone).isoformat():<10}  "
            f"{units:>5}  {sale.payment_method[:12]:<12} "
            f"{format_currency(sale.tax, config.currency, config.locale):>12} "
            f"{format_currency(sale.total, config.currency, config.locale):>14}"
        )


def register_commands(cli):
    """Register sale commands with main CLI."""
    cli.add_command(sale_group, name="sale")
