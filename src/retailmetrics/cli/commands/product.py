"""Product and inventory commands."""

import click

from retailmetrics.cli.error_handling import handle_domain_error, require_writable
from retailmetrics.domain.errors import DomainError
from retailmetrics.domain.products import ProductService
from retailmetrics.utils.amount_parser import parse_amount
from retailmetrics.utils.date_parser import parse_date


@click.group()
def product_group():
    """Manage products and stock."""
    pass


@product_group.command("add")
@click.argument("name")
@click.option("--price", required=True, help="Selling price per unit")
@click.option("--purchase-price", help="Cost per unit, used for cost of goods sold")
@click.option("--stock", type=click.IntRange(min=0), default=0, help="Units on hand")
@click.option("--min-stock", type=click.IntRange(min=0), default=0, help="Reorder threshold")
@click.option("--category", help="Category name")
@click.option("--barcode", help="Barcode")
@click.option("--expiry-date", help="Expiry date of the units on hand (YYYY-MM-DD)")
@click.pass_context
def add_product(
    ctx,
    name: str,
    price: str,
    purchase_price: str | None,
    stock: int,
    min_stock: int,
    category: str | None,
    barcode: str | None,
    expiry_date: str | None,
):
    """Add a product.

    Examples:
        retailmetrics product add "Espresso beans" --price 12.50 --purchase-price 7 --stock 40
    """
    service = ProductService(require_writable(ctx))

    try:
        price_value = parse_amount(price)
        cost_value = parse_amount(purchase_price) if purchase_price else None
        expiry = parse_date(expiry_date) if expiry_date else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        product_id = service.create_product(
            name=name,
            price=price_value,
            purchase_price=cost_value,
            stock=stock,
            min_stock=min_stock,
            category_name=category,
            barcode=barcode,
            expiry_date=expiry,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created product '{name}' (ID: {product_id})")


@product_group.command("list")
@click.pass_context
def list_products(ctx):
    """List products with their stock levels."""
    db = ctx.obj["db"]
    try:
        products = db.list_products()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':>5}  {'Name':<30} {'Price':>10} {'Cost':>10} {'Stock':>7} {'Min':>5}")
    click.echo("-" * 72)
    for p in products:
        cost = f"{p.purchase_price:.2f}" if p.purchase_price is not None else "-"
        flag = " LOW" if p.stock <= p.min_stock else ""
        click.echo(
            f"{p.id!s:>5}  {p.name[:30]:<30} {p.price:>10.2f} {cost:>10} {p.stock:>7} {p.min_stock:>5}{flag}"
        )


@product_group.command("restock")
@click.argument("product_id", type=int)
@click.argument("quantity", type=int)
@click.pass_context
def restock_product(ctx, product_id: int, quantity: int):
    """Add QUANTITY received units to a product's stock."""
    service = ProductService(require_writable(ctx))
    try:
        new_stock = service.restock(product_id, quantity)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Product {product_id} now has {new_stock} units in stock")


@product_group.command("delete")
@click.argument("product_id", type=int)
@click.pass_context
def delete_product(ctx, product_id: int):
    """Delete a product. Past sales keep their history."""
    service = ProductService(require_writable(ctx))
    try:
        service.delete_product(product_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted product {product_id}")


def register_commands(cli):
    """Register product commands with main CLI."""
    cli.add_command(product_group, name="product")
