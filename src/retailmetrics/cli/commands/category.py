"""Category management commands."""

import click

from retailmetrics.cli.error_handling import handle_domain_error, require_writable
from retailmetrics.domain.category import CategoryService
from retailmetrics.domain.errors import DomainError


@click.group()
def category_group():
    """Manage product and expense categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    db = ctx.obj["db"]
    try:
        categories = db.list_categories()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not categories:
        click.echo("No categories found. Use 'category add' to create one.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"  {cat.name} (ID: {cat.id})")


@category_group.command("add")
@click.argument("name")
@click.pass_context
def add_category(ctx, name: str):
    """Create a new category."""
    service = CategoryService(require_writable(ctx))
    try:
        category_id = service.create_category(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{name.strip()}' (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
