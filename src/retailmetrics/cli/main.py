"""Main CLI entry point."""

import logging

import click

from retailmetrics.database.factories import create_sqlite_database, open_snapshot
from retailmetrics.domain.errors import DataSourceError
from retailmetrics.cli.error_handling import handle_domain_error

# Import and register all commands at module level
from retailmetrics.cli.commands import (
    category,
    product,
    sale,
    expense,
    investment,
    settings,
    report,
)

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides RETAILMETRICS_DB_PATH environment variable)",
    envvar="RETAILMETRICS_DB_PATH",
)
@click.option(
    "--snapshot",
    type=click.Path(exists=True, dir_okay=False),
    help="Read reports from a JSON export instead of the database (read-only)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, snapshot: str | None, verbose: bool):
    """Retailmetrics - point-of-sale records and retail analytics.

    Record products, sales, expenses and investments, then report on cost
    of goods sold, net profit, break-even, ROI and stock value.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    # Open the data source only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        if snapshot is not None:
            db = open_snapshot(snapshot)
        else:
            db = create_sqlite_database(database_path=db_path)
        try:
            db.connect()
            if snapshot is None:
                db.initialize_schema()
        except DataSourceError as e:
            handle_domain_error(ctx, e)
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
category.register_commands(cli)
product.register_commands(cli)
sale.register_commands(cli)
expense.register_commands(cli)
investment.register_commands(cli)
settings.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
