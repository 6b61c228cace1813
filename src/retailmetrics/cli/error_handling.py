"""CLI error handling helpers."""

import logging

import click

from retailmetrics.database.base import Database
from retailmetrics.domain.errors import DataSourceError, DomainError, read_only_source

logger = logging.getLogger(__name__)

DATA_SOURCE_MESSAGE = "Error: could not load report data"
RETRY_HINT = "Check that the database or snapshot is reachable and run the command again."


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Data source failures get a generic message; their details are logged.
    """
    if isinstance(error, DataSourceError):
        logger.debug("Data source failure: %s", error)
        click.echo(DATA_SOURCE_MESSAGE, err=True)
        click.echo(RETRY_HINT, err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_writable(ctx: click.Context) -> Database:
    """Return the writable database of the context or exit with an error."""
    db = ctx.obj["db"]
    if not isinstance(db, Database):
        click.echo(f"Error: {read_only_source()}", err=True)
        ctx.exit(1)
    return db
