"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or insufficient stock."""


class DataSourceError(DomainError):
    """The data source could not be queried or read."""


def product_not_found(product_id) -> str:
    """Return message for missing product."""
    return f"Product {product_id} not found"


def category_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def duplicate_category(name: str) -> str:
    """Return message for duplicate category name."""
    return f"Category '{name}' already exists"


def insufficient_stock(product_name: str, available: int, requested: int) -> str:
    """Return message when a sale asks for more units than are in stock."""
    return (
        f"Not enough stock for '{product_name}': "
        f"{available} available, {requested} requested"
    )


def read_only_source() -> str:
    """Return message for writes against a read-only data source."""
    return "The selected data source is read-only"
