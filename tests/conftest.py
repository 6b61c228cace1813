"""Shared pytest fixtures for retailmetrics tests."""

import os
import tempfile
from pathlib import Path

import pytest
from dateutil import tz

from retailmetrics.database.factories import create_sqlite_database
from retailmetrics.domain.category import CategoryService
from retailmetrics.domain.expenses import ExpenseService
from retailmetrics.domain.investments import InvestmentService
from retailmetrics.domain.products import ProductService
from retailmetrics.domain.sales import SaleService


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    for name in (
        "RETAILMETRICS_DB_PATH",
        "RETAILMETRICS_CURRENCY",
        "RETAILMETRICS_LOCALE",
        "RETAILMETRICS_TZ",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RETAILMETRICS_TZ", "UTC")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def product_service(temp_db):
    return ProductService(temp_db)


@pytest.fixture
def sale_service(temp_db):
    return SaleService(temp_db, tzinfo=tz.UTC)


@pytest.fixture
def expense_service(temp_db):
    return ExpenseService(temp_db)


@pytest.fixture
def investment_service(temp_db):
    return InvestmentService(temp_db)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def utc():
    return tz.UTC


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
