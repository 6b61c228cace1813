"""Tests for category commands."""

from retailmetrics.cli.main import cli


def test_category_list_empty(cli_runner, temp_db):
    """Test listing categories before any exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])

    assert result.exit_code == 0
    assert "No categories found" in result.output


def test_category_add_and_list(cli_runner, temp_db):
    """Test creating a category and listing it."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "category", "add", "Snacks"]
    )
    assert result.exit_code == 0
    assert "Created category 'Snacks'" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])
    assert result.exit_code == 0
    assert "Snacks" in result.output


def test_category_add_duplicate(cli_runner, temp_db, category_service):
    """Test creating a category that already exists."""
    category_service.create_category("Snacks")

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "category", "add", "Snacks"]
    )

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_expense_with_unknown_category(cli_runner, temp_db):
    """Test recording an expense against a missing category."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "expense",
            "add",
            "--amount",
            "10",
            "--description",
            "Power",
            "--category",
            "Utilities",
        ],
    )

    assert result.exit_code == 1
    assert "Category 'Utilities' not found" in result.output


def test_expense_and_investment_listing(cli_runner, temp_db, category_service):
    """Test listing expenses and investments after recording them."""
    category_service.create_category("Utilities")
    base = ["--db-path", temp_db.database_path]

    result = cli_runner.invoke(
        cli,
        base
        + ["expense", "add", "--amount", "$1,200.00", "--description", "Power", "--date", "2024-01-05", "--category", "Utilities"],
    )
    assert result.exit_code == 0
    result = cli_runner.invoke(cli, base + ["investment", "add", "--amount", "500"])
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, base + ["expense", "list", "--start-date", "2024-01-01", "--end-date", "2024-01-31"])
    assert result.exit_code == 0
    assert "Power" in result.output
    assert "$1200.00" in result.output

    result = cli_runner.invoke(cli, base + ["investment", "list"])
    assert result.exit_code == 0
    assert "undated" in result.output
    assert "$500.00" in result.output
