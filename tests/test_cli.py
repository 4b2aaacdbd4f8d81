"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from pocketpal.cli import app
from pocketpal.config import DEFAULT_CATEGORIES


runner = CliRunner()


@pytest.fixture
def db(tmp_path) -> str:
    return str(tmp_path / "cli.db")


def invoke(*args: str):
    return runner.invoke(app, list(args))


class TestCli:

    def test_init_seeds_categories(self, db):
        result = invoke("init", "--db", db)
        assert result.exit_code == 0, result.output
        assert f"{len(DEFAULT_CATEGORIES)} categories" in result.output

    def test_categories_lists_defaults(self, db):
        result = invoke("categories", "--db", db)
        assert result.exit_code == 0, result.output
        assert result.output.split() == list(DEFAULT_CATEGORIES)

    def test_add_and_recent(self, db):
        result = invoke("add", "1500.50", "Food", "--date", "2024-01-05", "--app", "gopay", "--db", db)
        assert result.exit_code == 0, result.output
        assert "Saved Rp1.500,50 for Food" in result.output

        result = invoke("recent", "--db", db)
        assert result.exit_code == 0, result.output
        assert "2024-01-05 00:00 - Food - Rp1.500,50 (via gopay)" in result.output

    def test_recent_on_empty_ledger(self, db):
        result = invoke("recent", "--db", db)
        assert result.exit_code == 0
        assert "No transactions yet" in result.output

    @pytest.mark.parametrize("amount", ["abc", "0", "-10"])
    def test_add_rejects_bad_amount(self, db, amount):
        result = invoke("add", "--db", db, "--", amount, "Food")
        assert result.exit_code == 2
        assert "Invalid expense" in result.output

    def test_add_category_and_duplicate(self, db):
        result = invoke("add-category", "Rent", "--db", db)
        assert result.exit_code == 0, result.output
        assert "Added category Rent" in result.output

        result = invoke("add-category", "Rent", "--db", db)
        assert result.exit_code == 1
        assert "Category already exists: Rent" in result.output

    def test_add_category_rejects_blank(self, db):
        result = invoke("add-category", "  ", "--db", db)
        assert result.exit_code == 2

    def test_summary(self, db):
        result = invoke("summary", "--db", db)
        assert result.exit_code == 0, result.output
        assert "Today:      Rp0" in result.output
        assert "This week:  Rp0" in result.output
        assert "This month: Rp0" in result.output

    def test_empty_report(self, db):
        result = invoke("report", "week", "--db", db)
        assert result.exit_code == 0, result.output
        assert "No data to display" in result.output

    def test_month_report_after_add(self, db):
        invoke("add", "25000", "Shopping", "--db", db)
        result = invoke("report", "month", "--db", db)
        assert result.exit_code == 0, result.output
        assert "Shopping: Rp25.000" in result.output

    def test_unopenable_store(self, tmp_path):
        result = invoke("init", "--db", str(tmp_path / "missing" / "cli.db"))
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_recent_with_zero_limit_shows_nothing(self, db):
        invoke("add", "1500", "Food", "--date", "2024-01-05", "--db", db)
        result = invoke("recent", "-n", "0", "--db", db)
        assert result.exit_code == 0, result.output
        assert "No transactions yet" in result.output
        assert "Food" not in result.output
