"""End-to-end CLI tests against a temporary SQLite database."""

import pytest

from fintrack.cli.commands.transaction import parse_item
from fintrack.cli.main import cli
from fintrack.database.factories import create_sqlite_store
from fintrack.domain.entities import SubItemStatus
from fintrack.tracker import FinanceTracker


@pytest.fixture
def run(cli_runner, temp_db_path):
    """Invoke the CLI against the temporary database."""

    def _run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db_path, *args])

    return _run


def _extract_id(output: str) -> str:
    for line in output.splitlines():
        if "ID:" in line:
            return line.split("ID:")[1].strip().rstrip(")")
    raise AssertionError(f"no ID in output: {output}")


@pytest.fixture
def workspace(run):
    """Seeded categories and a Checking account with $500."""
    assert run("category", "seed").exit_code == 0
    result = run("account", "create", "Checking", "--balance", "500")
    assert result.exit_code == 0
    return _extract_id(result.output)


def test_account_create_and_list(run, workspace):
    result = run("account", "list")
    assert result.exit_code == 0
    assert "Checking" in result.output
    assert "500.00" in result.output


def test_duplicate_account_rejected(run, workspace):
    result = run("account", "create", "Checking")
    assert result.exit_code == 1
    assert "Error: Account with name 'Checking' already exists" in result.output


def test_seed_is_idempotent(run, workspace):
    result = run("category", "seed")
    assert result.exit_code == 0
    assert "Default categories already exist." in result.output


def test_transaction_add_updates_balance(run, workspace):
    result = run("transaction", "add", "--account", "Checking", "--amount", "45.20", "--category", "Food & Dining")
    assert result.exit_code == 0
    assert "Created transaction" in result.output

    listing = run("account", "list")
    assert "454.80" in listing.output


def test_transaction_add_with_breakdown(run, workspace):
    result = run(
        "transaction", "add",
        "--account", "Checking",
        "--amount", "30",
        "--category", "Shopping",
        "--item", "Shirt=20",
        "--item", "Socks=10:Owed",
    )
    assert result.exit_code == 0

    listing = run("transaction", "list", "-v")
    assert "Shirt" in listing.output
    assert "(Owed)" in listing.output


def test_breakdown_item_ids_are_unique(run, workspace, temp_db_path):
    for _ in range(2):
        result = run(
            "transaction", "add",
            "--account", "Checking",
            "--amount", "30",
            "--category", "Shopping",
            "--item", "Shirt=20",
            "--item", "Socks=10",
        )
        assert result.exit_code == 0

    tracker = FinanceTracker(create_sqlite_store(database_path=temp_db_path))
    item_ids = [item.id for txn in tracker.list_transactions() for item in txn.sub_items]
    tracker.close()
    assert len(item_ids) == 4
    assert len(set(item_ids)) == 4


def test_transaction_add_unbalanced_breakdown(run, workspace):
    result = run(
        "transaction", "add",
        "--account", "Checking",
        "--amount", "30",
        "--category", "Shopping",
        "--item", "Shirt=20",
    )
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "No transactions found." in run("transaction", "list").output


def test_budget_overflow_rejected(run, workspace):
    result = run("budget", "create", "Groceries", "--category", "Food & Dining", "--amount", "100")
    assert result.exit_code == 0
    assert "Created budget 'Groceries'" in result.output

    first = run(
        "transaction", "add", "--account", "Checking", "--amount", "90",
        "--category", "Food & Dining", "--budget", "Groceries",
    )
    assert first.exit_code == 0
    assert "Charged to budget 'Groceries' ($10.00 remaining)" in first.output

    second = run(
        "transaction", "add", "--account", "Checking", "--amount", "20",
        "--category", "Food & Dining", "--budget", "Groceries",
    )
    assert second.exit_code == 1
    assert "Error: Budget 'Groceries' has only $10.00 remaining" in second.output

    budgets = run("budget", "list")
    assert "90.00" in budgets.output
    assert "410.00" in run("account", "list").output


def test_auto_budget_creates_category_budget(run, workspace):
    result = run(
        "transaction", "add", "--account", "Checking", "--amount", "25",
        "--category", "Travel", "--auto-budget",
    )
    assert result.exit_code == 0
    assert "Charged to budget 'Travel Budget'" in result.output


def test_budget_recompute_and_summary(run, workspace):
    run("budget", "create", "Everything", "--category", "all", "--amount", "1000", "--type", "all_transactions")
    run("transaction", "add", "--account", "Checking", "--amount", "100", "--category", "Shopping")
    run("transaction", "add", "--account", "Checking", "--amount", "2000", "--category", "Salary", "--type", "Income")

    recompute = run("budget", "recompute")
    assert recompute.exit_code == 0
    assert "Everything: spent $100.00 of $1,000.00" in recompute.output

    progress = run("summary", "budgets")
    assert progress.exit_code == 0
    assert "Everything" in progress.output
    assert "10.0%" in progress.output

    categories = run("summary", "categories", "--this-month")
    assert categories.exit_code == 0
    assert "Shopping" in categories.output
    assert "100.0%" in categories.output

    for command in (["summary", "monthly"], ["summary", "trend", "--months", "3"], ["summary", "compare"]):
        assert run(*command).exit_code == 0


def test_delete_transaction_restores_balance(run, workspace):
    added = run("transaction", "add", "--account", "Checking", "--amount", "50", "--category", "Shopping")
    transaction_id = added.output.split("Created transaction")[1].split()[0]

    result = run("transaction", "delete", transaction_id, "--yes")
    assert result.exit_code == 0
    assert "500.00" in run("account", "list").output


def test_unknown_account(run, workspace):
    result = run("transaction", "add", "--account", "Nope", "--amount", "5", "--category", "Shopping")
    assert result.exit_code == 1
    assert "Error: Account 'Nope' not found" in result.output


def test_invalid_amount(run, workspace):
    result = run("transaction", "add", "--account", "Checking", "--amount", "lots", "--category", "Shopping")
    assert result.exit_code == 1
    assert "Error: Invalid amount" in result.output


def test_help_does_not_open_database(cli_runner, tmp_path):
    db_path = tmp_path / "untouched.db"
    result = cli_runner.invoke(cli, ["--db-path", str(db_path), "--help"])
    assert result.exit_code == 0
    assert not db_path.exists()


def test_parse_item():
    item = parse_item("Socks=10.50:owed", "s-2")
    assert item.id == "s-2"
    assert item.name == "Socks"
    assert str(item.amount) == "10.50"
    assert item.status == SubItemStatus.OWED

    with pytest.raises(ValueError):
        parse_item("Socks", "s-1")
    with pytest.raises(ValueError):
        parse_item("Socks=1:Lost", "s-1")
