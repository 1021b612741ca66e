"""Main CLI entry point."""

import click

from fintrack.database.factories import create_sqlite_store
from fintrack.logging_config import configure_logging
from fintrack.tracker import FinanceTracker

# Import and register all commands at module level
from fintrack.cli.commands import (
    account,
    budget,
    category,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINTRACK_DB_PATH environment variable)",
    envvar="FINTRACK_DB_PATH",
)
@click.option("--log-level", help="Log level (overrides FINTRACK_LOG_LEVEL, default WARNING)")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None, log_json: bool):
    """Fintrack - personal finance tracking.

    Record income, expenses and transfers against accounts, and keep
    budgets in step with the expenses that count toward them.
    """
    ctx.ensure_object(dict)

    # Open the store only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            configure_logging(log_level, json=log_json)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--log-level")
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        tracker = FinanceTracker(store)
        ctx.obj["tracker"] = tracker
        ctx.call_on_close(tracker.close)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
