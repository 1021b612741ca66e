"""CLI helpers for resolving accounts, categories and budgets from user input."""

from __future__ import annotations

import click

from fintrack.cli.error_handling import unwrap_or_exit
from fintrack.domain.entities import Account, Budget
from fintrack.tracker import FinanceTracker


def resolve_account_or_exit(ctx: click.Context, tracker: FinanceTracker, account: str) -> Account:
    """Resolve an account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    found = tracker.get_account(account)
    if found is None:
        found = next((acc for acc in tracker.list_accounts() if acc.name == account), None)
    if found is None:
        click.echo(f"Error: Account '{account}' not found", err=True)
        ctx.exit(1)
    return found


def resolve_category_or_exit(ctx: click.Context, tracker: FinanceTracker, category: str) -> str:
    """Resolve a category name or ID to its ID, or exit with a CLI error."""
    return unwrap_or_exit(ctx, tracker.resolve_category(category)).id


def resolve_budget_or_exit(ctx: click.Context, tracker: FinanceTracker, budget: str) -> Budget:
    """Resolve a budget name or ID, or exit with a CLI error."""
    found = tracker.get_budget(budget)
    if found is None:
        found = next((b for b in tracker.list_budgets() if b.name == budget), None)
    if found is None:
        click.echo(f"Error: Budget '{budget}' not found", err=True)
        ctx.exit(1)
    return found
