"""Budget management commands."""

import click

from fintrack.cli.account_resolution import resolve_budget_or_exit
from fintrack.cli.error_handling import parse_or_exit, unwrap_or_exit
from fintrack.domain.budget import TIMEFRAMES
from fintrack.domain.entities import ALL_CATEGORIES, BudgetDraft, BudgetType
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date

BUDGET_TYPES = [t.value for t in BudgetType]


@click.group()
def budget_group():
    """Manage budgets."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--category", required=True, help=f"Category name or ID, or '{ALL_CATEGORIES}' for every category")
@click.option("--amount", required=True, help="Budget amount")
@click.option("--timeframe", type=click.Choice(TIMEFRAMES, case_sensitive=False), default="monthly")
@click.option(
    "--type",
    "budget_type",
    type=click.Choice(BUDGET_TYPES, case_sensitive=False),
    default=BudgetType.ADDED_ONLY.value,
    help="added_only counts attached expenses; all_transactions counts every matching expense",
)
@click.option("--start-date", help="Start date (anchors weekly/monthly/yearly; required for custom)")
@click.option("--end-date", help="End date (custom timeframe only)")
@click.option("--months", type=int, help="Create one budget per month for this many months")
@click.pass_context
def create_budget(
    ctx,
    name: str,
    category: str,
    amount: str,
    timeframe: str,
    budget_type: str,
    start_date: str | None,
    end_date: str | None,
    months: int | None,
):
    """Create a budget.

    Examples:
        fintrack budget create Groceries --category "Food & Dining" --amount 400
        fintrack budget create Everything --category all --amount 2000 --type all_transactions
        fintrack budget create Rent --category "Rent & Housing" --amount 1200 --start-date 2024-01-01 --months 12
    """
    tracker = ctx.obj["tracker"]
    today = tracker.today()
    start = parse_or_exit(ctx, lambda v: parse_date(v, today=today), start_date, "start date") if start_date else None
    if months is not None and start is None:
        start = today

    draft = BudgetDraft(
        name=name,
        category=category,
        amount=parse_or_exit(ctx, parse_amount, amount, "amount"),
        timeframe="custom" if months is not None else timeframe,
        budget_type=BudgetType(budget_type),
        start_date=start,
        end_date=parse_or_exit(ctx, lambda v: parse_date(v, today=today), end_date, "end date") if end_date else None,
        is_recurring=months is not None,
        number_of_months=months or 1,
    )
    created = unwrap_or_exit(ctx, tracker.create_budget(draft))
    for budget in created:
        click.echo(f"Created budget '{budget.name}' (ID: {budget.id})")


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List budgets with their spend."""
    tracker = ctx.obj["tracker"]

    budgets = tracker.list_budgets()
    if not budgets:
        click.echo("No budgets found.")
        return

    categories = {cat.id: cat.name for cat in tracker.list_categories()}
    click.echo("\nBudgets:")
    click.echo("-" * 110)
    for budget in budgets:
        window = f"{budget.start_date or '...'} - {budget.end_date or '...'}"
        category_name = "All" if budget.category_id == ALL_CATEGORIES else categories.get(budget.category_id, "?")
        click.echo(
            f"{budget.name:<28} {category_name:<18} {window:<25} "
            f"${budget.spent:>10,.2f} / ${budget.amount:<10,.2f} {budget.budget_type.value}"
        )
        click.echo(f"    ID: {budget.id}")


@budget_group.command("delete")
@click.argument("budgets", nargs=-1, required=True)
@click.option("--series", is_flag=True, help="Also delete every month of a recurring budget")
@click.pass_context
def delete_budget(ctx, budgets: tuple[str, ...], series: bool):
    """Delete one or more budgets by name or ID.

    Transactions charged to a deleted budget are kept and detached from it.
    """
    tracker = ctx.obj["tracker"]
    ids = []
    for ref in budgets:
        budget = resolve_budget_or_exit(ctx, tracker, ref)
        ids.append(budget.id)
        if series and budget.parent_budget_id:
            ids.extend(b.id for b in tracker.list_budgets(parent_budget_id=budget.parent_budget_id))

    deleted = unwrap_or_exit(ctx, tracker.delete_budget(ids))
    click.echo(f"Deleted {len(deleted)} budget(s)")


@budget_group.command("recompute")
@click.argument("budget", required=False)
@click.pass_context
def recompute_budget(ctx, budget: str | None):
    """Recalculate spent from transactions for one budget, or all of them."""
    tracker = ctx.obj["tracker"]
    if budget is None:
        repaired = unwrap_or_exit(ctx, tracker.recompute_all_budgets())
    else:
        repaired = [unwrap_or_exit(ctx, tracker.recompute_budget_spent(resolve_budget_or_exit(ctx, tracker, budget).id))]
    for item in repaired:
        click.echo(f"{item.name}: spent ${item.spent:,.2f} of ${item.amount:,.2f}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
