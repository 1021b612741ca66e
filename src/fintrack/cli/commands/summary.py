"""Summary commands."""

import click

from fintrack.cli.date_filters import period_options, resolve_cli_date_range


def _format_change(change) -> str:
    if change is None:
        return "n/a"
    return f"{change:+.1f}%"


@click.group()
def summary_group():
    """Show spending summaries."""
    pass


@summary_group.command("categories")
@period_options
@click.pass_context
def category_summary(ctx, start_date, end_date, this_month, last_month, this_year):
    """Show expense totals per category, largest first."""
    tracker = ctx.obj["tracker"]
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={"this-month": this_month, "last-month": last_month, "this-year": this_year},
        today=tracker.today(),
    )

    shares = tracker.category_breakdown(start, end)
    if not shares:
        click.echo("No expenses found.")
        return

    click.echo("\nCategory Summary:")
    click.echo("-" * 80)
    click.echo(f"{'Category':<50} {'Total':>18} {'Share':>9}")
    click.echo("-" * 80)
    for share in shares:
        total_str = f"${share.total:,.2f}"
        click.echo(f"{share.category_name:<50} {total_str:>18} {share.percentage:>8.1f}%")
    click.echo("-" * 80)
    grand_total = sum(share.total for share in shares)
    click.echo(f"{'Total':<50} {f'${grand_total:,.2f}':>18}")


@summary_group.command("monthly")
@period_options
@click.pass_context
def monthly_summary(ctx, start_date, end_date, this_month, last_month, this_year):
    """Show income, expenses and net per month."""
    tracker = ctx.obj["tracker"]
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={"this-month": this_month, "last-month": last_month, "this-year": this_year},
        today=tracker.today(),
    )
    _print_months(tracker.monthly_totals(start, end))


@summary_group.command("trend")
@click.option("--months", type=click.IntRange(min=1), default=6, help="Number of months (default: 6)")
@click.pass_context
def spending_trend(ctx, months: int):
    """Show the last N months, including months without transactions."""
    tracker = ctx.obj["tracker"]
    _print_months(tracker.spending_trend(months))


@summary_group.command("compare")
@click.pass_context
def month_over_month(ctx):
    """Compare this month with last month."""
    tracker = ctx.obj["tracker"]
    comparison = tracker.month_over_month()
    current, previous = comparison.current, comparison.previous

    click.echo(f"\n{'':<12} {previous.month:>14} {current.month:>14} {'Change':>10}")
    click.echo("-" * 54)
    click.echo(
        f"{'Income':<12} {previous.income:>14,.2f} {current.income:>14,.2f} {_format_change(comparison.income_change):>10}"
    )
    click.echo(
        f"{'Expenses':<12} {previous.expenses:>14,.2f} {current.expenses:>14,.2f} "
        f"{_format_change(comparison.expense_change):>10}"
    )
    click.echo(
        f"{'Net':<12} {previous.net:>14,.2f} {current.net:>14,.2f} {_format_change(comparison.balance_change):>10}"
    )


@summary_group.command("budgets")
@click.pass_context
def budget_progress(ctx):
    """Show how much of each budget has been spent."""
    tracker = ctx.obj["tracker"]
    progress = tracker.budget_progress()
    if not progress:
        click.echo("No budgets found.")
        return

    click.echo("\nBudget Progress:")
    click.echo("-" * 80)
    for item in progress:
        flag = "  OVER BUDGET" if item.is_over_budget else ""
        click.echo(
            f"{item.name:<30} ${item.spent:>10,.2f} of ${item.amount:<10,.2f} "
            f"{item.percentage:>5.1f}%  ${item.remaining:,.2f} left{flag}"
        )


def _print_months(totals) -> None:
    if not totals:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'Month':<10} {'Income':>14} {'Expenses':>14} {'Net':>14}")
    click.echo("-" * 55)
    for total in totals:
        click.echo(f"{total.month:<10} {total.income:>14,.2f} {total.expenses:>14,.2f} {total.net:>14,.2f}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
