"""Transaction management commands."""

from dataclasses import replace

import click

from fintrack.cli.account_resolution import (
    resolve_account_or_exit,
    resolve_budget_or_exit,
    resolve_category_or_exit,
)
from fintrack.cli.date_filters import period_options, resolve_cli_date_range
from fintrack.cli.error_handling import parse_or_exit, unwrap_or_exit
from fintrack.domain.entities import (
    RecurrenceFrequency,
    SubItem,
    SubItemStatus,
    TransactionDraft,
    TransactionType,
)
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date

TRANSACTION_TYPES = [t.value for t in TransactionType]
FREQUENCIES = [f.value for f in RecurrenceFrequency]


def parse_item(value: str, item_id: str) -> SubItem:
    """Parse a breakdown item given as ``NAME=AMOUNT`` or ``NAME=AMOUNT:Owed``."""
    name, sep, rest = value.rpartition("=")
    if not sep:
        raise ValueError(f"expected NAME=AMOUNT, got '{value}'")
    amount_str, _, status = rest.partition(":")
    try:
        item_status = SubItemStatus(status.capitalize()) if status else SubItemStatus.PAID
    except ValueError:
        raise ValueError(f"unknown item status '{status}'")
    return SubItem(id=item_id, name=name.strip(), amount=parse_amount(amount_str), status=item_status)


def _parse_items(ctx, tracker, items: tuple[str, ...]) -> tuple[SubItem, ...]:
    return tuple(
        parse_or_exit(ctx, lambda v: parse_item(v, tracker.ids.new_id()), value, "breakdown item")
        for value in items
    )


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45)")
@click.option("--category", required=True, help="Category name or ID")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(TRANSACTION_TYPES, case_sensitive=False),
    default="Expense",
    help="Transaction type (default: Expense)",
)
@click.option("--date", "txn_date", default="today", help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')")
@click.option("--description", help="Transaction description")
@click.option("--budget", help="Budget name or ID to charge this expense to")
@click.option("--auto-budget", is_flag=True, help="Attach to a matching budget, creating one if none fits")
@click.option("--item", "items", multiple=True, help="Breakdown item NAME=AMOUNT[:Owed] (repeatable)")
@click.option("--recurring", type=click.Choice(FREQUENCIES, case_sensitive=False), help="Repeat at this frequency")
@click.option("--until", help="Last date of a recurring series")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    amount: str,
    category: str,
    transaction_type: str,
    txn_date: str,
    description: str | None,
    budget: str | None,
    auto_budget: bool,
    items: tuple[str, ...],
    recurring: str | None,
    until: str | None,
) -> None:
    """Add a transaction.

    When breakdown items are given, they must add up to the amount.

    Examples:
        fintrack transaction add --account Checking --amount 45.20 --category "Food & Dining"
        fintrack transaction add --account Checking --amount 30 --category Shopping --item Shirt=20 --item Socks=10
        fintrack transaction add --account Checking --amount 1200 --category "Rent & Housing" --recurring Monthly --until 2024-12-01
    """
    tracker = ctx.obj["tracker"]
    today = tracker.today()

    acc = resolve_account_or_exit(ctx, tracker, account)
    draft = TransactionDraft(
        date=parse_or_exit(ctx, lambda v: parse_date(v, today=today), txn_date, "date"),
        account_id=acc.id,
        transaction_type=TransactionType(transaction_type),
        category_id=resolve_category_or_exit(ctx, tracker, category),
        amount=parse_or_exit(ctx, parse_amount, amount, "amount"),
        description=description,
        budget_id=resolve_budget_or_exit(ctx, tracker, budget).id if budget else None,
        is_recurring=recurring is not None,
        recurrence_frequency=RecurrenceFrequency(recurring) if recurring else None,
        recurrence_end_date=parse_or_exit(ctx, lambda v: parse_date(v, today=today), until, "end date")
        if until
        else None,
        sub_items=_parse_items(ctx, tracker, items) if items else None,
        auto_budget=auto_budget,
    )

    created = unwrap_or_exit(ctx, tracker.create_transaction(draft))
    if isinstance(created, list):
        click.echo(f"Created {len(created)} recurring transactions")
        return
    click.echo(f"Created transaction {created.id}")
    if created.budget_id:
        charged = tracker.get_budget(created.budget_id)
        click.echo(f"Charged to budget '{charged.name}' (${charged.remaining:,.2f} remaining)")


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--account", help="Account name or ID")
@click.option("--date", "txn_date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Transaction amount (e.g., 123.45)")
@click.option("--category", help="Category name or ID")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES, case_sensitive=False))
@click.option("--description", help="Transaction description")
@click.option("--budget", help="Budget name or ID, or empty string to detach")
@click.option("--item", "items", multiple=True, help="Replace the breakdown with these items")
@click.option("--clear-items", is_flag=True, help="Remove the breakdown")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    account: str | None,
    txn_date: str | None,
    amount: str | None,
    category: str | None,
    transaction_type: str | None,
    description: str | None,
    budget: str | None,
    items: tuple[str, ...],
    clear_items: bool,
) -> None:
    """Update a transaction.

    Fields that are not given keep their current values. Use --budget "" to
    detach the transaction from its budget.

    Examples:
        fintrack transaction update <ID> --amount 75.00
        fintrack transaction update <ID> --category Shopping --budget ""
    """
    tracker = ctx.obj["tracker"]
    today = tracker.today()

    txn = tracker.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    draft = TransactionDraft(
        date=txn.date,
        account_id=txn.account_id,
        transaction_type=txn.transaction_type,
        category_id=txn.category_id,
        amount=txn.amount,
        description=txn.description,
        budget_id=txn.budget_id,
        is_recurring=txn.is_recurring,
        recurrence_frequency=txn.recurrence_frequency,
        recurrence_end_date=txn.recurrence_end_date,
        sub_items=txn.sub_items or None,
    )
    if account is not None:
        draft = replace(draft, account_id=resolve_account_or_exit(ctx, tracker, account).id)
    if txn_date is not None:
        draft = replace(draft, date=parse_or_exit(ctx, lambda v: parse_date(v, today=today), txn_date, "date"))
    if amount is not None:
        draft = replace(draft, amount=parse_or_exit(ctx, parse_amount, amount, "amount"))
    if category is not None:
        draft = replace(draft, category_id=resolve_category_or_exit(ctx, tracker, category))
    if transaction_type is not None:
        draft = replace(draft, transaction_type=TransactionType(transaction_type))
    if description is not None:
        draft = replace(draft, description=description)
    if budget is not None:
        draft = replace(draft, budget_id=resolve_budget_or_exit(ctx, tracker, budget).id if budget else None)
    if clear_items:
        draft = replace(draft, sub_items=None)
    elif items:
        draft = replace(draft, sub_items=_parse_items(ctx, tracker, items))

    unwrap_or_exit(ctx, tracker.update_transaction(transaction_id, draft))
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("list")
@period_options
@click.option("--category", help="Category name or ID")
@click.option("--account", help="Account name or ID")
@click.option("--budget", help="Budget name or ID")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES, case_sensitive=False))
@click.option("--verbose", "-v", is_flag=True, help="Show breakdown items and recurrence details")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    category: str | None,
    account: str | None,
    budget: str | None,
    transaction_type: str | None,
    verbose: bool,
):
    """View transactions with optional filters, newest first."""
    tracker = ctx.obj["tracker"]

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={"this-month": this_month, "last-month": last_month, "this-year": this_year},
        today=tracker.today(),
    )
    transactions = tracker.list_transactions(
        start_date=start,
        end_date=end,
        account_id=resolve_account_or_exit(ctx, tracker, account).id if account else None,
        category_id=resolve_category_or_exit(ctx, tracker, category) if category else None,
        budget_id=resolve_budget_or_exit(ctx, tracker, budget).id if budget else None,
        transaction_type=TransactionType(transaction_type) if transaction_type else None,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in tracker.list_accounts()}
    categories = {cat.id: cat.name for cat in tracker.list_categories()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(f"{'ID':<36} {'Date':<12} {'Type':<9} {'Amount':>12}  {'Account':<16} {'Category':<20}")
    click.echo("-" * 110)
    for txn in transactions:
        click.echo(
            f"{txn.id:<36} {str(txn.date):<12} {txn.transaction_type.value:<9} {f'${txn.amount:,.2f}':>12}  "
            f"{accounts.get(txn.account_id, 'Unknown'):<16} {categories.get(txn.category_id, 'Unknown'):<20}"
        )
        if verbose:
            if txn.description:
                click.echo(f"    Description: {txn.description}")
            if txn.budget_id:
                charged = tracker.get_budget(txn.budget_id)
                click.echo(f"    Budget: {charged.name if charged else txn.budget_id}")
            if txn.is_recurring:
                click.echo(f"    Repeats: {txn.recurrence_frequency.value} until {txn.recurrence_end_date}")
            for item in txn.sub_items:
                click.echo(f"    - {item.name:<30} ${item.amount:,.2f} ({item.status.value})")

    total_expenses = sum(txn.amount for txn in transactions if txn.transaction_type == TransactionType.EXPENSE)
    total_income = sum(txn.amount for txn in transactions if txn.transaction_type == TransactionType.INCOME)
    click.echo("-" * 110)
    click.echo(
        f"Expenses: ${total_expenses:,.2f} | Income: ${total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction, reversing its effect on balances and budgets.

    Examples:
        fintrack transaction delete <ID>
    """
    tracker = ctx.obj["tracker"]

    txn = tracker.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    unwrap_or_exit(ctx, tracker.delete_transaction(transaction_id))
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
