"""Account management commands."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import parse_or_exit, unwrap_or_exit
from fintrack.domain.entities import AccountType
from fintrack.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES, case_sensitive=False), default="Bank")
@click.option("--balance", default="0", help="Opening balance (default: 0)")
@click.option("--currency", default="USD", help="Three-letter currency code (default: USD)")
@click.pass_context
def create_account(ctx, name: str, account_type: str, balance: str, currency: str):
    """Create a new account.

    Examples:
        fintrack account create "Checking"
        fintrack account create "Wallet" --type Cash --balance 40
    """
    tracker = ctx.obj["tracker"]
    opening = parse_or_exit(ctx, parse_amount, balance, "balance")
    account = unwrap_or_exit(
        ctx,
        tracker.create_account(
            name, account_type=_account_type(account_type), balance=opening, currency=currency
        ),
    )
    click.echo(f"Created account '{account.name}' (ID: {account.id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    tracker = ctx.obj["tracker"]

    accounts = tracker.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        click.echo(
            f"{acc.id:36s} | {acc.name:20s} | {acc.account_type.value:11s} | {acc.balance:>12,.2f} {acc.currency}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES, case_sensitive=False))
@click.option("--currency", help="New currency code")
@click.pass_context
def update_account(ctx, account: str, name: str | None, account_type: str | None, currency: str | None) -> None:
    """Update an account's name, type or currency.

    ACCOUNT can be an account name or ID. The balance follows the account's
    transactions and can't be edited directly.
    """
    tracker = ctx.obj["tracker"]
    acc = resolve_account_or_exit(ctx, tracker, account)
    updated = unwrap_or_exit(
        ctx,
        tracker.update_account(
            acc.id,
            name=name,
            account_type=_account_type(account_type) if account_type else None,
            currency=currency,
        ),
    )
    click.echo(f"Updated account '{updated.name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID. The account can only be deleted
    if no transactions reference it.
    """
    tracker = ctx.obj["tracker"]
    acc = resolve_account_or_exit(ctx, tracker, account)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{acc.name}'?"):
        click.echo("Deletion cancelled.")
        return

    unwrap_or_exit(ctx, tracker.delete_account(acc.id))
    click.echo(f"Deleted account '{acc.name}'")


def _account_type(value: str) -> AccountType:
    return AccountType(value)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
