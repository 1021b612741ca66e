"""CLI error handling helpers."""

from typing import TypeVar

import click

from fintrack.tracker import ErrorInfo, OperationResult

T = TypeVar("T")


def handle_domain_error(ctx: click.Context, error: ErrorInfo) -> None:
    """Render a rejected operation and exit with failure."""
    click.echo(f"Error: {error.message}", err=True)
    ctx.exit(1)


def unwrap_or_exit(ctx: click.Context, result: OperationResult[T]) -> T:
    """Return the result's value, or render its error and exit."""
    if not result.ok:
        handle_domain_error(ctx, result.error)
    return result.value


def parse_or_exit(ctx: click.Context, parser, value: str, label: str):
    """Run ``parser`` on a raw option value, exiting with a message on ValueError."""
    try:
        return parser(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
