"""Category management commands."""

import click

from fintrack.cli.error_handling import unwrap_or_exit
from fintrack.domain.entities import CategoryType

CATEGORY_TYPES = [t.value for t in CategoryType]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES, case_sensitive=False))
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories grouped by type."""
    tracker = ctx.obj["tracker"]

    categories = tracker.list_categories(CategoryType(category_type) if category_type else None)
    if not categories:
        click.echo("No categories found. Run 'category seed' to create default categories.")
        return

    for kind in CategoryType:
        group = [c for c in categories if c.category_type == kind]
        if not group:
            continue
        click.echo(f"\n{kind.value}:")
        for cat in group:
            click.echo(f"  {cat.name} (ID: {cat.id})")


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(CATEGORY_TYPES, case_sensitive=False),
    default="Expense",
    help="Category type (default: Expense)",
)
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a new category."""
    tracker = ctx.obj["tracker"]
    category = unwrap_or_exit(ctx, tracker.create_category(name, CategoryType(category_type)))
    click.echo(f"Created category '{category.name}' (ID: {category.id})")


@category_group.command("rename")
@click.argument("category", metavar="CATEGORY")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_category(ctx, category: str, new_name: str):
    """Rename a category. CATEGORY can be a name or ID."""
    tracker = ctx.obj["tracker"]
    found = unwrap_or_exit(ctx, tracker.resolve_category(category))
    unwrap_or_exit(ctx, tracker.rename_category(found.id, new_name))
    click.echo(f"Renamed category '{found.name}' to '{new_name}'")


@category_group.command("delete")
@click.argument("category", metavar="CATEGORY")
@click.pass_context
def delete_category(ctx, category: str):
    """Delete a category that no transaction or budget uses."""
    tracker = ctx.obj["tracker"]
    found = unwrap_or_exit(ctx, tracker.resolve_category(category))
    unwrap_or_exit(ctx, tracker.delete_category(found.id))
    click.echo(f"Deleted category '{found.name}'")


@category_group.command("seed")
@click.pass_context
def seed_categories(ctx):
    """Create the default categories that don't exist yet."""
    tracker = ctx.obj["tracker"]
    created = unwrap_or_exit(ctx, tracker.seed_default_categories())
    if not created:
        click.echo("Default categories already exist.")
        return
    click.echo(f"Created {len(created)} categories:")
    for cat in created:
        click.echo(f"  {cat.name} ({cat.category_type.value})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
