"""CLI error handling helpers."""

import click

from menubuilder.domain.errors import DomainError, InvariantViolation


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_invariant_violation(ctx: click.Context, error: InvariantViolation) -> None:
    """Render every violation of an aborted commit and exit with failure."""
    click.echo(
        f"Error: Changes not saved, {len(error.errors)} invariant violation(s):", err=True
    )
    for item_id, violation in error.errors:
        click.echo(f"  Item {item_id}: {violation}", err=True)
    ctx.exit(1)
