"""File verification and catalog check commands."""

import click

from menubuilder.cli.error_handling import handle_domain_error
from menubuilder.domain.errors import DomainError
from menubuilder.domain.pos_import import PosImportService
from menubuilder.domain.validation import validate_catalog


@click.command("verify")
@click.argument("pos_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def verify_file(ctx, pos_file: str):
    """Check that a POS interchange file is well formed without importing it."""
    service = PosImportService(ctx.obj["db"].load_catalog())
    try:
        count = service.verify_file(pos_file)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"{pos_file}: {count} records, format OK")


@click.command("check")
@click.pass_context
def check_catalog(ctx):
    """Check the catalog for broken references, ranges and prices."""
    problems = validate_catalog(ctx.obj["db"].load_catalog())
    if not problems:
        click.echo("Catalog OK")
        return

    click.echo(f"Found {len(problems)} problem(s):")
    for ref, error in problems:
        click.echo(f"  {ref}: {error}")
    ctx.exit(1)


def register_commands(cli):
    """Register verify and check commands with main CLI."""
    cli.add_command(verify_file)
    cli.add_command(check_catalog)
