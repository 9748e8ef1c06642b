"""POS file import command."""

import click

from menubuilder.cli.error_handling import handle_domain_error
from menubuilder.domain.errors import DomainError
from menubuilder.domain.pos_import import PosImportService


@click.command("import")
@click.argument("pos_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--replace", is_flag=True, help="Start from an empty catalog instead of merging")
@click.option("--verbose", "-v", is_flag=True, help="List every skipped record and created entity")
@click.pass_context
def import_pos(ctx, pos_file: str, replace: bool, verbose: bool):
    """Import menu items from a POS interchange file.

    Entities referenced by the items but not yet in the catalog are created
    with placeholder names such as "Tax Group 1".

    Examples:
        menubuilder import items.csv
        menubuilder import items.csv --replace --verbose
    """
    db = ctx.obj["db"]
    catalog = db.load_catalog()
    service = PosImportService(catalog)

    try:
        result = service.import_file(pos_file, replace=replace)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    db.save_catalog(catalog)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']} items")
    click.echo(f"  Skipped: {result['skipped']} records")
    click.echo(f"  Created: {len(result['created'])} referenced entities")
    if verbose:
        for ref in result["created"]:
            click.echo(f"    {ref}")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        if verbose:
            for error in result["errors"]:
                click.echo(f"    {error}", err=True)
    if result["referenced_but_missing"]:
        click.echo(f"  Unresolved references: {len(result['referenced_but_missing'])}")
        for message in result["referenced_but_missing"]:
            click.echo(f"    {message}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_pos)
