"""POS file export command."""

import click

from menubuilder.domain.pos_export import PosExportService


@click.command("export")
@click.argument("pos_file", type=click.Path(dir_okay=False, writable=True))
@click.option(
    "--ungrouped",
    is_flag=True,
    help="Write every item in ID order, without group-start records",
)
@click.pass_context
def export_pos(ctx, pos_file: str, ungrouped: bool):
    """Export menu items to a POS interchange file.

    By default items are written group by group, each group preceded by a
    "****Start****" record; items without an item group are left out.

    Examples:
        menubuilder export items.csv
        menubuilder export all-items.csv --ungrouped
    """
    db = ctx.obj["db"]
    service = PosExportService(db.load_catalog())

    try:
        result = service.export_file(pos_file, grouped=not ungrouped)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Exported {result['exported']} items to {pos_file}")
    if result["group_starts"]:
        click.echo(f"  Group-start records: {result['group_starts']}")
    if result["excluded"]:
        click.echo(f"  Left out (no item group): {result['excluded']}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_pos)
