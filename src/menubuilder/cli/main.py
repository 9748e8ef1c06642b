"""Main CLI entry point."""

import click
from menubuilder.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

# Import and register all commands at module level
from menubuilder.cli.commands import (
    entity,
    export_cmd,
    import_cmd,
    item,
    superedit,
    verify,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.pass_context
def cli(ctx, db_path: str | None):
    """Menubuilder - POS menu catalog editor.

    Import menu items from a POS interchange file, edit items and their
    reference data in bulk, and export the result back to the POS.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
export_cmd.register_commands(cli)
verify.register_commands(cli)
item.register_commands(cli)
entity.register_commands(cli)
superedit.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
