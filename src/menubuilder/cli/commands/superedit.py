"""Super Editor bulk edit command."""

import click

from menubuilder.cli.error_handling import handle_invariant_violation
from menubuilder.cli.rule_specs import parse_action, parse_condition
from menubuilder.domain.catalog import Catalog
from menubuilder.domain.errors import InvariantViolation
from menubuilder.domain.superedit import ItemChange, SuperEditSession

# Fields whose values are rendered through the catalog for readability
_DESCRIBED_FIELDS = {
    "default_price": "describe_prices",
    "item_prices": "describe_prices",
    "choice_groups": "describe_choice_groups",
    "printer_logicals": "describe_printers",
}


def _conditions(ctx, param, values):
    try:
        return [parse_condition(value) for value in values]
    except click.BadParameter as e:
        raise click.BadParameter(e.message, ctx=ctx, param=param) from None


def _actions(ctx, param, values):
    try:
        return [parse_action(value) for value in values]
    except click.BadParameter as e:
        raise click.BadParameter(e.message, ctx=ctx, param=param) from None


def _render_change(catalog: Catalog, change: ItemChange) -> list[str]:
    lines = [f"Item {change.item_id}: {change.original.name}"]
    shown = set()
    for field_name in change.changed_fields:
        describe = _DESCRIBED_FIELDS.get(field_name)
        if describe is not None:
            if describe in shown:
                continue
            shown.add(describe)
            before = getattr(catalog, describe)(change.original) or "-"
            after = getattr(catalog, describe)(change.modified) or "-"
        else:
            before = getattr(change.original, field_name)
            after = getattr(change.modified, field_name)
        lines.append(f"    {field_name}: {before} -> {after}")
    return lines


@click.command("superedit")
@click.option(
    "--where",
    "conditions",
    multiple=True,
    callback=_conditions,
    help="Condition [and|or:]FIELD:OPERATOR[:VALUE] (repeatable, folded left to right)",
)
@click.option(
    "--action",
    "actions",
    multiple=True,
    callback=_actions,
    help="Action CATEGORY:OPERATION:VALUE[@LEVEL] (repeatable, applied in order)",
)
@click.option("--apply", is_flag=True, help="Save the previewed changes")
@click.option("--verbose", "-v", is_flag=True, help="Show every changed field")
@click.pass_context
def superedit(ctx, conditions, actions, apply: bool, verbose: bool):
    """Preview, and optionally apply, a bulk edit to matching items.

    Without --where every item with a name is selected. Nothing is saved
    unless --apply is given.

    Examples:
        menubuilder superedit --where name:contains:soda --where price:greater-than:3 \\
            --action price:set-price:4.00
        menubuilder superedit --where item-group:equals:#125 \\
            --action printer-logical:swap-to:3>6 --apply
    """
    db = ctx.obj["db"]
    catalog = db.load_catalog()
    session = SuperEditSession(catalog)
    if conditions:
        session.set_conditions(conditions)
    session.set_actions(actions)

    preview = session.preview_changes()
    click.echo(f"Matched {preview.matched} items, {len(preview.changes)} would change")
    for item_id in sorted(preview.changes):
        change = preview.changes[item_id]
        if verbose:
            for line in _render_change(catalog, change):
                click.echo(f"  {line}")
        else:
            click.echo(f"  Item {item_id}: {change.original.name} ({', '.join(change.changed_fields)})")
    for message in preview.diagnostics:
        click.echo(f"  Skipped: {message}", err=True)

    if not apply:
        session.cancel_preview()
        if preview.changes:
            click.echo("Preview only; use --apply to save these changes")
        return

    try:
        committed = session.accept_changes()
    except InvariantViolation as e:
        handle_invariant_violation(ctx, e)

    db.save_catalog(catalog)
    click.echo(f"Saved changes to {len(committed)} items")


def register_commands(cli):
    """Register superedit command with main CLI."""
    cli.add_command(superedit)
