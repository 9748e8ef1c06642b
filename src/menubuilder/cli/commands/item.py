"""Item viewing commands."""

import click

from menubuilder.domain.entities import EntityKind
from menubuilder.utils.entity_resolver import resolve_entity
from menubuilder.utils.money import format_money


@click.group()
def item_group():
    """View menu items."""
    pass


@item_group.command("list")
@click.option("--group", "group", help="Only items in this item group (name or ID)")
@click.pass_context
def list_items(ctx, group: str | None):
    """List items in ID order.

    Examples:
        menubuilder item list
        menubuilder item list --group Entree
    """
    catalog = ctx.obj["db"].load_catalog()

    items = catalog.items
    if group is not None:
        try:
            group_id = resolve_entity(catalog, EntityKind.ITEM_GROUP, group)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        items = [item for item in items if item.item_group == group_id]

    if not items:
        click.echo("No items found.")
        return

    click.echo(f"\n{'ID':>9} | {'Name':30s} | {'Price':>9} | Group")
    click.echo("-" * 72)
    for item in items:
        price = f"${format_money(item.default_price)}" if item.default_price is not None else ""
        group_name = (
            catalog.resolve_name(EntityKind.ITEM_GROUP, item.item_group) or str(item.item_group)
            if item.item_group is not None
            else ""
        )
        click.echo(f"{item.id:>9} | {item.name[:30]:30s} | {price:>9} | {group_name}")


@item_group.command("show")
@click.argument("item_id", type=int)
@click.pass_context
def show_item(ctx, item_id: int):
    """Show every field of an item, with referenced names resolved."""
    catalog = ctx.obj["db"].load_catalog()
    item = catalog.get(EntityKind.ITEM, item_id)
    if item is None:
        click.echo(f"Error: Item {item_id} not found", err=True)
        ctx.exit(1)

    def ref(kind: EntityKind, entity_id: int | None) -> str:
        if entity_id is None:
            return "-"
        name = catalog.resolve_name(kind, entity_id)
        return f"{name} ({entity_id})" if name else f"{entity_id} (missing)"

    click.echo(f"\nItem {item.id}: {item.name}")
    click.echo("-" * 60)
    click.echo(f"Buttons:          {item.button1!r} / {item.button2 or ''!r}")
    click.echo(f"Printer text:     {item.printer_text}")
    click.echo(f"Prices:           {catalog.describe_prices(item) or '-'}")
    click.echo(f"Item group:       {ref(EntityKind.ITEM_GROUP, item.item_group)}")
    click.echo(f"Product class:    {ref(EntityKind.PRODUCT_CLASS, item.product_class)}")
    click.echo(f"Revenue category: {ref(EntityKind.REVENUE_CATEGORY, item.revenue_category)}")
    click.echo(f"Tax group:        {ref(EntityKind.TAX_GROUP, item.tax_group)}")
    click.echo(f"Security level:   {ref(EntityKind.SECURITY_LEVEL, item.security_level)}")
    click.echo(f"Report category:  {ref(EntityKind.REPORT_CATEGORY, item.report_category)}")
    click.echo(f"Choice groups:    {catalog.describe_choice_groups(item) or '-'}")
    click.echo(f"Printers:         {catalog.describe_printers(item) or '-'}")
    if item.price_levels:
        click.echo(f"Price levels:     {', '.join(str(level) for level in item.price_levels)}")
    if item.cost_amount is not None:
        click.echo(f"Cost:             ${format_money(item.cost_amount)}")
    if item.use_weight:
        click.echo(f"Weight tare:      {item.weight_amount}")
    flags = [
        name
        for name, is_set in (
            ("ask price", item.ask_price),
            ("print on check", item.print_on_check),
            ("discountable", item.discountable),
            ("voidable", item.voidable),
            ("not active", item.not_active),
            ("tax included", item.tax_included),
            ("price override", item.allow_price_override),
            ("stock item", item.stock_item),
        )
        if is_set
    ]
    click.echo(f"Flags:            {', '.join(flags) or '-'}")


def register_commands(cli):
    """Register item commands with main CLI."""
    cli.add_command(item_group, name="item")
