"""Reference entity management commands."""

from decimal import Decimal

import click

from menubuilder.cli.error_handling import handle_domain_error
from menubuilder.domain.entities import (
    DRAFT_ID,
    ENTITY_TYPES,
    EntityKind,
    EntityRef,
    ItemGroup,
    PriceLevel,
    PriceLevelType,
    TaxGroup,
)
from menubuilder.domain.entity_service import EntityService
from menubuilder.domain.errors import DomainError
from menubuilder.utils.entity_resolver import parse_kind, resolve_entity
from menubuilder.utils.money import format_money, parse_amount


def _kind_or_exit(ctx: click.Context, kind: str) -> EntityKind:
    try:
        return parse_kind(kind)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def _describe(entity) -> str:
    if isinstance(entity, ItemGroup):
        return f"items {entity.range_start}-{entity.range_end - 1}"
    if isinstance(entity, PriceLevel):
        return f"${format_money(entity.price)}, {entity.level_type.value}"
    if isinstance(entity, TaxGroup):
        return f"{entity.rate_percentage.normalize():f}%"
    return ""


@click.group()
def entity_group():
    """Manage item groups, price levels, tax groups and other reference data.

    KIND is one of: item-group, price-level, tax-group, security-level,
    revenue-category, report-category, product-class, choice-group,
    printer-logical.
    """
    pass


@entity_group.command("list")
@click.argument("kind")
@click.pass_context
def list_entities(ctx, kind: str):
    """List entities of a kind."""
    entity_kind = _kind_or_exit(ctx, kind)
    catalog = ctx.obj["db"].load_catalog()
    service = EntityService(catalog)

    entities = service.list_entities(entity_kind)
    if not entities:
        click.echo(f"No {entity_kind.label.lower()} entries found.")
        return

    click.echo(f"\n{entity_kind.label}s:")
    click.echo("-" * 60)
    for entity in entities:
        items = len(catalog.referencing_items(EntityRef(entity.kind, entity.id)))
        details = _describe(entity)
        line = f"ID: {entity.id:3d} | {entity.name:20s} | {items} item{'s' if items != 1 else ''}"
        click.echo(f"{line} | {details}" if details else line)


@entity_group.command("create")
@click.argument("kind")
@click.argument("name")
@click.option("--id", "entity_id", type=int, help="Identifier (defaults to the lowest free ID)")
@click.option("--range-start", type=int, help="First item ID of an item group")
@click.option("--range-end", type=int, help="Item ID one past the last of an item group")
@click.option("--price", help="Price of a price level (e.g., 2.50)")
@click.option("--store", is_flag=True, help="Create a store price level")
@click.option("--rate", help="Tax rate in percent (e.g., 8.25)")
@click.pass_context
def create_entity(
    ctx,
    kind: str,
    name: str,
    entity_id: int | None,
    range_start: int | None,
    range_end: int | None,
    price: str | None,
    store: bool,
    rate: str | None,
):
    """Create an entity.

    Examples:
        menubuilder entity create tax-group "Sales Tax" --rate 8.25
        menubuilder entity create item-group Entree --range-start 7400000 --range-end 7500000
        menubuilder entity create price-level "Happy Hour" --price 0 --id 2
    """
    entity_kind = _kind_or_exit(ctx, kind)
    catalog = ctx.obj["db"].load_catalog()
    service = EntityService(catalog)
    new_id = entity_id if entity_id is not None else DRAFT_ID

    try:
        if entity_kind is EntityKind.ITEM_GROUP:
            if range_start is None or range_end is None:
                raise ValueError("Item groups need --range-start and --range-end")
            entity = ItemGroup(id=new_id, name=name, range_start=range_start, range_end=range_end)
        elif entity_kind is EntityKind.PRICE_LEVEL:
            entity = PriceLevel(
                id=new_id,
                name=name,
                price=parse_amount(price) if price is not None else Decimal("0.00"),
                level_type=PriceLevelType.STORE if store else PriceLevelType.ENTERPRISE,
            )
        elif entity_kind is EntityKind.TAX_GROUP:
            percent = parse_amount(rate) if rate is not None else Decimal("0")
            entity = TaxGroup(id=new_id, name=name, rate=percent / 100)
        else:
            entity = ENTITY_TYPES[entity_kind](id=new_id, name=name)

        created_id = service.create(entity)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    ctx.obj["db"].save_catalog(catalog)
    click.echo(f"Created {entity_kind.label.lower()} '{name}' (ID: {created_id})")


@entity_group.command("rename")
@click.argument("kind")
@click.argument("entity", metavar="ENTITY")
@click.argument("new_name")
@click.pass_context
def rename_entity(ctx, kind: str, entity: str, new_name: str):
    """Rename an entity.

    ENTITY can be an entity name or ID.
    """
    entity_kind = _kind_or_exit(ctx, kind)
    catalog = ctx.obj["db"].load_catalog()
    service = EntityService(catalog)

    try:
        entity_id = resolve_entity(catalog, entity_kind, entity)
        service.rename(entity_kind, entity_id, new_name)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    ctx.obj["db"].save_catalog(catalog)
    click.echo(f"Renamed {entity_kind.label.lower()} {entity_id} to '{new_name}'")


@entity_group.command("delete")
@click.argument("kind")
@click.argument("entity", metavar="ENTITY")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entity(ctx, kind: str, entity: str, yes: bool):
    """Delete an entity.

    ENTITY can be an entity name or ID. The entity can only be deleted while
    no item references it.
    """
    entity_kind = _kind_or_exit(ctx, kind)
    catalog = ctx.obj["db"].load_catalog()
    service = EntityService(catalog)

    try:
        entity_id = resolve_entity(catalog, entity_kind, entity)
    except ValueError as e:
        handle_domain_error(ctx, e)

    name = catalog.resolve_name(entity_kind, entity_id)
    if not yes and not click.confirm(
        f"Are you sure you want to delete {entity_kind.label.lower()} '{name}' (ID: {entity_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete(entity_kind, entity_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    ctx.obj["db"].save_catalog(catalog)
    click.echo(f"Deleted {entity_kind.label.lower()} '{name}'")


def register_commands(cli):
    """Register entity commands with main CLI."""
    cli.add_command(entity_group, name="entity")
