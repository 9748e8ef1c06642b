"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the table layout can change
without touching the domain entities.
"""

from decimal import Decimal

from menubuilder.domain import entities as domain
from menubuilder.domain.entities import EntityKind
from menubuilder.database.models import (
    ChoiceGroup as ORMChoiceGroup,
    Item as ORMItem,
    ItemChoiceGroup as ORMItemChoiceGroup,
    ItemGroup as ORMItemGroup,
    ItemPrice as ORMItemPrice,
    ItemPrinterLogical as ORMItemPrinterLogical,
    PriceLevel as ORMPriceLevel,
    PrinterLogical as ORMPrinterLogical,
    ProductClass as ORMProductClass,
    ReportCategory as ORMReportCategory,
    RevenueCategory as ORMRevenueCategory,
    SecurityLevel as ORMSecurityLevel,
    TaxGroup as ORMTaxGroup,
)

# ORM models for kinds stored as plain (id, name) rows
NAMED_MODELS = {
    EntityKind.SECURITY_LEVEL: ORMSecurityLevel,
    EntityKind.REVENUE_CATEGORY: ORMRevenueCategory,
    EntityKind.REPORT_CATEGORY: ORMReportCategory,
    EntityKind.PRODUCT_CLASS: ORMProductClass,
    EntityKind.CHOICE_GROUP: ORMChoiceGroup,
    EntityKind.PRINTER_LOGICAL: ORMPrinterLogical,
}

# Item columns that hold entity references, keyed by domain attribute
_ITEM_REFERENCE_COLUMNS = {
    "product_class": "product_class_id",
    "revenue_category": "revenue_category_id",
    "tax_group": "tax_group_id",
    "security_level": "security_level_id",
    "report_category": "report_category_id",
    "item_group": "item_group_id",
}

# Item columns copied as they are
_ITEM_PLAIN_COLUMNS = (
    "name",
    "button1",
    "button2",
    "printer_text",
    "default_price",
    "use_weight",
    "sku",
    "bar_gun_code",
    "cost_amount",
    "reserved1",
    "ask_price",
    "print_on_check",
    "discountable",
    "voidable",
    "not_active",
    "tax_included",
    "customer_receipt",
    "allow_price_override",
    "reserved2",
    "covers",
    "store_id",
    "kitchen_video",
    "kds_dept",
    "kds_category",
    "kds_cooktime",
    "image_id",
    "stock_item",
    "language_iso_code",
)


def item_to_domain(orm_item: ORMItem) -> domain.Item:
    """Convert SQLAlchemy Item model to domain Item entity."""
    values = {column: getattr(orm_item, column) for column in _ITEM_PLAIN_COLUMNS}
    for attr, column in _ITEM_REFERENCE_COLUMNS.items():
        values[attr] = getattr(orm_item, column)
    return domain.Item(
        id=orm_item.id,
        weight_amount=Decimal(orm_item.weight_amount),
        item_prices=tuple(
            domain.ItemPrice(price_level_id=p.price_level_id, price=p.price)
            for p in orm_item.prices
        ),
        price_levels=tuple(orm_item.price_levels or ()),
        choice_groups=tuple(
            domain.ChoiceGroupEntry(group_id=c.choice_group_id, sequence=c.sequence)
            for c in orm_item.choice_groups
        ),
        printer_logicals=tuple(
            domain.PrinterEntry(printer_id=p.printer_logical_id, primary=p.is_primary)
            for p in orm_item.printer_logicals
        ),
        store_price_level=tuple(orm_item.store_price_level or ()),
        **values,
    )


def item_to_orm(item: domain.Item) -> ORMItem:
    """Convert domain Item entity to a new SQLAlchemy Item model."""
    values = {column: getattr(item, column) for column in _ITEM_PLAIN_COLUMNS}
    for attr, column in _ITEM_REFERENCE_COLUMNS.items():
        values[column] = getattr(item, attr)
    return ORMItem(
        id=item.id,
        weight_amount=str(item.weight_amount),
        price_levels=list(item.price_levels),
        store_price_level=list(item.store_price_level),
        prices=[
            ORMItemPrice(position=i, price_level_id=p.price_level_id, price=p.price)
            for i, p in enumerate(item.item_prices)
        ],
        choice_groups=[
            ORMItemChoiceGroup(position=i, choice_group_id=c.group_id, sequence=c.sequence)
            for i, c in enumerate(item.choice_groups)
        ],
        printer_logicals=[
            ORMItemPrinterLogical(position=i, printer_logical_id=p.printer_id, is_primary=p.primary)
            for i, p in enumerate(item.printer_logicals)
        ],
        **values,
    )


def item_group_to_domain(orm_group: ORMItemGroup) -> domain.ItemGroup:
    """Convert SQLAlchemy ItemGroup model to domain ItemGroup entity."""
    return domain.ItemGroup(
        id=orm_group.id,
        name=orm_group.name,
        range_start=orm_group.range_start,
        range_end=orm_group.range_end,
    )


def item_group_to_orm(group: domain.ItemGroup) -> ORMItemGroup:
    return ORMItemGroup(
        id=group.id, name=group.name, range_start=group.range_start, range_end=group.range_end
    )


def price_level_to_domain(orm_level: ORMPriceLevel) -> domain.PriceLevel:
    """Convert SQLAlchemy PriceLevel model to domain PriceLevel entity."""
    return domain.PriceLevel(
        id=orm_level.id,
        name=orm_level.name,
        price=orm_level.price,
        level_type=domain.PriceLevelType(orm_level.level_type),
    )


def price_level_to_orm(level: domain.PriceLevel) -> ORMPriceLevel:
    return ORMPriceLevel(
        id=level.id, name=level.name, price=level.price, level_type=level.level_type.value
    )


def tax_group_to_domain(orm_group: ORMTaxGroup) -> domain.TaxGroup:
    """Convert SQLAlchemy TaxGroup model to domain TaxGroup entity."""
    return domain.TaxGroup(id=orm_group.id, name=orm_group.name, rate=orm_group.rate)


def tax_group_to_orm(group: domain.TaxGroup) -> ORMTaxGroup:
    return ORMTaxGroup(id=group.id, name=group.name, rate=group.rate)


def named_to_domain(kind: EntityKind, orm_entity) -> domain.Entity:
    """Convert an (id, name) row to the domain entity of the given kind."""
    return domain.ENTITY_TYPES[kind](id=orm_entity.id, name=orm_entity.name)


def named_to_orm(entity: domain.Entity):
    return NAMED_MODELS[entity.kind](id=entity.id, name=entity.name)
