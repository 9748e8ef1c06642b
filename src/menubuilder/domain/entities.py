"""Domain model entities for menubuilder.

These are pure data classes representing the POS menu catalog, independent of
the persistence schema and of the interchange format. Entities are immutable;
edits produce modified copies with ``dataclasses.replace``.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar, NamedTuple, Optional, Union

# Identifier of an entity that has not been saved yet
DRAFT_ID = -1


def is_draft(entity_id: int) -> bool:
    """Return True if the identifier is the draft sentinel."""
    return entity_id == DRAFT_ID


class EntityKind(Enum):
    """Tag for every entity kind held in the catalog."""

    ITEM = "item"
    ITEM_GROUP = "item_group"
    PRICE_LEVEL = "price_level"
    TAX_GROUP = "tax_group"
    SECURITY_LEVEL = "security_level"
    REVENUE_CATEGORY = "revenue_category"
    REPORT_CATEGORY = "report_category"
    PRODUCT_CLASS = "product_class"
    CHOICE_GROUP = "choice_group"
    PRINTER_LOGICAL = "printer_logical"

    @property
    def label(self) -> str:
        """Human readable kind name, e.g. ``Tax Group``."""
        return self.value.replace("_", " ").title()

    @property
    def id_range(self) -> Optional[tuple[int, int]]:
        """Inclusive identifier bounds for the kind, or None when unbounded."""
        return ID_RANGES.get(self)

    def accepts_id(self, entity_id: int) -> bool:
        """Return True if the identifier lies inside the kind's range."""
        bounds = self.id_range
        if bounds is None:
            return entity_id > 0
        low, high = bounds
        return low <= entity_id <= high


ID_RANGES: dict[EntityKind, tuple[int, int]] = {
    EntityKind.ITEM_GROUP: (1, 999),
    EntityKind.PRICE_LEVEL: (1, 999),
    EntityKind.TAX_GROUP: (1, 99),
    EntityKind.SECURITY_LEVEL: (1, 999),
    EntityKind.REVENUE_CATEGORY: (0, 25),
    EntityKind.REPORT_CATEGORY: (0, 25),
    EntityKind.PRODUCT_CLASS: (1, 999),
    EntityKind.CHOICE_GROUP: (1, 999),
    EntityKind.PRINTER_LOGICAL: (0, 25),
}

# Display-name limit for the named reference kinds
MAX_NAME_LENGTH = 16
MAX_BUTTON_LENGTH = 15


class EntityRef(NamedTuple):
    """Reference to an entity by kind and identifier."""

    kind: EntityKind
    id: int

    def __str__(self) -> str:
        return f"{self.kind.label} {self.id}"


class PriceLevelType(Enum):
    """Scope a price level applies to."""

    ENTERPRISE = "Enterprise"
    STORE = "Store"


@dataclass(frozen=True)
class ItemPrice:
    """Price of an item at a specific price level."""

    price_level_id: int
    price: Decimal


@dataclass(frozen=True)
class ChoiceGroupEntry:
    """Choice group attached to an item with its display sequence."""

    group_id: int
    sequence: int


@dataclass(frozen=True)
class PrinterEntry:
    """Printer logical attached to an item; at most one is primary."""

    printer_id: int
    primary: bool


@dataclass(frozen=True)
class Item:
    """Menu item, the principal catalog record."""

    kind: ClassVar[EntityKind] = EntityKind.ITEM

    id: int
    name: str
    button1: str = ""
    button2: Optional[str] = None
    printer_text: str = ""
    default_price: Optional[Decimal] = None
    item_prices: tuple[ItemPrice, ...] = ()
    price_levels: tuple[int, ...] = ()
    product_class: Optional[int] = None
    revenue_category: Optional[int] = None
    tax_group: Optional[int] = None
    security_level: Optional[int] = None
    report_category: Optional[int] = None
    use_weight: bool = False
    weight_amount: Decimal = Decimal("0")
    sku: Optional[str] = None
    bar_gun_code: Optional[str] = None
    cost_amount: Optional[Decimal] = None
    reserved1: bool = False
    ask_price: bool = False
    print_on_check: bool = False
    discountable: bool = True
    voidable: bool = True
    not_active: bool = False
    tax_included: bool = False
    item_group: Optional[int] = None
    customer_receipt: str = ""
    allow_price_override: bool = False
    reserved2: bool = False
    choice_groups: tuple[ChoiceGroupEntry, ...] = ()
    printer_logicals: tuple[PrinterEntry, ...] = ()
    covers: int = 0
    store_id: int = 0
    kitchen_video: str = ""
    kds_dept: int = 0
    kds_category: str = ""
    kds_cooktime: int = 0
    store_price_level: tuple[int, ...] = ()
    image_id: int = 0
    stock_item: bool = False
    language_iso_code: str = ""

    @property
    def primary_printer(self) -> Optional[int]:
        """Identifier of the primary printer logical, if any."""
        for entry in self.printer_logicals:
            if entry.primary:
                return entry.printer_id
        return None

    def price_at(self, price_level_id: int) -> Optional[Decimal]:
        """Return the item price at a level, or None when not priced there."""
        for entry in self.item_prices:
            if entry.price_level_id == price_level_id:
                return entry.price
        return None


@dataclass(frozen=True)
class ItemGroup:
    """Group of items whose identifiers fall in ``[range_start, range_end)``."""

    kind: ClassVar[EntityKind] = EntityKind.ITEM_GROUP

    id: int
    name: str
    range_start: int = 0
    range_end: int = 0

    def contains(self, item_id: int) -> bool:
        """Return True if the item identifier falls inside the group range."""
        return self.range_start <= item_id < self.range_end

    def overlaps(self, other: "ItemGroup") -> bool:
        """Return True if the half-open ranges intersect."""
        return self.range_start < other.range_end and other.range_start < self.range_end


@dataclass(frozen=True)
class PriceLevel:
    """Price level entity."""

    kind: ClassVar[EntityKind] = EntityKind.PRICE_LEVEL

    id: int
    name: str
    price: Decimal = Decimal("0.00")
    level_type: PriceLevelType = PriceLevelType.ENTERPRISE


@dataclass(frozen=True)
class TaxGroup:
    """Tax group with its rate stored as a fraction (0.08 for 8%)."""

    kind: ClassVar[EntityKind] = EntityKind.TAX_GROUP

    id: int
    name: str
    rate: Decimal = Decimal("0")

    @property
    def rate_percentage(self) -> Decimal:
        """Rate expressed as a percentage."""
        return self.rate * 100


@dataclass(frozen=True)
class SecurityLevel:
    """Security level entity."""

    kind: ClassVar[EntityKind] = EntityKind.SECURITY_LEVEL

    id: int
    name: str


@dataclass(frozen=True)
class RevenueCategory:
    """Revenue category entity."""

    kind: ClassVar[EntityKind] = EntityKind.REVENUE_CATEGORY

    id: int
    name: str


@dataclass(frozen=True)
class ReportCategory:
    """Report category entity."""

    kind: ClassVar[EntityKind] = EntityKind.REPORT_CATEGORY

    id: int
    name: str


@dataclass(frozen=True)
class ProductClass:
    """Product class entity."""

    kind: ClassVar[EntityKind] = EntityKind.PRODUCT_CLASS

    id: int
    name: str


@dataclass(frozen=True)
class ChoiceGroup:
    """Choice group entity."""

    kind: ClassVar[EntityKind] = EntityKind.CHOICE_GROUP

    id: int
    name: str


@dataclass(frozen=True)
class PrinterLogical:
    """Printer logical entity."""

    kind: ClassVar[EntityKind] = EntityKind.PRINTER_LOGICAL

    id: int
    name: str


Entity = Union[
    Item,
    ItemGroup,
    PriceLevel,
    TaxGroup,
    SecurityLevel,
    RevenueCategory,
    ReportCategory,
    ProductClass,
    ChoiceGroup,
    PrinterLogical,
]

ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.ITEM: Item,
    EntityKind.ITEM_GROUP: ItemGroup,
    EntityKind.PRICE_LEVEL: PriceLevel,
    EntityKind.TAX_GROUP: TaxGroup,
    EntityKind.SECURITY_LEVEL: SecurityLevel,
    EntityKind.REVENUE_CATEGORY: RevenueCategory,
    EntityKind.REPORT_CATEGORY: ReportCategory,
    EntityKind.PRODUCT_CLASS: ProductClass,
    EntityKind.CHOICE_GROUP: ChoiceGroup,
    EntityKind.PRINTER_LOGICAL: PrinterLogical,
}

# Reference kinds whose only attribute beyond the id is a display name
NAMED_KINDS = (
    EntityKind.SECURITY_LEVEL,
    EntityKind.REVENUE_CATEGORY,
    EntityKind.REPORT_CATEGORY,
    EntityKind.PRODUCT_CLASS,
    EntityKind.CHOICE_GROUP,
    EntityKind.PRINTER_LOGICAL,
)

REFERENCE_KINDS = tuple(kind for kind in EntityKind if kind is not EntityKind.ITEM)

# Single-valued Item attributes and the kind each one references
ITEM_REFERENCE_FIELDS: dict[str, EntityKind] = {
    "item_group": EntityKind.ITEM_GROUP,
    "product_class": EntityKind.PRODUCT_CLASS,
    "revenue_category": EntityKind.REVENUE_CATEGORY,
    "tax_group": EntityKind.TAX_GROUP,
    "security_level": EntityKind.SECURITY_LEVEL,
    "report_category": EntityKind.REPORT_CATEGORY,
}


def placeholder_name(kind: EntityKind, entity_id: int) -> str:
    """Name given to entities manufactured for unresolved references."""
    return f"{kind.label} {entity_id}"


def item_references(item: Item) -> list[EntityRef]:
    """Return every reference an item makes, in field order, without duplicates."""
    refs: list[EntityRef] = []

    def add(kind: EntityKind, entity_id: Optional[int]) -> None:
        if entity_id is None:
            return
        ref = EntityRef(kind, entity_id)
        if ref not in refs:
            refs.append(ref)

    for attr, kind in ITEM_REFERENCE_FIELDS.items():
        add(kind, getattr(item, attr))
    for price in item.item_prices:
        add(EntityKind.PRICE_LEVEL, price.price_level_id)
    for level_id in item.price_levels:
        add(EntityKind.PRICE_LEVEL, level_id)
    for level_id in item.store_price_level:
        add(EntityKind.PRICE_LEVEL, level_id)
    for entry in item.choice_groups:
        add(EntityKind.CHOICE_GROUP, entry.group_id)
    for entry in item.printer_logicals:
        add(EntityKind.PRINTER_LOGICAL, entry.printer_id)
    return refs
