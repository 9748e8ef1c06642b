"""Bulk-edit rule model and filter evaluation.

A rule is a list of conditions that select items and a list of actions that
are applied to the selected items. Conditions are folded strictly left to
right: ``a OR b AND c`` means ``(a OR b) AND c``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from menubuilder.domain.entities import EntityKind, Item
from menubuilder.utils.money import amounts_equal, parse_amount

if TYPE_CHECKING:
    from menubuilder.domain.catalog import Catalog


class ConditionLogic(Enum):
    AND = "and"
    OR = "or"


class FilterField(Enum):
    """Item attributes a condition can test."""

    NAME = "name"
    ID = "id"
    PRICE = "price"
    ITEM_GROUP = "item_group"
    PRODUCT_CLASS = "product_class"
    REVENUE_CATEGORY = "revenue_category"
    TAX_GROUP = "tax_group"
    SECURITY_LEVEL = "security_level"
    REPORT_CATEGORY = "report_category"
    CHOICE_GROUP = "choice_group"
    PRINTER_LOGICAL = "printer_logical"
    PRICE_LEVEL = "price_level"

    @property
    def label(self) -> str:
        if self is FilterField.ID:
            return "ID"
        return self.value.replace("_", " ").title()

    @property
    def reference_kind(self) -> Optional[EntityKind]:
        """Entity kind referenced by the field, or None for plain values."""
        return _FIELD_KINDS.get(self)

    @property
    def is_single_reference(self) -> bool:
        return self in SINGLE_REFERENCE_FIELDS

    @property
    def is_multi_reference(self) -> bool:
        return self in MULTI_REFERENCE_FIELDS


class FilterOperator(Enum):
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "does_not_contain"
    BEGINS_WITH = "begins_with"
    ENDS_WITH = "ends_with"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    BETWEEN = "between"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"

    @property
    def needs_value(self) -> bool:
        return self not in (FilterOperator.IS_EMPTY, FilterOperator.IS_NOT_EMPTY)


class ActionCategory(Enum):
    """Item attributes an action can change."""

    PRICE = "price"
    ITEM_GROUP = "item_group"
    PRODUCT_CLASS = "product_class"
    REVENUE_CATEGORY = "revenue_category"
    TAX_GROUP = "tax_group"
    SECURITY_LEVEL = "security_level"
    REPORT_CATEGORY = "report_category"
    CHOICE_GROUP = "choice_group"
    PRINTER_LOGICAL = "printer_logical"
    PRICE_LEVEL = "price_level"

    @property
    def field(self) -> FilterField:
        """The filter field describing the same attribute."""
        return FilterField(self.value)


class ActionOperation(Enum):
    ADD_TO_PRICE = "add_to_price"
    SUBTRACT_FROM_PRICE = "subtract_from_price"
    SET_PRICE = "set_price"
    ADD = "add"
    REMOVE = "remove"
    SWAP_TO = "swap_to"


SINGLE_REFERENCE_FIELDS = (
    FilterField.ITEM_GROUP,
    FilterField.PRODUCT_CLASS,
    FilterField.REVENUE_CATEGORY,
    FilterField.TAX_GROUP,
    FilterField.SECURITY_LEVEL,
    FilterField.REPORT_CATEGORY,
)

MULTI_REFERENCE_FIELDS = (
    FilterField.CHOICE_GROUP,
    FilterField.PRINTER_LOGICAL,
    FilterField.PRICE_LEVEL,
)

_FIELD_KINDS = {
    FilterField.ITEM_GROUP: EntityKind.ITEM_GROUP,
    FilterField.PRODUCT_CLASS: EntityKind.PRODUCT_CLASS,
    FilterField.REVENUE_CATEGORY: EntityKind.REVENUE_CATEGORY,
    FilterField.TAX_GROUP: EntityKind.TAX_GROUP,
    FilterField.SECURITY_LEVEL: EntityKind.SECURITY_LEVEL,
    FilterField.REPORT_CATEGORY: EntityKind.REPORT_CATEGORY,
    FilterField.CHOICE_GROUP: EntityKind.CHOICE_GROUP,
    FilterField.PRINTER_LOGICAL: EntityKind.PRINTER_LOGICAL,
    FilterField.PRICE_LEVEL: EntityKind.PRICE_LEVEL,
}

_NAME_OPERATORS = frozenset(
    {
        FilterOperator.CONTAINS,
        FilterOperator.BEGINS_WITH,
        FilterOperator.ENDS_WITH,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    }
)
_ID_OPERATORS = frozenset(
    {FilterOperator.GREATER_THAN, FilterOperator.LESS_THAN, FilterOperator.BETWEEN}
)
_PRICE_OPERATORS = frozenset(
    {
        FilterOperator.EQUALS,
        FilterOperator.NOT_EQUALS,
        FilterOperator.GREATER_THAN,
        FilterOperator.LESS_THAN,
        FilterOperator.GREATER_OR_EQUAL,
        FilterOperator.LESS_OR_EQUAL,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    }
)
_SINGLE_REFERENCE_OPERATORS = frozenset(
    {
        FilterOperator.CONTAINS,
        FilterOperator.EQUALS,
        FilterOperator.NOT_EQUALS,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    }
)
_MULTI_REFERENCE_OPERATORS = _SINGLE_REFERENCE_OPERATORS | {FilterOperator.DOES_NOT_CONTAIN}


def allowed_operators(field: FilterField) -> frozenset[FilterOperator]:
    """Return the operators that may be used with a filter field."""
    if field is FilterField.NAME:
        return _NAME_OPERATORS
    if field is FilterField.ID:
        return _ID_OPERATORS
    if field is FilterField.PRICE:
        return _PRICE_OPERATORS
    if field.is_single_reference:
        return _SINGLE_REFERENCE_OPERATORS
    return _MULTI_REFERENCE_OPERATORS


def allowed_operations(category: ActionCategory) -> tuple[ActionOperation, ...]:
    """Return the operations that may be used with an action category."""
    if category is ActionCategory.PRICE:
        return (
            ActionOperation.ADD_TO_PRICE,
            ActionOperation.SUBTRACT_FROM_PRICE,
            ActionOperation.SET_PRICE,
        )
    if category.field.is_multi_reference:
        return (ActionOperation.ADD, ActionOperation.REMOVE, ActionOperation.SWAP_TO)
    return (ActionOperation.SWAP_TO,)


@dataclass
class Condition:
    """One filter predicate.

    ``entity_id`` is set when the value was picked as a specific entity;
    otherwise reference fields are matched on entity names.
    """

    logic: ConditionLogic
    field: FilterField
    operator: FilterOperator
    value: str = ""
    entity_id: Optional[int] = None


@dataclass
class Action:
    """One edit applied to every matching item.

    ``price_level_id`` selects the price an action changes; ``0`` or None is
    the default price. ``swap_from_id`` is the value replaced by ``SWAP_TO``.
    """

    category: ActionCategory
    operation: ActionOperation
    value: str = ""
    entity_id: Optional[int] = None
    swap_from_id: Optional[int] = None
    price_level_id: Optional[int] = None


def default_conditions() -> list[Condition]:
    return [Condition(ConditionLogic.AND, FilterField.NAME, FilterOperator.IS_NOT_EMPTY)]


@dataclass
class Rule:
    """Conditions selecting items and the actions applied to them."""

    conditions: list[Condition] = field(default_factory=default_conditions)
    actions: list[Action] = field(default_factory=list)


def _match_name(item: Item, condition: Condition) -> bool:
    name = item.name.casefold()
    value = condition.value.casefold()
    operator = condition.operator
    if operator is FilterOperator.IS_EMPTY:
        return not item.name.strip()
    if operator is FilterOperator.IS_NOT_EMPTY:
        return bool(item.name.strip())
    if operator is FilterOperator.CONTAINS:
        return value in name
    if operator is FilterOperator.BEGINS_WITH:
        return name.startswith(value)
    return name.endswith(value)


def parse_id_range(value: str) -> Optional[tuple[int, int]]:
    """Parse ``"from-to"``; returns None when malformed."""
    parts = value.split("-")
    if len(parts) != 2:
        return None
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return None


def _match_id(item: Item, condition: Condition) -> bool:
    if condition.operator is FilterOperator.BETWEEN:
        bounds = parse_id_range(condition.value)
        if bounds is None:
            return False
        low, high = bounds
        return low <= item.id <= high

    try:
        target = int(condition.value.strip())
    except ValueError:
        return False
    if condition.operator is FilterOperator.GREATER_THAN:
        return item.id > target
    return item.id < target


def item_price_values(item: Item) -> list[Decimal]:
    """Default price (when set) followed by every level price."""
    values = [entry.price for entry in item.item_prices]
    if item.default_price is not None:
        values.insert(0, item.default_price)
    return values


def _compare_price(operator: FilterOperator, price: Decimal, target: Decimal) -> bool:
    if operator is FilterOperator.EQUALS:
        return amounts_equal(price, target)
    if operator is FilterOperator.NOT_EQUALS:
        return not amounts_equal(price, target)
    if operator is FilterOperator.GREATER_THAN:
        return price > target
    if operator is FilterOperator.LESS_THAN:
        return price < target
    if operator is FilterOperator.GREATER_OR_EQUAL:
        return price >= target
    return price <= target


def _match_price(item: Item, condition: Condition) -> bool:
    prices = item_price_values(item)
    if condition.operator is FilterOperator.IS_EMPTY:
        return not prices
    if condition.operator is FilterOperator.IS_NOT_EMPTY:
        return bool(prices)
    try:
        target = parse_amount(condition.value)
    except ValueError:
        return False
    return any(_compare_price(condition.operator, price, target) for price in prices)


def reference_ids(item: Item, field: FilterField) -> list[int]:
    """Return the identifiers an item holds for a reference field."""
    if field is FilterField.CHOICE_GROUP:
        return [entry.group_id for entry in item.choice_groups]
    if field is FilterField.PRINTER_LOGICAL:
        return [entry.printer_id for entry in item.printer_logicals]
    if field is FilterField.PRICE_LEVEL:
        ids = list(item.price_levels)
        for entry in item.item_prices:
            if entry.price_level_id not in ids:
                ids.append(entry.price_level_id)
        return ids
    current = getattr(item, field.value)
    return [current] if current is not None else []


def _match_reference(item: Item, condition: Condition, catalog: "Catalog") -> bool:
    ids = reference_ids(item, condition.field)
    operator = condition.operator
    if operator is FilterOperator.IS_EMPTY:
        return not ids
    if operator is FilterOperator.IS_NOT_EMPTY:
        return bool(ids)

    if condition.entity_id is not None:
        equals = contains = condition.entity_id in ids
    else:
        kind = condition.field.reference_kind
        value = condition.value.casefold()
        names = [(catalog.resolve_name(kind, entity_id) or "").casefold() for entity_id in ids]
        equals = any(name == value for name in names)
        contains = any(value in name for name in names)

    if operator is FilterOperator.EQUALS:
        return equals
    if operator is FilterOperator.NOT_EQUALS:
        return not equals
    if operator is FilterOperator.CONTAINS:
        return contains
    return not contains


def evaluate_condition(item: Item, condition: Condition, catalog: "Catalog") -> bool:
    """Evaluate one condition against an item.

    An operator that is not valid for the field, or a value that cannot be
    parsed, never matches.
    """
    if condition.operator not in allowed_operators(condition.field):
        return False
    if condition.field is FilterField.NAME:
        return _match_name(item, condition)
    if condition.field is FilterField.ID:
        return _match_id(item, condition)
    if condition.field is FilterField.PRICE:
        return _match_price(item, condition)
    return _match_reference(item, condition, catalog)


def applies_to(item: Item, rule: Rule, catalog: "Catalog") -> bool:
    """Return True if the item satisfies the rule's conditions.

    The first condition's logic is ignored. A rule without conditions
    matches every item.
    """
    if not rule.conditions:
        return True
    result = evaluate_condition(item, rule.conditions[0], catalog)
    for condition in rule.conditions[1:]:
        matched = evaluate_condition(item, condition, catalog)
        if condition.logic is ConditionLogic.AND:
            result = result and matched
        else:
            result = result or matched
    return result


def filter_items(items: Iterable[Item], rule: Rule, catalog: "Catalog") -> list[Item]:
    """Return the items a rule selects, preserving order."""
    return [item for item in items if applies_to(item, rule, catalog)]
