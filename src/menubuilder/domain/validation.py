"""Entity validation.

Validators return validation errors as values. When several rules fail, the
errors are ordered by tier: identifier errors first, then name, then value and
range errors, then cross-entity references. ``validate_entity`` returns the
first one.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from menubuilder.domain.entities import (
    MAX_BUTTON_LENGTH,
    MAX_NAME_LENGTH,
    NAMED_KINDS,
    Entity,
    EntityKind,
    EntityRef,
    Item,
    ItemGroup,
    PriceLevel,
    TaxGroup,
    is_draft,
)
from menubuilder.domain.errors import EntityValidationError, ValidationErrorKind as Kind

if TYPE_CHECKING:
    from menubuilder.domain.catalog import Catalog


def _error(kind: Kind, message: str) -> EntityValidationError:
    return EntityValidationError(kind=kind, message=message)


def _id_errors(entity: Entity) -> list[EntityValidationError]:
    kind = entity.kind
    if is_draft(entity.id):
        return [_error(Kind.INVALID_ID, f"{kind.label} has not been assigned an ID")]
    if not kind.accepts_id(entity.id):
        bounds = kind.id_range
        if bounds is None:
            return [_error(Kind.INVALID_ID, f"{kind.label} ID must be positive")]
        low, high = bounds
        return [_error(Kind.INVALID_ID, f"{kind.label} ID must be between {low} and {high}")]
    return []


def _name_errors(entity: Entity, strict: bool) -> list[EntityValidationError]:
    label = entity.kind.label
    if not entity.name.strip():
        return [_error(Kind.EMPTY_NAME, f"{label} name cannot be empty")]
    if strict and entity.kind in NAMED_KINDS and len(entity.name) > MAX_NAME_LENGTH:
        return [
            _error(
                Kind.NAME_TOO_LONG,
                f"{label} name exceeds {MAX_NAME_LENGTH} characters",
            )
        ]
    return []


def _item_value_errors(item: Item, strict: bool) -> list[EntityValidationError]:
    errors = []
    if strict and not item.button1.strip():
        errors.append(_error(Kind.INVALID_VALUE, "Button 1 text is required"))
    if len(item.button1) > MAX_BUTTON_LENGTH:
        errors.append(
            _error(Kind.INVALID_VALUE, f"Button 1 text exceeds {MAX_BUTTON_LENGTH} characters")
        )
    if item.button2 is not None and len(item.button2) > MAX_BUTTON_LENGTH:
        errors.append(
            _error(Kind.INVALID_VALUE, f"Button 2 text exceeds {MAX_BUTTON_LENGTH} characters")
        )
    if item.cost_amount is not None and item.cost_amount < 0:
        errors.append(_error(Kind.INVALID_VALUE, "Cost amount cannot be negative"))
    if item.weight_amount < 0:
        errors.append(_error(Kind.INVALID_VALUE, "Weight amount cannot be negative"))
    if item.printer_logicals:
        primaries = sum(1 for entry in item.printer_logicals if entry.primary)
        if primaries != 1:
            errors.append(
                _error(
                    Kind.INVALID_VALUE,
                    f"Printer logicals must have exactly one primary printer (found {primaries})",
                )
            )
    if item.default_price is not None and item.default_price < 0:
        errors.append(_error(Kind.INVALID_PRICE, "Default price cannot be negative"))
    for entry in item.item_prices:
        if entry.price < 0:
            errors.append(
                _error(
                    Kind.INVALID_PRICE,
                    f"Price at level {entry.price_level_id} cannot be negative",
                )
            )
    return errors


def _value_errors(entity: Entity, strict: bool) -> list[EntityValidationError]:
    if isinstance(entity, Item):
        return _item_value_errors(entity, strict)
    if isinstance(entity, ItemGroup):
        if entity.range_start >= entity.range_end:
            return [_error(Kind.INVALID_RANGE, "Start ID must be less than End ID")]
    elif isinstance(entity, PriceLevel):
        if entity.price < 0:
            return [_error(Kind.INVALID_PRICE, "Price cannot be negative")]
    elif isinstance(entity, TaxGroup):
        if entity.rate < 0 or entity.rate > Decimal(1):
            return [_error(Kind.INVALID_RATE, "Tax rate must be between 0 and 100%")]
    return []


def group_range_error(item: Item, group: ItemGroup) -> EntityValidationError:
    """Build the error for an item whose ID lies outside its group's range."""
    return _error(
        Kind.INVALID_REFERENCE,
        f"Item ID {item.id} is outside the range of item group '{group.name}' "
        f"({group.range_start}-{group.range_end - 1})",
    )


def _item_reference_errors(item: Item, catalog: "Catalog") -> list[EntityValidationError]:
    errors = []
    if item.item_group is not None:
        group = catalog.get(EntityKind.ITEM_GROUP, item.item_group)
        if group is None:
            errors.append(
                _error(Kind.MISSING_ITEM_GROUP, f"Item group {item.item_group} does not exist")
            )
        elif not group.contains(item.id):
            errors.append(group_range_error(item, group))
    if item.revenue_category is not None and not catalog.contains(
        EntityKind.REVENUE_CATEGORY, item.revenue_category
    ):
        errors.append(
            _error(
                Kind.MISSING_REVENUE_CATEGORY,
                f"Revenue category {item.revenue_category} does not exist",
            )
        )

    for ref in catalog.unresolved_references(item):
        if ref.kind in (EntityKind.ITEM_GROUP, EntityKind.REVENUE_CATEGORY):
            continue
        errors.append(_error(Kind.INVALID_REFERENCE, f"{ref} does not exist"))
    return errors


def _reference_errors(entity: Entity, catalog: "Catalog") -> list[EntityValidationError]:
    if isinstance(entity, Item):
        return _item_reference_errors(entity, catalog)
    if isinstance(entity, ItemGroup):
        for other in catalog.iter(EntityKind.ITEM_GROUP):
            if other.id != entity.id and entity.overlaps(other):
                return [_error(Kind.RANGE_OVERLAP, f"Range overlaps with group '{other.name}'")]
    return []


def collect_errors(
    entity: Entity, catalog: Optional["Catalog"] = None, strict: bool = True
) -> list[EntityValidationError]:
    """Collect every validation error for an entity in tie-break order.

    Args:
        entity: Entity to validate
        catalog: Catalog used for cross-entity checks; skipped when None
        strict: Apply editor display rules (name length, required button text)

    Returns:
        List of validation errors, empty when the entity is valid
    """
    errors = _id_errors(entity)
    errors.extend(_name_errors(entity, strict))
    errors.extend(_value_errors(entity, strict))
    if catalog is not None:
        errors.extend(_reference_errors(entity, catalog))
    return errors


def validate_entity(
    entity: Entity, catalog: Optional["Catalog"] = None, strict: bool = True
) -> Optional[EntityValidationError]:
    """Validate an entity, returning the first error or None when valid."""
    errors = collect_errors(entity, catalog, strict=strict)
    return errors[0] if errors else None


def validate_catalog(catalog: "Catalog") -> list[tuple[EntityRef, EntityValidationError]]:
    """Check every entity in the catalog against the catalog invariants.

    Display limits are not enforced here; only structural rules, value
    ranges and cross-entity references.

    Returns:
        List of (entity reference, first error) pairs for invalid entities
    """
    problems = []
    for kind in EntityKind:
        for entity in catalog.iter(kind):
            error = validate_entity(entity, catalog, strict=False)
            if error is not None:
                problems.append((EntityRef(kind, entity.id), error))
    return problems

