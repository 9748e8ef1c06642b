"""CLI helpers for parsing Super Editor condition and action specs.

Condition: ``[and|or:]FIELD:OPERATOR[:VALUE]``, e.g. ``name:contains:soda``
or ``or:tax-group:equals:#2``. Action: ``CATEGORY:OPERATION[:VALUE][@LEVEL]``,
e.g. ``price:set-price:4.00``, ``price:add-to-price:0.50@2`` or
``printer-logical:swap-to:3>6``. A value written as ``#N`` refers to the
entity with ID N; any other value on a reference field is matched by name.
"""

from enum import Enum
from typing import Optional, TypeVar

import click

from menubuilder.domain.rules import (
    Action,
    ActionCategory,
    ActionOperation,
    Condition,
    ConditionLogic,
    FilterField,
    FilterOperator,
    allowed_operations,
    allowed_operators,
)

E = TypeVar("E", bound=Enum)


def _choice(enum_type: type[E], text: str, what: str) -> E:
    normalized = text.strip().lower().replace("-", "_")
    for member in enum_type:
        if member.value == normalized:
            return member
    choices = ", ".join(m.value.replace("_", "-") for m in enum_type)
    raise click.BadParameter(f"Unknown {what} '{text}' (choose from {choices})")


def _entity_id(value: str) -> Optional[int]:
    if not value.startswith("#"):
        return None
    try:
        return int(value[1:])
    except ValueError:
        raise click.BadParameter(f"Invalid entity ID '{value}'") from None


def parse_condition(spec: str) -> Condition:
    """Parse a condition spec.

    Raises:
        click.BadParameter: If the spec is malformed
    """
    parts = spec.split(":")
    logic = ConditionLogic.AND
    if parts[0].strip().lower() in ("and", "or"):
        logic = ConditionLogic(parts.pop(0).strip().lower())
    if len(parts) < 2:
        raise click.BadParameter(f"Condition '{spec}' must be FIELD:OPERATOR[:VALUE]")

    field = _choice(FilterField, parts[0], "field")
    operator = _choice(FilterOperator, parts[1], "operator")
    if operator not in allowed_operators(field):
        allowed = ", ".join(sorted(op.value.replace("_", "-") for op in allowed_operators(field)))
        raise click.BadParameter(
            f"Operator '{parts[1]}' cannot be used with {field.label} (choose from {allowed})"
        )

    value = ":".join(parts[2:]).strip()
    if operator.needs_value and not value:
        raise click.BadParameter(f"Condition '{spec}' needs a value")

    entity_id = _entity_id(value) if field.reference_kind is not None else None
    return Condition(logic, field, operator, value=value, entity_id=entity_id)


def _reference_value(text: str) -> tuple[str, Optional[int]]:
    text = text.strip().lstrip("#")
    try:
        return text, int(text)
    except ValueError:
        raise click.BadParameter(f"Invalid ID '{text}'") from None


def parse_action(spec: str) -> Action:
    """Parse an action spec.

    Raises:
        click.BadParameter: If the spec is malformed
    """
    parts = spec.split(":", 2)
    if len(parts) < 3:
        raise click.BadParameter(f"Action '{spec}' must be CATEGORY:OPERATION:VALUE")

    category = _choice(ActionCategory, parts[0], "action category")
    operation = _choice(ActionOperation, parts[1], "operation")
    if operation not in allowed_operations(category):
        allowed = ", ".join(op.value.replace("_", "-") for op in allowed_operations(category))
        raise click.BadParameter(
            f"Operation '{parts[1]}' cannot be used with {category.field.label} "
            f"(choose from {allowed})"
        )

    value = parts[2].strip()
    if category is ActionCategory.PRICE:
        level_id = None
        if "@" in value:
            value, level = value.rsplit("@", 1)
            try:
                level_id = int(level)
            except ValueError:
                raise click.BadParameter(f"Invalid price level '{level}'") from None
        return Action(category, operation, value=value.strip(), price_level_id=level_id)

    if operation is ActionOperation.SWAP_TO:
        if ">" not in value:
            raise click.BadParameter(f"Swap action '{spec}' needs a value of the form FROM>TO")
        source, target = value.split(">", 1)
        _, swap_from_id = _reference_value(source)
        target_text, target_id = _reference_value(target)
        return Action(
            category, operation, value=target_text, entity_id=target_id, swap_from_id=swap_from_id
        )

    target_text, target_id = _reference_value(value)
    return Action(category, operation, value=target_text, entity_id=target_id)
