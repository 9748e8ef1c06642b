"""Super Editor: preview and commit bulk edits defined by a rule."""

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entities import ChoiceGroupEntry, Item, ItemPrice, PrinterEntry
from menubuilder.domain.errors import RuleStateError
from menubuilder.domain.rules import (
    Action,
    ActionCategory,
    ActionOperation,
    Condition,
    Rule,
    allowed_operations,
    filter_items,
)
from menubuilder.utils.money import format_money, parse_amount, round_cents


class ActionError(ValueError):
    """An action could not be applied to one item; the item is left as is."""


class EditorState(Enum):
    EDITING = "editing"
    PREVIEWING = "previewing"


@dataclass(frozen=True)
class ItemChange:
    """An item as it was before and after the rule's actions."""

    original: Item
    modified: Item
    changed_fields: tuple[str, ...]

    @property
    def item_id(self) -> int:
        return self.original.id


@dataclass
class Preview:
    """Result of applying a rule's actions to copies of the matching items."""

    matched: int = 0
    changes: dict[int, ItemChange] = field(default_factory=dict)
    diagnostics: list[str] = field(default_factory=list)

    @property
    def changed_ids(self) -> set[int]:
        return set(self.changes)


def changed_fields(original: Item, modified: Item) -> tuple[str, ...]:
    """Return the names of the fields that differ between two items."""
    return tuple(
        f.name
        for f in dataclasses.fields(Item)
        if getattr(original, f.name) != getattr(modified, f.name)
    )


# Price actions


def _price_amount(action: Action) -> Decimal:
    try:
        amount = parse_amount(action.value)
    except ValueError:
        raise ActionError(f"invalid amount '{action.value}'") from None
    if amount < 0:
        raise ActionError(f"amount cannot be negative ({action.value})")
    return amount


def _with_price(item: Item, level_id: Optional[int], price: Decimal) -> Item:
    if not level_id:
        return dataclasses.replace(item, default_price=price)

    prices = list(item.item_prices)
    for index, entry in enumerate(prices):
        if entry.price_level_id == level_id:
            prices[index] = ItemPrice(price_level_id=level_id, price=price)
            break
    else:
        prices.append(ItemPrice(price_level_id=level_id, price=price))
    return dataclasses.replace(item, item_prices=tuple(prices))


def _apply_price(item: Item, action: Action) -> Item:
    amount = _price_amount(action)
    level_id = action.price_level_id
    current = item.default_price if not level_id else item.price_at(level_id)

    if action.operation is ActionOperation.SET_PRICE:
        price = amount
    elif action.operation is ActionOperation.ADD_TO_PRICE:
        price = (current if current is not None else Decimal("0")) + amount
    else:
        if current is None:
            return item
        price = current - amount
        if price < 0:
            raise ActionError(
                f"price ${format_money(current)} minus ${format_money(amount)} would be negative"
            )
    return _with_price(item, level_id, round_cents(price))


# Reference actions


def _target_id(action: Action) -> int:
    if action.entity_id is not None:
        return action.entity_id
    try:
        return int(action.value.strip())
    except ValueError:
        raise ActionError(f"invalid {action.category.field.label.lower()} '{action.value}'") from None


def _swap_from(action: Action) -> int:
    if action.swap_from_id is None:
        raise ActionError("swap requires a value to replace")
    return action.swap_from_id


def _apply_single_reference(item: Item, action: Action) -> Item:
    attr = action.category.value
    target = _target_id(action)
    if getattr(item, attr) != _swap_from(action):
        return item
    return dataclasses.replace(item, **{attr: target})


def _apply_choice_group(item: Item, action: Action) -> Item:
    target = _target_id(action)
    entries = list(item.choice_groups)
    if action.operation is ActionOperation.ADD:
        if any(entry.group_id == target for entry in entries):
            return item
        sequence = max((entry.sequence for entry in entries), default=-1) + 1
        entries.append(ChoiceGroupEntry(group_id=target, sequence=sequence))
    elif action.operation is ActionOperation.REMOVE:
        entries = [entry for entry in entries if entry.group_id != target]
    else:
        source = _swap_from(action)
        for index, entry in enumerate(entries):
            if entry.group_id == source:
                entries[index] = dataclasses.replace(entry, group_id=target)
                break
    return dataclasses.replace(item, choice_groups=tuple(entries))


def _apply_printer_logical(item: Item, action: Action) -> Item:
    target = _target_id(action)
    entries = list(item.printer_logicals)
    if action.operation is ActionOperation.ADD:
        if any(entry.printer_id == target for entry in entries):
            return item
        entries.append(PrinterEntry(printer_id=target, primary=not entries))
    elif action.operation is ActionOperation.REMOVE:
        removed_primary = any(e.primary for e in entries if e.printer_id == target)
        entries = [entry for entry in entries if entry.printer_id != target]
        if removed_primary and entries:
            entries[0] = dataclasses.replace(entries[0], primary=True)
    else:
        source = _swap_from(action)
        for index, entry in enumerate(entries):
            if entry.printer_id == source:
                entries[index] = dataclasses.replace(entry, printer_id=target)
                break
    return dataclasses.replace(item, printer_logicals=tuple(entries))


def _apply_price_level(item: Item, action: Action) -> Item:
    target = _target_id(action)
    levels = list(item.price_levels)
    prices = list(item.item_prices)
    if action.operation is ActionOperation.ADD:
        if target in levels:
            return item
        levels.append(target)
    elif action.operation is ActionOperation.REMOVE:
        levels = [level for level in levels if level != target]
        prices = [entry for entry in prices if entry.price_level_id != target]
    else:
        source = _swap_from(action)
        if source in levels:
            levels[levels.index(source)] = target
        for index, entry in enumerate(prices):
            if entry.price_level_id == source:
                prices[index] = dataclasses.replace(entry, price_level_id=target)
                break
    return dataclasses.replace(item, price_levels=tuple(levels), item_prices=tuple(prices))


_MULTI_REFERENCE_APPLIERS = {
    ActionCategory.CHOICE_GROUP: _apply_choice_group,
    ActionCategory.PRINTER_LOGICAL: _apply_printer_logical,
    ActionCategory.PRICE_LEVEL: _apply_price_level,
}


def apply_action(item: Item, action: Action) -> Item:
    """Apply one action to an item, returning the modified copy.

    Raises:
        ActionError: If the action's inputs are invalid for this item
    """
    if action.operation not in allowed_operations(action.category):
        raise ActionError(
            f"operation '{action.operation.value}' does not apply to "
            f"{action.category.field.label.lower()}"
        )
    if action.category is ActionCategory.PRICE:
        return _apply_price(item, action)
    applier = _MULTI_REFERENCE_APPLIERS.get(action.category)
    if applier is not None:
        return applier(item, action)
    return _apply_single_reference(item, action)


def apply_actions(item: Item, actions: list[Action]) -> tuple[Item, list[str]]:
    """Apply actions in order.

    If any action fails, the remaining actions are not applied and the item
    is returned unchanged.

    Returns:
        Tuple of (resulting item, diagnostic messages)
    """
    modified = item
    for action in actions:
        try:
            modified = apply_action(modified, action)
        except ActionError as e:
            return item, [f"Item {item.id}: {e}"]
    return modified, []


class SuperEditSession:
    """Rule editing with a preview step before changes reach the catalog.

    The session starts in the EDITING state. ``preview_changes`` moves to
    PREVIEWING; ``accept_changes`` and ``cancel_preview`` return to EDITING.
    """

    def __init__(self, catalog: Catalog, rule: Optional[Rule] = None):
        """Initialize a Super Editor session.

        Args:
            catalog: Catalog whose items are edited
            rule: Starting rule; defaults to matching every named item
        """
        self.catalog = catalog
        self.rule = rule if rule is not None else Rule()
        self.state = EditorState.EDITING
        self._filtered: Optional[list[Item]] = None
        self._preview: Optional[Preview] = None

    @property
    def preview(self) -> Optional[Preview]:
        """The pending preview, if the session is previewing."""
        return self._preview

    @property
    def filtered_items(self) -> list[Item]:
        """Items matching the current conditions, computed on first use."""
        if self._filtered is None:
            self._filtered = filter_items(self.catalog.items, self.rule, self.catalog)
        return self._filtered

    def refresh(self) -> None:
        """Drop the cached filter result."""
        self._filtered = None

    def add_condition(self, condition: Condition) -> None:
        self.rule.conditions.append(condition)
        self.refresh()

    def update_condition(self, index: int, condition: Condition) -> None:
        self.rule.conditions[index] = condition
        self.refresh()

    def remove_condition(self, index: int) -> None:
        del self.rule.conditions[index]
        self.refresh()

    def set_conditions(self, conditions: list[Condition]) -> None:
        self.rule.conditions = list(conditions)
        self.refresh()

    def add_action(self, action: Action) -> None:
        self.rule.actions.append(action)

    def remove_action(self, index: int) -> None:
        del self.rule.actions[index]

    def set_actions(self, actions: list[Action]) -> None:
        self.rule.actions = list(actions)

    def preview_changes(self) -> Preview:
        """Apply the rule's actions to copies of the matching items.

        Items that end up equal to their original are not reported as
        changed. Calling this while already previewing replaces the pending
        preview.

        Returns:
            The new preview
        """
        preview = Preview(matched=len(self.filtered_items))
        for original in self.filtered_items:
            modified, diagnostics = apply_actions(original, self.rule.actions)
            preview.diagnostics.extend(diagnostics)
            if modified != original:
                preview.changes[original.id] = ItemChange(
                    original=original,
                    modified=modified,
                    changed_fields=changed_fields(original, modified),
                )

        self._preview = preview
        self.state = EditorState.PREVIEWING
        return preview

    def accept_changes(self) -> list[int]:
        """Commit the pending preview to the catalog and reset the rule.

        Returns:
            Sorted IDs of the items written

        Raises:
            RuleStateError: If there is no pending preview
            InvariantViolation: If the changes would break catalog
                invariants; the catalog and the preview are left unchanged
        """
        if self.state is not EditorState.PREVIEWING or self._preview is None:
            raise RuleStateError("No preview to accept; preview changes first")

        committed = self.catalog.commit_items(
            change.modified for change in self._preview.changes.values()
        )
        self.rule = Rule()
        self._preview = None
        self.state = EditorState.EDITING
        self.refresh()
        return committed

    def cancel_preview(self) -> None:
        """Discard the pending preview.

        Raises:
            RuleStateError: If there is no pending preview
        """
        if self.state is not EditorState.PREVIEWING:
            raise RuleStateError("No preview to cancel")
        self._preview = None
        self.state = EditorState.EDITING
