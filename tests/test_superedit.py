"""Tests for the Super Editor session and action application."""

from decimal import Decimal

import pytest

from menubuilder.domain.entities import ChoiceGroupEntry, EntityKind, Item, ItemPrice, PrinterEntry
from menubuilder.domain.errors import InvariantViolation, RuleStateError
from menubuilder.domain.rules import (
    Action,
    ActionCategory,
    ActionOperation,
    Condition,
    ConditionLogic,
    FilterField,
    FilterOperator,
)
from menubuilder.domain.superedit import (
    ActionError,
    EditorState,
    SuperEditSession,
    apply_action,
    apply_actions,
)

AND = ConditionLogic.AND


def _price(operation, value, level=None):
    return Action(ActionCategory.PRICE, operation, value=value, price_level_id=level)


def _reference(category, operation, target, source=None):
    return Action(category, operation, value=str(target), entity_id=target, swap_from_id=source)


@pytest.fixture
def soda_session(menu_catalog):
    """Session selecting sodas priced above 3."""
    session = SuperEditSession(menu_catalog)
    session.set_conditions(
        [
            Condition(AND, FilterField.NAME, FilterOperator.CONTAINS, "Soda"),
            Condition(AND, FilterField.PRICE, FilterOperator.GREATER_THAN, "3"),
        ]
    )
    return session


class TestPriceActions:
    """Tests for price actions."""

    def test_set_default_price(self):
        """Set Price replaces the default price."""
        item = Item(id=1, name="Soda", default_price=Decimal("2.00"))

        result = apply_action(item, _price(ActionOperation.SET_PRICE, "4.00"))

        assert result.default_price == Decimal("4.00")

    def test_add_to_level_price(self):
        """A level action changes only that level's price."""
        item = Item(
            id=1,
            name="Soda",
            default_price=Decimal("4.50"),
            item_prices=(ItemPrice(1, Decimal("3.50")),),
        )

        result = apply_action(item, _price(ActionOperation.ADD_TO_PRICE, "1", level=1))

        assert result.default_price == Decimal("4.50")
        assert result.item_prices == (ItemPrice(1, Decimal("4.50")),)

    def test_results_are_rounded_to_cents(self):
        """Arithmetic results use banker's rounding to two decimals."""
        item = Item(id=1, name="Soda", default_price=Decimal("2.00"))

        assert apply_action(item, _price(ActionOperation.ADD_TO_PRICE, "0.125")).default_price == Decimal(
            "2.12"
        )
        assert apply_action(item, _price(ActionOperation.SET_PRICE, "4.005")).default_price == Decimal(
            "4.00"
        )

    def test_subtract_below_zero_fails(self):
        """A subtraction that would go negative is rejected."""
        item = Item(id=1, name="Soda", default_price=Decimal("2.00"))

        with pytest.raises(ActionError, match="would be negative"):
            apply_action(item, _price(ActionOperation.SUBTRACT_FROM_PRICE, "3.00"))

    def test_subtract_from_missing_price_is_no_op(self):
        """There is nothing to subtract from an unset price."""
        item = Item(id=1, name="Soda")

        assert apply_action(item, _price(ActionOperation.SUBTRACT_FROM_PRICE, "1")) == item

    @pytest.mark.parametrize("value", ["abc", "-1", ""])
    def test_bad_amount(self, value):
        """Amounts must parse and be non-negative."""
        with pytest.raises(ActionError):
            apply_action(Item(id=1, name="Soda"), _price(ActionOperation.SET_PRICE, value))


class TestReferenceActions:
    """Tests for reference actions."""

    def test_swap_printer_keeps_primary(self):
        """Swapping a secondary printer keeps the primary in place."""
        item = Item(id=1, name="Soda", printer_logicals=(PrinterEntry(2, True), PrinterEntry(3, False)))
        action = _reference(ActionCategory.PRINTER_LOGICAL, ActionOperation.SWAP_TO, 6, source=3)

        result = apply_action(item, action)

        assert result.printer_logicals == (PrinterEntry(2, True), PrinterEntry(6, False))

    def test_remove_primary_printer_reassigns(self):
        """Removing the primary printer makes the first remaining one primary."""
        item = Item(
            id=1,
            name="Soda",
            printer_logicals=(PrinterEntry(2, True), PrinterEntry(3, False), PrinterEntry(5, False)),
        )
        action = _reference(ActionCategory.PRINTER_LOGICAL, ActionOperation.REMOVE, 2)

        result = apply_action(item, action)

        assert result.printer_logicals == (PrinterEntry(3, True), PrinterEntry(5, False))

    def test_add_first_printer_is_primary(self):
        """The first printer added to an empty list becomes primary."""
        action = _reference(ActionCategory.PRINTER_LOGICAL, ActionOperation.ADD, 4)

        result = apply_action(Item(id=1, name="Soda"), action)

        assert result.printer_logicals == (PrinterEntry(4, True),)

    def test_add_choice_group_appends_sequence(self):
        """Added choice groups go to the end of the list."""
        item = Item(id=1, name="Pasta", choice_groups=(ChoiceGroupEntry(12, 0),))
        action = _reference(ActionCategory.CHOICE_GROUP, ActionOperation.ADD, 14)

        result = apply_action(item, action)

        assert result.choice_groups == (ChoiceGroupEntry(12, 0), ChoiceGroupEntry(14, 1))
        assert apply_action(result, action) == result

    def test_swap_single_reference(self):
        """A single reference is swapped only when it holds the source value."""
        item = Item(id=1, name="Soda", tax_group=1)

        swapped = apply_action(item, _reference(ActionCategory.TAX_GROUP, ActionOperation.SWAP_TO, 2, source=1))
        untouched = apply_action(item, _reference(ActionCategory.TAX_GROUP, ActionOperation.SWAP_TO, 1, source=2))

        assert swapped.tax_group == 2
        assert untouched == item

    def test_remove_price_level_drops_its_price(self):
        """Removing a price level also removes the item's price at that level."""
        item = Item(
            id=1,
            name="Soda",
            price_levels=(1,),
            item_prices=(ItemPrice(1, Decimal("3.50")), ItemPrice(2, Decimal("3.00"))),
        )
        action = _reference(ActionCategory.PRICE_LEVEL, ActionOperation.REMOVE, 1)

        result = apply_action(item, action)

        assert result.price_levels == ()
        assert result.item_prices == (ItemPrice(2, Decimal("3.00")),)

    def test_swap_without_source_fails(self):
        """A swap needs the value it replaces."""
        action = _reference(ActionCategory.TAX_GROUP, ActionOperation.SWAP_TO, 2)

        with pytest.raises(ActionError, match="swap requires"):
            apply_action(Item(id=1, name="Soda", tax_group=1), action)

    def test_operation_not_allowed(self):
        """Single references cannot be added to."""
        action = _reference(ActionCategory.TAX_GROUP, ActionOperation.ADD, 2)

        with pytest.raises(ActionError, match="does not apply"):
            apply_action(Item(id=1, name="Soda"), action)


class TestApplyActions:
    """Tests for applying a sequence of actions."""

    def test_actions_apply_in_order(self):
        """Later actions see the result of earlier ones."""
        item = Item(id=1, name="Soda", default_price=Decimal("2.00"))

        result, diagnostics = apply_actions(
            item,
            [
                _price(ActionOperation.SET_PRICE, "5"),
                _price(ActionOperation.SUBTRACT_FROM_PRICE, "1.50"),
            ],
        )

        assert result.default_price == Decimal("3.50")
        assert diagnostics == []

    def test_failure_leaves_item_unchanged(self):
        """One failing action discards every change to the item."""
        item = Item(id=1, name="Soda", default_price=Decimal("2.00"))

        result, diagnostics = apply_actions(
            item,
            [
                _price(ActionOperation.SET_PRICE, "5"),
                _price(ActionOperation.SUBTRACT_FROM_PRICE, "10"),
            ],
        )

        assert result is item
        assert diagnostics == ["Item 1: price $5.00 minus $10.00 would be negative"]

    @pytest.mark.parametrize("level", [None, 2])
    def test_set_price_twice_is_same_as_once(self, level):
        """Repeating Set Price gives the same item as applying it once."""
        item = Item(
            id=1,
            name="Soda",
            default_price=Decimal("2.00"),
            item_prices=(ItemPrice(1, Decimal("3.50")),),
        )
        action = _price(ActionOperation.SET_PRICE, "6.25", level)

        once, _ = apply_actions(item, [action])
        twice, diagnostics = apply_actions(item, [action, action])

        assert twice == once
        assert once != item
        assert diagnostics == []


class TestSuperEditSession:
    """Tests for SuperEditSession."""

    def test_preview_contains_only_changed_items(self, soda_session):
        """Matching items are previewed; unmatched ones are not touched."""
        soda_session.add_action(_price(ActionOperation.SET_PRICE, "4.00"))

        preview = soda_session.preview_changes()

        assert preview.matched == 1
        assert preview.changed_ids == {102}
        change = preview.changes[102]
        assert change.modified.default_price == Decimal("4.00")
        assert change.changed_fields == ("default_price",)
        assert soda_session.state is EditorState.PREVIEWING

    def test_preview_does_not_touch_catalog(self, soda_session, menu_catalog):
        """Previewing works on copies."""
        snapshot = menu_catalog.copy()
        soda_session.add_action(_price(ActionOperation.SET_PRICE, "4.00"))

        soda_session.preview_changes()

        assert menu_catalog == snapshot

    def test_set_price_to_current_value_is_not_a_change(self, menu_catalog):
        """Items whose values end up the same are not reported."""
        session = SuperEditSession(menu_catalog)
        session.add_condition(Condition(AND, FilterField.ID, FilterOperator.LESS_THAN, "102"))
        session.add_action(_price(ActionOperation.SET_PRICE, "2.00"))

        preview = session.preview_changes()

        assert preview.matched == 1
        assert preview.changed_ids == set()

    def test_swap_that_matches_nothing_changes_nothing(self, menu_catalog):
        """Swapping from a value no item holds leaves every item alone."""
        session = SuperEditSession(menu_catalog)
        session.add_action(_reference(ActionCategory.TAX_GROUP, ActionOperation.SWAP_TO, 1, source=2))

        assert session.preview_changes().changed_ids == set()

    def test_rule_without_actions_changes_nothing(self, menu_catalog):
        """Matching items with no actions produce an empty change set."""
        session = SuperEditSession(menu_catalog)
        session.set_actions([])

        preview = session.preview_changes()

        assert preview.matched == 4
        assert preview.changed_ids == set()
        assert preview.diagnostics == []

    def test_diagnostics_are_collected(self, menu_catalog):
        """Failures are reported per item and the other items still change."""
        session = SuperEditSession(menu_catalog)
        session.add_action(_price(ActionOperation.SUBTRACT_FROM_PRICE, "3.00"))

        preview = session.preview_changes()

        assert preview.changed_ids == {102, 7400002}
        assert preview.diagnostics == [
            "Item 101: price $2.00 minus $3.00 would be negative",
            "Item 103: price $0.00 minus $3.00 would be negative",
        ]

    def test_accept_commits_and_resets(self, soda_session, menu_catalog):
        """Accepting writes the preview and starts a fresh rule."""
        soda_session.add_action(_price(ActionOperation.SET_PRICE, "4.00"))
        soda_session.preview_changes()

        committed = soda_session.accept_changes()

        assert committed == [102]
        assert menu_catalog.get(EntityKind.ITEM, 102).default_price == Decimal("4.00")
        assert soda_session.state is EditorState.EDITING
        assert soda_session.preview is None
        assert soda_session.rule.actions == []
        assert len(soda_session.rule.conditions) == 1

    def test_cancel_discards_changes(self, soda_session, menu_catalog):
        """Cancelling leaves the catalog exactly as it was."""
        snapshot = menu_catalog.copy()
        soda_session.add_action(_price(ActionOperation.SET_PRICE, "4.00"))
        soda_session.preview_changes()

        soda_session.cancel_preview()

        assert menu_catalog == snapshot
        assert soda_session.state is EditorState.EDITING
        assert soda_session.preview is None

    def test_accept_without_preview(self, soda_session):
        """Accepting requires a pending preview."""
        with pytest.raises(RuleStateError):
            soda_session.accept_changes()

    def test_cancel_without_preview(self, soda_session):
        """Cancelling requires a pending preview."""
        with pytest.raises(RuleStateError):
            soda_session.cancel_preview()

    def test_accept_rejects_invariant_violation(self, menu_catalog):
        """A preview that breaks references is not committed."""
        snapshot = menu_catalog.copy()
        session = SuperEditSession(menu_catalog)
        session.add_action(_reference(ActionCategory.TAX_GROUP, ActionOperation.SWAP_TO, 99, source=1))
        session.preview_changes()

        with pytest.raises(InvariantViolation) as exc_info:
            session.accept_changes()

        assert [item_id for item_id, _ in exc_info.value.errors] == [101, 102, 7400002]
        assert menu_catalog == snapshot
        assert session.state is EditorState.PREVIEWING

    def test_condition_edits_refresh_the_filter(self, menu_catalog):
        """Changing conditions recomputes the matching items."""
        session = SuperEditSession(menu_catalog)
        assert len(session.filtered_items) == 4

        session.add_condition(Condition(AND, FilterField.NAME, FilterOperator.CONTAINS, "soda"))
        assert [item.id for item in session.filtered_items] == [101, 102]

        session.remove_condition(1)
        assert len(session.filtered_items) == 4

    def test_preview_again_replaces_pending_preview(self, soda_session):
        """A second preview reflects the current actions."""
        soda_session.add_action(_price(ActionOperation.SET_PRICE, "4.00"))
        soda_session.preview_changes()
        soda_session.set_actions([_price(ActionOperation.SET_PRICE, "6.00")])

        preview = soda_session.preview_changes()

        assert preview.changes[102].modified.default_price == Decimal("6.00")
