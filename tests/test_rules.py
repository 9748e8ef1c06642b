"""Tests for rule conditions and item filtering."""

from decimal import Decimal

import pytest

from menubuilder.domain.entities import Item, ItemPrice
from menubuilder.domain.rules import (
    ActionCategory,
    ActionOperation,
    Condition,
    ConditionLogic,
    FilterField,
    FilterOperator,
    Rule,
    allowed_operations,
    allowed_operators,
    applies_to,
    evaluate_condition,
    filter_items,
    parse_id_range,
    reference_ids,
)

AND = ConditionLogic.AND
OR = ConditionLogic.OR


def _ids(catalog, *conditions):
    rule = Rule(conditions=list(conditions))
    return [item.id for item in filter_items(catalog.items, rule, catalog)]


class TestFilterItems:
    """Tests for folding conditions over the catalog."""

    def test_and_of_two_conditions(self, menu_catalog):
        """Only items satisfying both conditions are selected."""
        ids = _ids(
            menu_catalog,
            Condition(AND, FilterField.NAME, FilterOperator.CONTAINS, "Soda"),
            Condition(AND, FilterField.PRICE, FilterOperator.GREATER_THAN, "3"),
        )

        assert ids == [102]

    def test_conditions_fold_left_to_right(self, menu_catalog):
        """``a OR b AND c`` is evaluated as ``(a OR b) AND c``."""
        ids = _ids(
            menu_catalog,
            Condition(AND, FilterField.NAME, FilterOperator.CONTAINS, "water"),
            Condition(OR, FilterField.NAME, FilterOperator.CONTAINS, "soda"),
            Condition(AND, FilterField.PRICE, FilterOperator.GREATER_THAN, "3"),
        )

        assert ids == [102]

    def test_first_condition_logic_is_ignored(self, menu_catalog):
        """An OR on the first condition behaves like AND."""
        ids = _ids(menu_catalog, Condition(OR, FilterField.NAME, FilterOperator.BEGINS_WITH, "past"))

        assert ids == [7400002]

    def test_rule_without_conditions_matches_everything(self, menu_catalog):
        """An empty condition list selects every item."""
        assert _ids(menu_catalog) == [101, 102, 103, 7400002]

    def test_default_rule_matches_named_items(self, menu_catalog):
        """A new rule selects every item with a name."""
        rule = Rule()

        assert len(rule.conditions) == 1
        assert len(filter_items(menu_catalog.items, rule, menu_catalog)) == 4
        assert not applies_to(Item(id=1, name=" "), rule, menu_catalog)


class TestNameAndId:
    """Tests for name and identifier conditions."""

    @pytest.mark.parametrize(
        "operator,value,expected",
        [
            (FilterOperator.CONTAINS, "SODA", [101, 102]),
            (FilterOperator.BEGINS_WITH, "soda l", [102]),
            (FilterOperator.ENDS_WITH, "er", [103]),
            (FilterOperator.IS_NOT_EMPTY, "", [101, 102, 103, 7400002]),
            (FilterOperator.IS_EMPTY, "", []),
        ],
    )
    def test_name_operators(self, menu_catalog, operator, value, expected):
        """Name matching ignores case."""
        assert _ids(menu_catalog, Condition(AND, FilterField.NAME, operator, value)) == expected

    def test_operator_not_allowed_never_matches(self, menu_catalog):
        """An operator outside the field's set evaluates to False."""
        condition = Condition(AND, FilterField.NAME, FilterOperator.EQUALS, "Soda")

        assert FilterOperator.EQUALS not in allowed_operators(FilterField.NAME)
        assert _ids(menu_catalog, condition) == []

    def test_id_between_is_inclusive(self, menu_catalog):
        """Between matches both bounds."""
        condition = Condition(AND, FilterField.ID, FilterOperator.BETWEEN, "101-102")

        assert _ids(menu_catalog, condition) == [101, 102]

    def test_id_comparisons(self, menu_catalog):
        """Greater and less than compare the item ID."""
        assert _ids(menu_catalog, Condition(AND, FilterField.ID, FilterOperator.GREATER_THAN, "103")) == [
            7400002
        ]
        assert _ids(menu_catalog, Condition(AND, FilterField.ID, FilterOperator.LESS_THAN, "102")) == [101]

    @pytest.mark.parametrize("value", ["", "abc", "1-2-3", "5-x"])
    def test_malformed_id_range(self, menu_catalog, value):
        """A malformed range never matches."""
        assert parse_id_range(value) is None
        assert _ids(menu_catalog, Condition(AND, FilterField.ID, FilterOperator.BETWEEN, value)) == []


class TestPrice:
    """Tests for price conditions."""

    def test_level_price_counts(self, menu_catalog):
        """A price at any level can satisfy the condition."""
        condition = Condition(AND, FilterField.PRICE, FilterOperator.EQUALS, "3.5")

        assert _ids(menu_catalog, condition) == [102]

    def test_equality_within_a_cent(self, menu_catalog):
        """Amounts closer than one cent are equal."""
        item = Item(id=1, name="Dog", default_price=Decimal("2.00"))
        close = Condition(AND, FilterField.PRICE, FilterOperator.EQUALS, "2.009")
        far = Condition(AND, FilterField.PRICE, FilterOperator.EQUALS, "2.01")

        assert evaluate_condition(item, close, menu_catalog)
        assert not evaluate_condition(item, far, menu_catalog)

    def test_empty_price(self, menu_catalog):
        """An item without prices is empty; zero is still a price."""
        unpriced = Item(id=1, name="Dog")
        is_empty = Condition(AND, FilterField.PRICE, FilterOperator.IS_EMPTY)

        assert evaluate_condition(unpriced, is_empty, menu_catalog)
        assert _ids(menu_catalog, is_empty) == []

    def test_level_only_prices_are_not_empty(self, menu_catalog):
        """Level prices count even without a default price."""
        item = Item(id=1, name="Dog", item_prices=(ItemPrice(1, Decimal("1.00")),))
        condition = Condition(AND, FilterField.PRICE, FilterOperator.LESS_OR_EQUAL, "1")

        assert evaluate_condition(item, condition, menu_catalog)

    def test_unparseable_amount(self, menu_catalog):
        """A value that is not an amount never matches."""
        condition = Condition(AND, FilterField.PRICE, FilterOperator.GREATER_THAN, "cheap")

        assert _ids(menu_catalog, condition) == []


class TestReferences:
    """Tests for conditions on referenced entities."""

    def test_match_by_name(self, menu_catalog):
        """Without an entity ID the referenced entity's name is compared."""
        equals = Condition(AND, FilterField.TAX_GROUP, FilterOperator.EQUALS, "sales tax")
        contains = Condition(AND, FilterField.TAX_GROUP, FilterOperator.CONTAINS, "TAX")

        assert _ids(menu_catalog, equals) == [101, 102, 7400002]
        assert _ids(menu_catalog, contains) == [101, 102, 7400002]

    def test_not_equals_includes_unset(self, menu_catalog):
        """Items without the reference do not equal any value."""
        condition = Condition(AND, FilterField.TAX_GROUP, FilterOperator.NOT_EQUALS, "Sales Tax")

        assert _ids(menu_catalog, condition) == [103]

    def test_is_empty(self, menu_catalog):
        """Is Empty selects items without the reference."""
        condition = Condition(AND, FilterField.TAX_GROUP, FilterOperator.IS_EMPTY)

        assert _ids(menu_catalog, condition) == [103]

    def test_match_by_entity_id(self, menu_catalog):
        """A picked entity is compared by ID, not by name."""
        condition = Condition(
            AND, FilterField.PRINTER_LOGICAL, FilterOperator.EQUALS, "Kitchen", entity_id=3
        )

        assert _ids(menu_catalog, condition) == [101, 7400002]

    def test_does_not_contain(self, menu_catalog):
        """Items without any matching entry are selected."""
        condition = Condition(AND, FilterField.PRINTER_LOGICAL, FilterOperator.DOES_NOT_CONTAIN, "bar")

        assert _ids(menu_catalog, condition) == [102, 103]

    def test_does_not_contain_not_allowed_on_single_reference(self, menu_catalog):
        """Single references only take the single-reference operators."""
        condition = Condition(AND, FilterField.TAX_GROUP, FilterOperator.DOES_NOT_CONTAIN, "bar")

        assert _ids(menu_catalog, condition) == []

    def test_price_level_uses_item_prices(self, menu_catalog):
        """Levels an item is priced at count as its price levels."""
        condition = Condition(AND, FilterField.PRICE_LEVEL, FilterOperator.EQUALS, "happy hour")

        assert _ids(menu_catalog, condition) == [102]

    def test_reference_ids(self):
        """Reference IDs merge explicit price levels with priced levels."""
        item = Item(
            id=1,
            name="Dog",
            price_levels=(2,),
            item_prices=(ItemPrice(2, Decimal("1")), ItemPrice(3, Decimal("1"))),
            tax_group=4,
        )

        assert reference_ids(item, FilterField.PRICE_LEVEL) == [2, 3]
        assert reference_ids(item, FilterField.TAX_GROUP) == [4]
        assert reference_ids(item, FilterField.SECURITY_LEVEL) == []


class TestAllowedOperations:
    """Tests for the action operation table."""

    def test_price_operations(self):
        """Prices take arithmetic operations."""
        assert ActionOperation.SET_PRICE in allowed_operations(ActionCategory.PRICE)
        assert ActionOperation.ADD not in allowed_operations(ActionCategory.PRICE)

    def test_single_reference_only_swaps(self):
        """Single references can only be swapped."""
        assert allowed_operations(ActionCategory.TAX_GROUP) == (ActionOperation.SWAP_TO,)

    def test_multi_reference_operations(self):
        """Lists can be added to, removed from and swapped."""
        assert allowed_operations(ActionCategory.CHOICE_GROUP) == (
            ActionOperation.ADD,
            ActionOperation.REMOVE,
            ActionOperation.SWAP_TO,
        )
