"""Shared pytest fixtures for menubuilder tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from menubuilder.database.factories import create_sqlite_database
from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entities import (
    ChoiceGroup,
    ChoiceGroupEntry,
    Item,
    ItemGroup,
    ItemPrice,
    PriceLevel,
    PrinterEntry,
    PrinterLogical,
    ProductClass,
    RevenueCategory,
    TaxGroup,
)
from menubuilder.domain.entity_service import EntityService

# Scenario record from the POS reference export, one item of group 125
SPICED_NUTS_LINE = (
    '"A",7400002,"Spiced Nuts","Spiced","Nuts","Spiced Nuts",{1,$8.00},103,1,1,0,0,0,0,'
    '{},,$0.00 ,0,0,1,1,1,0,0,125,"Spiced Nuts",1,0,{},{2,1,3,0,6,0},0,0,"Spiced Nuts",'
    '0,"",0,{},0,0,"",0,""'
)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def catalog():
    """Create an empty catalog."""
    return Catalog()


@pytest.fixture
def menu_catalog():
    """Create a small catalog with drinks and entrees and their reference data."""
    catalog = Catalog()
    for entity in [
        ItemGroup(id=10, name="Drinks", range_start=100, range_end=200),
        ItemGroup(id=125, name="Entree", range_start=7400000, range_end=7500000),
        TaxGroup(id=1, name="Sales Tax", rate=Decimal("0.0825")),
        TaxGroup(id=2, name="Alcohol Tax", rate=Decimal("0.10")),
        RevenueCategory(id=1, name="Food"),
        RevenueCategory(id=2, name="Beverage"),
        PriceLevel(id=1, name="Happy Hour"),
        PriceLevel(id=2, name="Staff"),
        PrinterLogical(id=2, name="Kitchen"),
        PrinterLogical(id=3, name="Bar"),
        PrinterLogical(id=5, name="Expo"),
        PrinterLogical(id=6, name="Grill"),
        ChoiceGroup(id=12, name="Sides"),
        ChoiceGroup(id=14, name="Sauces"),
        ProductClass(id=103, name="Food"),
    ]:
        catalog.insert(entity)

    catalog.insert(
        Item(
            id=101,
            name="Soda",
            button1="Soda",
            default_price=Decimal("2.00"),
            item_group=10,
            tax_group=1,
            revenue_category=2,
            printer_logicals=(PrinterEntry(3, True),),
        )
    )
    catalog.insert(
        Item(
            id=102,
            name="Soda Large",
            button1="Soda Lg",
            default_price=Decimal("4.50"),
            item_prices=(ItemPrice(1, Decimal("3.50")),),
            item_group=10,
            tax_group=1,
            revenue_category=2,
        )
    )
    catalog.insert(
        Item(
            id=103,
            name="Water",
            button1="Water",
            default_price=Decimal("0.00"),
            item_group=10,
            revenue_category=2,
        )
    )
    catalog.insert(
        Item(
            id=7400002,
            name="Pasta",
            button1="Pasta",
            default_price=Decimal("14.50"),
            item_group=125,
            tax_group=1,
            revenue_category=1,
            product_class=103,
            choice_groups=(ChoiceGroupEntry(12, 0),),
            printer_logicals=(
                PrinterEntry(2, True),
                PrinterEntry(3, False),
                PrinterEntry(5, False),
            ),
        )
    )
    return catalog


@pytest.fixture
def entity_service(menu_catalog):
    """Create an EntityService over the sample catalog."""
    return EntityService(menu_catalog)


@pytest.fixture
def saved_menu_db(temp_db, menu_catalog):
    """Store the sample catalog in the temporary database."""
    temp_db.save_catalog(menu_catalog)
    return temp_db


@pytest.fixture
def spiced_nuts_line():
    """Return one POS record exactly as the POS writes it."""
    return SPICED_NUTS_LINE


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
