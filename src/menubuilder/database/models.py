"""SQLAlchemy models for menubuilder database."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

Base = declarative_base()


class Item(Base):
    """Menu item model."""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    button1 = Column(String, nullable=False, default="")
    button2 = Column(String, nullable=True)
    printer_text = Column(String, nullable=False, default="")
    default_price = Column(Numeric(10, 2), nullable=True)
    price_levels = Column(JSON, nullable=False, default=list)
    product_class_id = Column(Integer, nullable=True)
    revenue_category_id = Column(Integer, nullable=True)
    tax_group_id = Column(Integer, nullable=True)
    security_level_id = Column(Integer, nullable=True)
    report_category_id = Column(Integer, nullable=True)
    item_group_id = Column(Integer, nullable=True)
    use_weight = Column(Boolean, default=False, nullable=False)
    # Kept as text so the written form ("0", "0.25") survives a reload
    weight_amount = Column(String, nullable=False, default="0")
    sku = Column(String, nullable=True)
    bar_gun_code = Column(String, nullable=True)
    cost_amount = Column(Numeric(10, 2), nullable=True)
    reserved1 = Column(Boolean, default=False, nullable=False)
    ask_price = Column(Boolean, default=False, nullable=False)
    print_on_check = Column(Boolean, default=False, nullable=False)
    discountable = Column(Boolean, default=True, nullable=False)
    voidable = Column(Boolean, default=True, nullable=False)
    not_active = Column(Boolean, default=False, nullable=False)
    tax_included = Column(Boolean, default=False, nullable=False)
    customer_receipt = Column(String, nullable=False, default="")
    allow_price_override = Column(Boolean, default=False, nullable=False)
    reserved2 = Column(Boolean, default=False, nullable=False)
    covers = Column(Integer, nullable=False, default=0)
    store_id = Column(Integer, nullable=False, default=0)
    kitchen_video = Column(String, nullable=False, default="")
    kds_dept = Column(Integer, nullable=False, default=0)
    kds_category = Column(String, nullable=False, default="")
    kds_cooktime = Column(Integer, nullable=False, default=0)
    store_price_level = Column(JSON, nullable=False, default=list)
    image_id = Column(Integer, nullable=False, default=0)
    stock_item = Column(Boolean, default=False, nullable=False)
    language_iso_code = Column(String, nullable=False, default="")

    # Relationships
    prices = relationship(
        "ItemPrice",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="ItemPrice.position",
    )
    choice_groups = relationship(
        "ItemChoiceGroup",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="ItemChoiceGroup.position",
    )
    printer_logicals = relationship(
        "ItemPrinterLogical",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="ItemPrinterLogical.position",
    )


class ItemPrice(Base):
    """Price of an item at a price level."""

    __tablename__ = "item_prices"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    position = Column(Integer, nullable=False)
    price_level_id = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    item = relationship("Item", back_populates="prices")


class ItemChoiceGroup(Base):
    """Choice group attached to an item."""

    __tablename__ = "item_choice_groups"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    position = Column(Integer, nullable=False)
    choice_group_id = Column(Integer, nullable=False)
    sequence = Column(Integer, nullable=False)

    item = relationship("Item", back_populates="choice_groups")


class ItemPrinterLogical(Base):
    """Printer logical attached to an item."""

    __tablename__ = "item_printer_logicals"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    position = Column(Integer, nullable=False)
    printer_logical_id = Column(Integer, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)

    item = relationship("Item", back_populates="printer_logicals")


class ItemGroup(Base):
    """Item group model with its half-open item ID range."""

    __tablename__ = "item_groups"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    range_start = Column(Integer, nullable=False)
    range_end = Column(Integer, nullable=False)


class PriceLevel(Base):
    """Price level model."""

    __tablename__ = "price_levels"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    level_type = Column(String, nullable=False, default="Enterprise")


class TaxGroup(Base):
    """Tax group model; rate is a fraction."""

    __tablename__ = "tax_groups"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    rate = Column(Numeric(10, 6), nullable=False)


class SecurityLevel(Base):
    __tablename__ = "security_levels"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


class RevenueCategory(Base):
    __tablename__ = "revenue_categories"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


class ReportCategory(Base):
    __tablename__ = "report_categories"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


class ProductClass(Base):
    __tablename__ = "product_classes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


class ChoiceGroup(Base):
    __tablename__ = "choice_groups"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


class PrinterLogical(Base):
    __tablename__ = "printer_logicals"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
