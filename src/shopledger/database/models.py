"""SQLAlchemy models for the shopledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Supplier(Base):
    """Supplier or walk-in customer model."""

    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    supplier_type = Column(String, default="registered", nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Product(Base):
    """Product model."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=True)
    barcode = Column(String, nullable=True)
    category = Column(String, nullable=True)
    unit_cost = Column(Numeric(12, 2), default=0, nullable=False)
    unit_price = Column(Numeric(12, 2), default=0, nullable=False)
    tax_rate = Column(Numeric(5, 2), default=0, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    is_trade_in = Column(Boolean, default=False, nullable=False)
    is_consignment = Column(Boolean, default=False, nullable=False)
    consignment_supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    consignment_start_date = Column(Date, nullable=True)
    consignment_end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("sku", name="products_sku_key"),
        UniqueConstraint("barcode", name="products_barcode_key"),
    )


class ExpenseTemplate(Base):
    """Recurring expense template model."""

    __tablename__ = "expense_templates"

    id = Column(Integer, primary_key=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False)
    payment_method = Column(String, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    vat_rate = Column(Numeric(5, 2), nullable=True)
    frequency = Column(String, nullable=False)
    anchor_date = Column(Date, nullable=False)
    next_due_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(String, nullable=True)
    last_generated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    expenses = relationship("Expense", back_populates="template")


class Expense(Base):
    """Expense model."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    amount_ex_vat = Column(Numeric(12, 2), nullable=True)
    vat_amount = Column(Numeric(12, 2), nullable=True)
    vat_rate = Column(Numeric(5, 2), nullable=True)
    amount_inc_vat = Column(Numeric(12, 2), nullable=True)
    category = Column(String, nullable=False)
    payment_method = Column(String, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    incurred_at = Column(DateTime, nullable=False)
    is_cogs = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    # Weak back-reference: deleting a template nulls this, never the expense.
    template_id = Column(
        Integer, ForeignKey("expense_templates.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    template = relationship("ExpenseTemplate", back_populates="expenses")


class Sale(Base):
    """Sale header model."""

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    sold_at = Column(DateTime, default=datetime.now, nullable=False)
    payment_method = Column(String, nullable=False)
    staff_member = Column(String, nullable=True)
    subtotal = Column(Numeric(12, 2), default=0, nullable=False)
    discount_total = Column(Numeric(12, 2), default=0, nullable=False)
    tax_total = Column(Numeric(12, 2), default=0, nullable=False)
    total = Column(Numeric(12, 2), default=0, nullable=False)
    part_exchange_total = Column(Numeric(12, 2), default=0, nullable=False)
    net_total = Column(Numeric(12, 2), default=0, nullable=False)
    notes = Column(String, nullable=True)

    # Relationships
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    part_exchanges = relationship(
        "PartExchange", back_populates="sale", cascade="all, delete-orphan"
    )
    settlements = relationship(
        "ConsignmentSettlement", back_populates="sale", cascade="all, delete-orphan"
    )


class SaleItem(Base):
    """Sold line model."""

    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    unit_cost = Column(Numeric(12, 2), default=0, nullable=False)
    discount = Column(Numeric(12, 2), default=0, nullable=False)
    tax_rate = Column(Numeric(5, 2), default=0, nullable=False)

    # Relationships
    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")


class PartExchange(Base):
    """Part-exchange (trade-in) model."""

    __tablename__ = "part_exchanges"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    allowance = Column(Numeric(12, 2), nullable=False)
    customer_supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    serial = Column(String, nullable=True)
    description = Column(String, nullable=True)

    # Relationships
    sale = relationship("Sale", back_populates="part_exchanges")
    product = relationship("Product")


class ConsignmentSettlement(Base):
    """Consignment settlement model."""

    __tablename__ = "consignment_settlements"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    agreed_price = Column(Numeric(12, 2), nullable=True)
    payout_amount = Column(Numeric(12, 2), nullable=True)
    paid_at = Column(DateTime, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    sale = relationship("Sale", back_populates="settlements")

    __table_args__ = (
        UniqueConstraint("product_id", "sale_id", name="uq_settlement_product_sale"),
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
