"""Domain model entities for shopledger.

These are pure data classes representing business concepts, independent of
database schema. The store returns them, the calculators consume them, and
nothing outside the database package ever sees an ORM row.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class Frequency(str, Enum):
    """Recurrence frequency of an expense template."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class ExpenseCategory(str, Enum):
    """Built-in expense categories. Custom categories are plain strings."""

    RENT = "rent"
    UTILITIES = "utilities"
    MARKETING = "marketing"
    FEES = "fees"
    WAGES = "wages"
    REPAIRS = "repairs"
    OTHER = "other"


class PaymentMethod(str, Enum):
    """Payment methods stored on expenses and sales."""

    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    OTHER = "other"


class DocumentType(str, Enum):
    """Product document types."""

    REGISTRATION = "registration"
    WARRANTY = "warranty"
    APPRAISAL = "appraisal"
    SERVICE = "service"
    PHOTO = "photo"
    OTHER = "other"
    CONSIGNMENT_AGREEMENT = "consignment_agreement"
    CERTIFICATE_CARD = "certificate_card"


class SupplierType(str, Enum):
    """Registered trade supplier or walk-in customer."""

    REGISTERED = "registered"
    CUSTOMER = "customer"


class TemplateStatus(str, Enum):
    """Lifecycle state of an expense template."""

    ACTIVE = "active"
    PAUSED = "paused"
    DELETED = "deleted"


class SettlementStatus(str, Enum):
    """Consignment settlement state. The only transition is UNSETTLED -> SETTLED."""

    UNSETTLED = "unsettled"
    SETTLED = "settled"


class CostBasisKind(str, Enum):
    """Which cost basis was used to compute a sold line's COGS."""

    TRADE_IN = "trade_in"
    CONSIGNMENT = "consignment"
    OWNED = "owned"


class SummaryGroupBy(str, Enum):
    """Grouping modes for P&L summaries."""

    PRODUCT = "product"
    CATEGORY = "category"
    SUPPLIER = "supplier"


@dataclass(frozen=True)
class Supplier:
    """Supplier or walk-in customer domain entity."""

    id: int
    name: str
    supplier_type: SupplierType
    email: Optional[str]
    phone: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Product:
    """Inventory line, limited to the fields that drive pricing and cost basis."""

    id: int
    name: str
    sku: Optional[str]
    barcode: Optional[str]
    category: Optional[str]
    unit_cost: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    supplier_id: Optional[int]
    is_trade_in: bool
    is_consignment: bool
    consignment_supplier_id: Optional[int]
    consignment_start_date: Optional[date]
    consignment_end_date: Optional[date]
    created_at: datetime


@dataclass(frozen=True)
class ExpenseTemplate:
    """Recurring expense definition."""

    id: int
    description: str
    amount: Decimal
    category: str
    payment_method: str
    supplier_id: Optional[int]
    vat_rate: Optional[Decimal]
    frequency: Frequency
    anchor_date: date
    next_due_date: date
    is_active: bool
    notes: Optional[str]
    last_generated_at: Optional[datetime]
    created_at: datetime

    @property
    def status(self) -> TemplateStatus:
        return TemplateStatus.ACTIVE if self.is_active else TemplateStatus.PAUSED


@dataclass(frozen=True)
class Expense:
    """One concrete financial outflow."""

    id: int
    description: str
    amount: Decimal
    amount_ex_vat: Optional[Decimal]
    vat_amount: Optional[Decimal]
    vat_rate: Optional[Decimal]
    amount_inc_vat: Optional[Decimal]
    category: str
    payment_method: str
    supplier_id: Optional[int]
    incurred_at: datetime
    is_cogs: bool
    notes: Optional[str]
    template_id: Optional[int]

    @property
    def reporting_amount(self) -> Decimal:
        """VAT-inclusive figure when recorded, otherwise the gross amount."""
        if self.amount_inc_vat is not None:
            return self.amount_inc_vat
        return self.amount


@dataclass(frozen=True)
class Sale:
    """Completed POS transaction header."""

    id: int
    sold_at: datetime
    payment_method: str
    staff_member: Optional[str]
    subtotal: Decimal
    discount_total: Decimal
    tax_total: Decimal
    total: Decimal
    part_exchange_total: Decimal
    net_total: Decimal
    notes: Optional[str]


@dataclass(frozen=True)
class SaleItem:
    """Sold line. unit_cost is the sale-time snapshot and is never recomputed."""

    id: int
    sale_id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    unit_cost: Decimal
    discount: Decimal
    tax_rate: Decimal


@dataclass(frozen=True)
class PartExchange:
    """Trade-in surrendered by a customer against a sale."""

    id: int
    sale_id: int
    product_id: Optional[int]
    allowance: Decimal
    customer_supplier_id: Optional[int]
    serial: Optional[str]
    description: Optional[str]


@dataclass(frozen=True)
class ConsignmentSettlement:
    """Agreed payout to a consignment supplier for one sold product."""

    id: int
    product_id: int
    sale_id: int
    supplier_id: Optional[int]
    agreed_price: Optional[Decimal]
    payout_amount: Optional[Decimal]
    paid_at: Optional[datetime]
    notes: Optional[str]

    @property
    def status(self) -> SettlementStatus:
        if self.paid_at is None:
            return SettlementStatus.UNSETTLED
        return SettlementStatus.SETTLED


@dataclass(frozen=True)
class SoldLine:
    """A sale item joined with everything the cost-basis resolver needs."""

    sale_item: SaleItem
    product: Product
    sold_at: datetime
    part_exchanges: tuple[PartExchange, ...] = ()
    settlement: Optional[ConsignmentSettlement] = None


@dataclass(frozen=True)
class BulkItemResult:
    """Outcome of one record in a bulk operation."""

    record_id: int
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class BulkResult:
    """Per-item outcomes of a sequential bulk operation."""

    results: tuple[BulkItemResult, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> list[int]:
        return [r.record_id for r in self.results if r.ok]

    @property
    def failed(self) -> list[int]:
        return [r.record_id for r in self.results if not r.ok]
