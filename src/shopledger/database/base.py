"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from shopledger.domain.entities import (
    ConsignmentSettlement,
    Expense,
    ExpenseTemplate,
    PartExchange,
    Product,
    Sale,
    SaleItem,
    SettlementStatus,
    SoldLine,
    Supplier,
    SupplierType,
)


class Database(ABC):
    """Abstract database interface for shopledger.

    Every write commits on its own; there is no transaction spanning calls.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Supplier operations
    @abstractmethod
    def create_supplier(
        self,
        name: str,
        supplier_type: SupplierType = SupplierType.REGISTERED,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> int:
        """Create a supplier. Returns supplier ID."""
        pass

    @abstractmethod
    def get_supplier(self, supplier_id: int) -> Optional[Supplier]:
        """Get supplier by ID."""
        pass

    @abstractmethod
    def list_suppliers(self, supplier_type: Optional[SupplierType] = None) -> list[Supplier]:
        """List suppliers, optionally filtered by type."""
        pass

    # Product operations
    @abstractmethod
    def create_product(self, name: str, **fields: Any) -> int:
        """Create a product. Returns product ID."""
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    def list_products(self, is_consignment: Optional[bool] = None) -> list[Product]:
        """List products, optionally only consignment or only non-consignment stock."""
        pass

    # Expense template operations
    @abstractmethod
    def create_expense_template(
        self,
        description: str,
        amount: Decimal,
        category: str,
        payment_method: str,
        frequency: str,
        anchor_date: date,
        next_due_date: date,
        supplier_id: Optional[int] = None,
        vat_rate: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an expense template. Returns template ID."""
        pass

    @abstractmethod
    def get_expense_template(self, template_id: int) -> Optional[ExpenseTemplate]:
        """Get expense template by ID."""
        pass

    @abstractmethod
    def list_expense_templates(
        self, active_only: bool = True, due_on_or_before: Optional[date] = None
    ) -> list[ExpenseTemplate]:
        """List templates ordered by next due date."""
        pass

    @abstractmethod
    def update_expense_template(self, template_id: int, **fields: Any) -> None:
        """Set the given template columns."""
        pass

    @abstractmethod
    def delete_expense_template(self, template_id: int) -> int:
        """Delete a template and detach its expenses. Returns detached count."""
        pass

    # Expense operations
    @abstractmethod
    def create_expense(
        self,
        description: str,
        amount: Decimal,
        category: str,
        payment_method: str,
        incurred_at: datetime,
        amount_ex_vat: Optional[Decimal] = None,
        vat_amount: Optional[Decimal] = None,
        vat_rate: Optional[Decimal] = None,
        amount_inc_vat: Optional[Decimal] = None,
        supplier_id: Optional[int] = None,
        is_cogs: bool = False,
        notes: Optional[str] = None,
        template_id: Optional[int] = None,
    ) -> int:
        """Create an expense. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def update_expense(self, expense_id: int, **fields: Any) -> None:
        """Set the given expense columns, including setting them to None."""
        pass

    @abstractmethod
    def delete_expense(self, expense_id: int) -> None:
        """Delete an expense."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        template_id: Optional[int] = None,
        is_cogs: Optional[bool] = None,
    ) -> list[Expense]:
        """List expenses with optional filters, newest first."""
        pass

    # Sale operations
    @abstractmethod
    def create_sale(
        self,
        header: dict[str, Any],
        items: list[dict[str, Any]],
        part_exchanges: list[dict[str, Any]],
        settlements: Optional[list[dict[str, Any]]] = None,
    ) -> int:
        """Create a sale with everything it writes, in one transaction.

        A part-exchange may carry an "intake_product" dict of product fields
        instead of a product_id; that product is created with the sale.
        Settlements are created against the new sale. Nothing is stored if
        any row is rejected.

        Returns:
            Sale ID
        """
        pass

    @abstractmethod
    def get_sale(self, sale_id: int) -> Optional[Sale]:
        """Get sale by ID."""
        pass

    @abstractmethod
    def list_sales(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Sale]:
        """List sales in a date range, oldest first."""
        pass

    @abstractmethod
    def list_sale_items(self, sale_id: int) -> list[SaleItem]:
        """List the items of a sale."""
        pass

    @abstractmethod
    def list_part_exchanges(self, sale_id: Optional[int] = None) -> list[PartExchange]:
        """List part-exchanges, optionally for one sale."""
        pass

    @abstractmethod
    def list_sold_lines(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[SoldLine]:
        """List sold lines joined with product, part-exchanges and settlement."""
        pass

    # Consignment settlement operations
    @abstractmethod
    def create_settlement(
        self,
        product_id: int,
        sale_id: int,
        supplier_id: Optional[int] = None,
        agreed_price: Optional[Decimal] = None,
        payout_amount: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a consignment settlement. Returns settlement ID."""
        pass

    @abstractmethod
    def get_settlement(self, settlement_id: int) -> Optional[ConsignmentSettlement]:
        """Get settlement by ID."""
        pass

    @abstractmethod
    def update_settlement(self, settlement_id: int, **fields: Any) -> None:
        """Set the given settlement columns."""
        pass

    @abstractmethod
    def list_settlements(
        self,
        status: Optional[SettlementStatus] = None,
        supplier_id: Optional[int] = None,
    ) -> list[ConsignmentSettlement]:
        """List settlements, newest first."""
        pass
