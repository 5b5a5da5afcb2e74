"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the calculators and services
never depend on the storage schema.
"""

from decimal import Decimal
from typing import Optional

from shopledger.domain import entities as domain
from shopledger.database.models import (
    Supplier as ORMSupplier,
    Product as ORMProduct,
    ExpenseTemplate as ORMExpenseTemplate,
    Expense as ORMExpense,
    Sale as ORMSale,
    SaleItem as ORMSaleItem,
    PartExchange as ORMPartExchange,
    ConsignmentSettlement as ORMConsignmentSettlement,
)


def _dec(value) -> Decimal:
    """Money column that must not be None in the domain model."""
    return Decimal("0") if value is None else Decimal(value)


def _opt_dec(value) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


def supplier_to_domain(orm_supplier: ORMSupplier) -> domain.Supplier:
    """Convert SQLAlchemy Supplier model to domain Supplier entity."""
    return domain.Supplier(
        id=orm_supplier.id,
        name=orm_supplier.name,
        supplier_type=domain.SupplierType(orm_supplier.supplier_type),
        email=orm_supplier.email,
        phone=orm_supplier.phone,
        created_at=orm_supplier.created_at,
    )


def product_to_domain(orm_product: ORMProduct) -> domain.Product:
    """Convert SQLAlchemy Product model to domain Product entity."""
    return domain.Product(
        id=orm_product.id,
        name=orm_product.name,
        sku=orm_product.sku,
        barcode=orm_product.barcode,
        category=orm_product.category,
        unit_cost=_dec(orm_product.unit_cost),
        unit_price=_dec(orm_product.unit_price),
        tax_rate=_dec(orm_product.tax_rate),
        supplier_id=orm_product.supplier_id,
        is_trade_in=bool(orm_product.is_trade_in),
        is_consignment=bool(orm_product.is_consignment),
        consignment_supplier_id=orm_product.consignment_supplier_id,
        consignment_start_date=orm_product.consignment_start_date,
        consignment_end_date=orm_product.consignment_end_date,
        created_at=orm_product.created_at,
    )


def expense_template_to_domain(orm_template: ORMExpenseTemplate) -> domain.ExpenseTemplate:
    """Convert SQLAlchemy ExpenseTemplate model to domain ExpenseTemplate entity."""
    return domain.ExpenseTemplate(
        id=orm_template.id,
        description=orm_template.description,
        amount=_dec(orm_template.amount),
        category=orm_template.category,
        payment_method=orm_template.payment_method,
        supplier_id=orm_template.supplier_id,
        vat_rate=_opt_dec(orm_template.vat_rate),
        frequency=domain.Frequency(orm_template.frequency),
        anchor_date=orm_template.anchor_date,
        next_due_date=orm_template.next_due_date,
        is_active=bool(orm_template.is_active),
        notes=orm_template.notes,
        last_generated_at=orm_template.last_generated_at,
        created_at=orm_template.created_at,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        description=orm_expense.description,
        amount=_dec(orm_expense.amount),
        amount_ex_vat=_opt_dec(orm_expense.amount_ex_vat),
        vat_amount=_opt_dec(orm_expense.vat_amount),
        vat_rate=_opt_dec(orm_expense.vat_rate),
        amount_inc_vat=_opt_dec(orm_expense.amount_inc_vat),
        category=orm_expense.category,
        payment_method=orm_expense.payment_method,
        supplier_id=orm_expense.supplier_id,
        incurred_at=orm_expense.incurred_at,
        is_cogs=bool(orm_expense.is_cogs),
        notes=orm_expense.notes,
        template_id=orm_expense.template_id,
    )


def sale_to_domain(orm_sale: ORMSale) -> domain.Sale:
    """Convert SQLAlchemy Sale model to domain Sale entity."""
    return domain.Sale(
        id=orm_sale.id,
        sold_at=orm_sale.sold_at,
        payment_method=orm_sale.payment_method,
        staff_member=orm_sale.staff_member,
        subtotal=_dec(orm_sale.subtotal),
        discount_total=_dec(orm_sale.discount_total),
        tax_total=_dec(orm_sale.tax_total),
        total=_dec(orm_sale.total),
        part_exchange_total=_dec(orm_sale.part_exchange_total),
        net_total=_dec(orm_sale.net_total),
        notes=orm_sale.notes,
    )


def sale_item_to_domain(orm_item: ORMSaleItem) -> domain.SaleItem:
    """Convert SQLAlchemy SaleItem model to domain SaleItem entity."""
    return domain.SaleItem(
        id=orm_item.id,
        sale_id=orm_item.sale_id,
        product_id=orm_item.product_id,
        quantity=orm_item.quantity,
        unit_price=_dec(orm_item.unit_price),
        unit_cost=_dec(orm_item.unit_cost),
        discount=_dec(orm_item.discount),
        tax_rate=_dec(orm_item.tax_rate),
    )


def part_exchange_to_domain(orm_px: ORMPartExchange) -> domain.PartExchange:
    """Convert SQLAlchemy PartExchange model to domain PartExchange entity."""
    return domain.PartExchange(
        id=orm_px.id,
        sale_id=orm_px.sale_id,
        product_id=orm_px.product_id,
        allowance=_dec(orm_px.allowance),
        customer_supplier_id=orm_px.customer_supplier_id,
        serial=orm_px.serial,
        description=orm_px.description,
    )


def settlement_to_domain(
    orm_settlement: ORMConsignmentSettlement,
) -> domain.ConsignmentSettlement:
    """Convert SQLAlchemy ConsignmentSettlement model to domain entity."""
    return domain.ConsignmentSettlement(
        id=orm_settlement.id,
        product_id=orm_settlement.product_id,
        sale_id=orm_settlement.sale_id,
        supplier_id=orm_settlement.supplier_id,
        agreed_price=_opt_dec(orm_settlement.agreed_price),
        payout_amount=_opt_dec(orm_settlement.payout_amount),
        paid_at=orm_settlement.paid_at,
        notes=orm_settlement.notes,
    )
