"""Sale (checkout) domain service."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.checkout import (
    CartLine,
    DiscountKind,
    allocate_discount,
    calculate_cart_totals,
    can_complete_sale,
    net_total,
    requires_owner_approval,
    rounded_totals,
)
from shopledger.domain.consignment import ConsignmentService
from shopledger.domain.entities import Product, Sale, SaleItem
from shopledger.domain.errors import NotFoundError, ValidationError, not_found
from shopledger.domain.product import ProductService
from shopledger.domain.vat import round2, to_decimal
from shopledger.utils.choice_parser import parse_payment_method

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
SALE_TAGS = (tags.SALES, tags.SETTLEMENTS, tags.REPORTS, tags.DASHBOARD)


@dataclass(frozen=True)
class SaleLine:
    """Product and quantity rung up at the till.

    unit_price overrides the product's price for this sale only.
    """

    product_id: int
    quantity: int = 1
    unit_price: Optional[Decimal] = None


@dataclass(frozen=True)
class TradeIn:
    """Item a customer hands over against the sale.

    Without a product_id the item is taken into stock as a new trade-in
    product costed at its allowance.
    """

    allowance: Decimal
    description: Optional[str] = None
    serial: Optional[str] = None
    customer_supplier_id: Optional[int] = None
    product_id: Optional[int] = None


class SaleService:
    """Service for recording completed sales."""

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        """Initialize sale service.

        Args:
            db: Database instance
            cache: Shared query cache, invalidated after every mutation
        """
        self.db = db
        self.cache = cache if cache is not None else QueryCache()
        self.products = ProductService(db, self.cache)
        self.consignments = ConsignmentService(db, self.cache)

    def _cart_lines(self, lines: Sequence[SaleLine]) -> tuple[list[CartLine], dict[int, Product]]:
        products: dict[int, Product] = {}
        cart = []
        for line in lines:
            if line.quantity <= 0:
                raise ValidationError(f"Quantity must be at least 1, got {line.quantity}")
            product = products.get(line.product_id) or self.products.require_product(
                line.product_id
            )
            products[product.id] = product
            price = product.unit_price if line.unit_price is None else to_decimal(line.unit_price)
            if price < 0:
                raise ValidationError("Unit price must not be negative")
            cart.append(
                CartLine(
                    product_id=product.id,
                    quantity=line.quantity,
                    unit_price=price,
                    tax_rate=product.tax_rate,
                )
            )
        return cart, products

    def _validate_trade_ins(self, trade_ins: Sequence[TradeIn]) -> None:
        for px in trade_ins:
            if to_decimal(px.allowance) < 0:
                raise ValidationError("Part-exchange allowance must not be negative")
            if px.product_id is not None:
                self.products.require_product(px.product_id)
            if px.customer_supplier_id is not None and self.db.get_supplier(
                px.customer_supplier_id
            ) is None:
                raise NotFoundError(not_found("Supplier", px.customer_supplier_id))

    def _intake_product(self, px: TradeIn) -> dict:
        return {
            "name": px.description or f"Part exchange {px.serial or ''}".strip(),
            "unit_cost": to_decimal(px.allowance),
            "supplier_id": px.customer_supplier_id,
            "is_trade_in": True,
        }

    def _settlements(self, cart: Sequence[CartLine], products: dict[int, Product]) -> list[dict]:
        settlements = []
        for product_id in dict.fromkeys(line.product_id for line in cart):
            product = products[product_id]
            if not product.is_consignment:
                continue
            if product.consignment_supplier_id is None:
                logger.warning("Consignment product %s sold without a supplier", product_id)
            settlements.append(
                {
                    "product_id": product_id,
                    "supplier_id": product.consignment_supplier_id,
                    "agreed_price": product.unit_cost,
                }
            )
        return settlements

    def record_sale(
        self,
        lines: Sequence[SaleLine],
        payment_method: Optional[str],
        staff_member: Optional[str],
        trade_ins: Sequence[TradeIn] = (),
        discount: Decimal = ZERO,
        discount_kind: DiscountKind = DiscountKind.PERCENTAGE,
        owner_approved: bool = False,
        sold_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Complete a checkout.

        Prices and cost snapshots are taken from the products at the time of
        sale. A cart discount is spread across lines in proportion to their
        subtotal. Each consignment line gets an unsettled settlement.

        Args:
            lines: Items sold
            payment_method: Payment method or checkout label
            staff_member: Staff member completing the sale
            trade_ins: Part-exchanges taken against the sale
            discount: Cart discount, a percentage or a fixed amount
            discount_kind: How the discount is expressed
            owner_approved: Owner has approved paying money out to the customer
            sold_at: Sale time, defaults to now
            notes: Optional notes

        Returns:
            Sale ID

        Raises:
            ValidationError: If the sale cannot be completed
            NotFoundError: If a product or supplier does not exist
        """
        cart, products = self._cart_lines(lines)
        self._validate_trade_ins(trade_ins)
        cart = allocate_discount(cart, to_decimal(discount), DiscountKind(discount_kind))
        cart = [
            CartLine(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                tax_rate=line.tax_rate,
                discount=round2(line.discount),
            )
            for line in cart
        ]
        totals = rounded_totals(calculate_cart_totals(cart))

        allowances = [to_decimal(px.allowance) for px in trade_ins]
        net = net_total(totals.total, allowances)

        method = parse_payment_method(payment_method) if payment_method else None
        if not can_complete_sale(
            item_count=len(cart),
            part_exchange_count=len(trade_ins),
            payment_method=method.value if method else None,
            staff_member=staff_member,
            net=net,
            owner_approved=owner_approved,
        ):
            if not cart and not trade_ins:
                raise ValidationError("A sale needs at least one item or part-exchange")
            if method is None:
                raise ValidationError("Payment method is required")
            if not staff_member:
                raise ValidationError("Staff member is required")
            raise ValidationError(
                f"Net total {net} is owed to the customer and needs owner approval"
            )
        if requires_owner_approval(net):
            logger.info("Owner approved negative net total %s", net)

        part_exchanges = []
        for px in trade_ins:
            record = {
                "product_id": px.product_id,
                "allowance": to_decimal(px.allowance),
                "customer_supplier_id": px.customer_supplier_id,
                "serial": px.serial,
                "description": px.description,
            }
            if px.product_id is None:
                record["intake_product"] = self._intake_product(px)
            part_exchanges.append(record)

        header = {
            "sold_at": sold_at or datetime.now(),
            "payment_method": method.value,
            "staff_member": staff_member,
            "subtotal": totals.subtotal,
            "discount_total": totals.discount_total,
            "tax_total": totals.tax_total,
            "total": totals.total,
            "part_exchange_total": sum(allowances, ZERO),
            "net_total": net,
            "notes": notes,
        }
        items = [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "unit_cost": products[line.product_id].unit_cost,
                "discount": line.discount,
                "tax_rate": line.tax_rate,
            }
            for line in cart
        ]
        settlements = self._settlements(cart, products)
        sale_id = self.db.create_sale(header, items, part_exchanges, settlements)
        logger.info(
            "Recorded sale %s: %d item(s), %d part-exchange(s), %d settlement(s), net %s",
            sale_id,
            len(items),
            len(part_exchanges),
            len(settlements),
            net,
        )

        self.cache.invalidate(*SALE_TAGS, tags.PRODUCTS)
        return sale_id

    def get_sale(self, sale_id: int) -> Optional[Sale]:
        return self.db.get_sale(sale_id)

    def require_sale(self, sale_id: int) -> Sale:
        """Get a sale or raise NotFoundError."""
        sale = self.db.get_sale(sale_id)
        if sale is None:
            raise NotFoundError(not_found("Sale", sale_id))
        return sale

    def list_sale_items(self, sale_id: int) -> list[SaleItem]:
        self.require_sale(sale_id)
        return self.db.list_sale_items(sale_id)

    def list_sales(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Sale]:
        """List sales in a date range, oldest first."""
        return self.cache.read(
            tags.SALES + ("list", start_date, end_date),
            lambda: self.db.list_sales(start_date=start_date, end_date=end_date),
        )
