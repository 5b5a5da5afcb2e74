"""Product domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.entities import Product
from shopledger.domain.errors import NotFoundError, ValidationError, not_found

logger = logging.getLogger(__name__)


def validate_consignment_window(start: Optional[date], end: Optional[date]) -> None:
    """Reject a consignment window that ends before it starts."""
    if start is not None and end is not None and end < start:
        raise ValidationError(
            f"Consignment end date {end} is before start date {start}"
        )


class ProductService:
    """Service for managing inventory products."""

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        self.db = db
        self.cache = cache if cache is not None else QueryCache()

    def create_product(
        self,
        name: str,
        unit_cost: Decimal = Decimal("0"),
        unit_price: Decimal = Decimal("0"),
        tax_rate: Decimal = Decimal("0"),
        sku: Optional[str] = None,
        barcode: Optional[str] = None,
        category: Optional[str] = None,
        supplier_id: Optional[int] = None,
        is_trade_in: bool = False,
        is_consignment: bool = False,
        consignment_supplier_id: Optional[int] = None,
        consignment_start_date: Optional[date] = None,
        consignment_end_date: Optional[date] = None,
    ) -> int:
        """Create a product.

        Args:
            name: Product name
            unit_cost: Cost basis for owned stock
            unit_price: Selling price
            tax_rate: Sales tax rate percentage
            sku: Optional unique SKU
            barcode: Optional unique barcode
            category: Optional product category
            supplier_id: Supplier the stock was bought from
            is_trade_in: Product came in through a part-exchange
            is_consignment: Product is held on behalf of a supplier
            consignment_supplier_id: Supplier the consignment belongs to
            consignment_start_date: Start of the consignment agreement
            consignment_end_date: End of the consignment agreement

        Returns:
            Product ID

        Raises:
            ValidationError: On negative money values or a reversed consignment window
            NotFoundError: If a referenced supplier does not exist
            ConflictError: If the SKU or barcode is already used
        """
        if not name.strip():
            raise ValidationError("Product name is required")
        for label, value in (("Unit cost", unit_cost), ("Unit price", unit_price), ("Tax rate", tax_rate)):
            if value < 0:
                raise ValidationError(f"{label} must not be negative")
        validate_consignment_window(consignment_start_date, consignment_end_date)

        for supplier in (supplier_id, consignment_supplier_id):
            if supplier is not None and self.db.get_supplier(supplier) is None:
                raise NotFoundError(not_found("Supplier", supplier))

        if is_consignment and consignment_supplier_id is None:
            logger.warning("Consignment product '%s' created without a consignment supplier", name)

        product_id = self.db.create_product(
            name=name.strip(),
            unit_cost=unit_cost,
            unit_price=unit_price,
            tax_rate=tax_rate,
            sku=sku or None,
            barcode=barcode or None,
            category=category,
            supplier_id=supplier_id,
            is_trade_in=is_trade_in,
            is_consignment=is_consignment,
            consignment_supplier_id=consignment_supplier_id,
            consignment_start_date=consignment_start_date,
            consignment_end_date=consignment_end_date,
        )
        logger.info("Created product %s (%s)", product_id, name)
        self.cache.invalidate(tags.PRODUCTS)
        return product_id

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get_product(product_id)

    def require_product(self, product_id: int) -> Product:
        """Get a product or raise NotFoundError."""
        product = self.db.get_product(product_id)
        if product is None:
            raise NotFoundError(not_found("Product", product_id))
        return product

    def list_products(self, is_consignment: Optional[bool] = None) -> list[Product]:
        return self.cache.read(
            tags.PRODUCTS + (is_consignment,),
            lambda: self.db.list_products(is_consignment=is_consignment),
        )
