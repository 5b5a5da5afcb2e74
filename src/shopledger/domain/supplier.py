"""Supplier domain service."""

import logging
from typing import Optional

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.entities import Supplier, SupplierType
from shopledger.domain.errors import NotFoundError, ValidationError, not_found

logger = logging.getLogger(__name__)


class SupplierService:
    """Service for managing suppliers and walk-in customers."""

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        self.db = db
        self.cache = cache if cache is not None else QueryCache()

    def create_supplier(
        self,
        name: str,
        supplier_type: SupplierType = SupplierType.REGISTERED,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> int:
        """Create a supplier.

        Raises:
            ValidationError: If the name is empty
        """
        name = name.strip()
        if not name:
            raise ValidationError("Supplier name is required")

        supplier_id = self.db.create_supplier(
            name=name, supplier_type=supplier_type, email=email, phone=phone
        )
        logger.info("Created %s supplier %s (%s)", SupplierType(supplier_type).value, supplier_id, name)
        self.cache.invalidate(tags.SUPPLIERS)
        return supplier_id

    def get_supplier(self, supplier_id: int) -> Optional[Supplier]:
        return self.db.get_supplier(supplier_id)

    def require_supplier(self, supplier_id: int) -> Supplier:
        """Get a supplier or raise NotFoundError."""
        supplier = self.db.get_supplier(supplier_id)
        if supplier is None:
            raise NotFoundError(not_found("Supplier", supplier_id))
        return supplier

    def list_suppliers(self, supplier_type: Optional[SupplierType] = None) -> list[Supplier]:
        return self.cache.read(
            tags.SUPPLIERS + (supplier_type,),
            lambda: self.db.list_suppliers(supplier_type=supplier_type),
        )
