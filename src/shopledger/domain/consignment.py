"""Consignment settlement domain service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.entities import ConsignmentSettlement, SettlementStatus
from shopledger.domain.errors import (
    NotFoundError,
    ValidationError,
    not_found,
    settlement_already_paid,
)
from shopledger.domain.vat import to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
SETTLEMENT_TAGS = (tags.SETTLEMENTS, tags.REPORTS, tags.DASHBOARD)


class ConsignmentService:
    """Service for consignment settlements.

    A settlement records what the shop owes a consignment supplier for one
    sold product. It starts unsettled and becomes settled once the payout is
    recorded. There is no way back.
    """

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        self.db = db
        self.cache = cache if cache is not None else QueryCache()

    def create_settlement(
        self,
        product_id: int,
        sale_id: int,
        supplier_id: Optional[int] = None,
        agreed_price: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an unsettled settlement for a sold consignment product.

        Args:
            product_id: Consignment product that was sold
            sale_id: Sale it was sold in
            supplier_id: Supplier owed, defaults to the product's consignment supplier
            agreed_price: Per-unit price agreed with the supplier
            notes: Optional notes

        Returns:
            Settlement ID

        Raises:
            NotFoundError: If the product or sale does not exist
            ValidationError: If the product is not on consignment or the price is negative
            ConflictError: If the product already has a settlement for this sale
        """
        product = self.db.get_product(product_id)
        if product is None:
            raise NotFoundError(not_found("Product", product_id))
        if not product.is_consignment:
            raise ValidationError(f"Product {product_id} is not a consignment item")
        if self.db.get_sale(sale_id) is None:
            raise NotFoundError(not_found("Sale", sale_id))
        if agreed_price is not None:
            agreed_price = to_decimal(agreed_price)
            if agreed_price < 0:
                raise ValidationError("Agreed price must not be negative")

        supplier_id = supplier_id or product.consignment_supplier_id
        if supplier_id is None:
            logger.warning(
                "Settlement for product %s in sale %s has no supplier", product_id, sale_id
            )

        settlement_id = self.db.create_settlement(
            product_id=product_id,
            sale_id=sale_id,
            supplier_id=supplier_id,
            agreed_price=agreed_price,
            notes=notes,
        )
        logger.info(
            "Created consignment settlement %s for product %s in sale %s",
            settlement_id,
            product_id,
            sale_id,
        )
        self.cache.invalidate(*SETTLEMENT_TAGS)
        return settlement_id

    def get_settlement(self, settlement_id: int) -> Optional[ConsignmentSettlement]:
        return self.db.get_settlement(settlement_id)

    def require_settlement(self, settlement_id: int) -> ConsignmentSettlement:
        """Get a settlement or raise NotFoundError."""
        settlement = self.db.get_settlement(settlement_id)
        if settlement is None:
            raise NotFoundError(not_found("Consignment settlement", settlement_id))
        return settlement

    def record_payout(
        self,
        settlement_id: int,
        payout_amount: Optional[Decimal] = None,
        paid_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> ConsignmentSettlement:
        """Record the payout to the supplier, moving the settlement to SETTLED.

        Args:
            settlement_id: Settlement to pay
            payout_amount: Per-unit amount paid, defaults to the agreed price
            paid_at: When it was paid, defaults to now
            notes: Optional notes, replacing any existing ones

        Returns:
            The settled settlement

        Raises:
            NotFoundError: If the settlement does not exist
            ValidationError: If it is already settled or no amount is known
        """
        settlement = self.require_settlement(settlement_id)
        if settlement.status == SettlementStatus.SETTLED:
            raise ValidationError(settlement_already_paid(settlement_id))

        amount = payout_amount if payout_amount is not None else settlement.agreed_price
        if amount is None:
            raise ValidationError(
                f"Consignment settlement {settlement_id} has no agreed price; give a payout amount"
            )
        amount = to_decimal(amount)
        if amount < 0:
            raise ValidationError("Payout amount must not be negative")

        fields = {"payout_amount": amount, "paid_at": paid_at or datetime.now()}
        if notes is not None:
            fields["notes"] = notes
        self.db.update_settlement(settlement_id, **fields)
        logger.info("Settled consignment settlement %s for %s", settlement_id, amount)
        self.cache.invalidate(*SETTLEMENT_TAGS)
        return self.require_settlement(settlement_id)

    def list_settlements(
        self,
        status: Optional[SettlementStatus] = None,
        supplier_id: Optional[int] = None,
    ) -> list[ConsignmentSettlement]:
        """List settlements, newest first."""
        return self.cache.read(
            tags.SETTLEMENTS + ("list", status, supplier_id),
            lambda: self.db.list_settlements(status=status, supplier_id=supplier_id),
        )

    def unsettled_total(self, supplier_id: Optional[int] = None) -> Decimal:
        """Per-unit amount still owed across unsettled settlements.

        Uses the payout amount when one was agreed in advance, otherwise the
        agreed price. Quantities live on the sale lines; see ReportService
        for the quantity-weighted figure.
        """
        owed = ZERO
        for settlement in self.list_settlements(SettlementStatus.UNSETTLED, supplier_id):
            amount = settlement.payout_amount
            if amount is None:
                amount = settlement.agreed_price
            owed += amount or ZERO
        return owed
