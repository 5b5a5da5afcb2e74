"""Tests for ConsignmentService."""

import time
from datetime import datetime
from decimal import Decimal

import pytest

from shopledger.domain.entities import SettlementStatus
from shopledger.domain.errors import ConflictError, NotFoundError, ValidationError
from shopledger.domain.sale import SaleLine


@pytest.fixture
def sold_consignment(sale_service, consignment_product):
    """Sale of the consignment product and its settlement."""
    sale_id = sale_service.record_sale([SaleLine(consignment_product.id)], "card", "Sam")
    settlement = sale_service.consignments.list_settlements()[0]
    return sale_id, settlement


def test_record_payout_settles(consignment_service, sold_consignment):
    _, settlement = sold_consignment
    paid_at = datetime(2024, 4, 1, 9, 0)

    settled = consignment_service.record_payout(
        settlement.id, payout_amount=Decimal("580.00"), paid_at=paid_at, notes="BACS"
    )

    assert settled.status == SettlementStatus.SETTLED
    assert settled.payout_amount == Decimal("580.00")
    assert settled.paid_at == paid_at
    assert settled.notes == "BACS"


def test_payout_defaults_to_agreed_price(consignment_service, sold_consignment):
    _, settlement = sold_consignment

    settled = consignment_service.record_payout(settlement.id)

    assert settled.payout_amount == Decimal("600.00")
    assert settled.paid_at is not None


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_default_paid_at_is_local(consignment_service, sold_consignment, shop_in_tokyo):
    _, settlement = sold_consignment
    before = datetime.now().replace(microsecond=0)

    settled = consignment_service.record_payout(settlement.id)

    assert before <= settled.paid_at <= datetime.now()


def test_no_way_back_from_settled(consignment_service, sold_consignment):
    _, settlement = sold_consignment
    consignment_service.record_payout(settlement.id)

    with pytest.raises(ValidationError, match="already settled"):
        consignment_service.record_payout(settlement.id, payout_amount=Decimal("1"))


def test_payout_needs_an_amount_without_agreed_price(
    consignment_service, sale_service, temp_db, consignment_product, owned_product
):
    sale_id = sale_service.record_sale([SaleLine(owned_product.id)], "cash", "Sam")
    settlement_id = temp_db.create_settlement(product_id=consignment_product.id, sale_id=sale_id)

    with pytest.raises(ValidationError, match="no agreed price"):
        consignment_service.record_payout(settlement_id)

    settled = consignment_service.record_payout(settlement_id, payout_amount=Decimal("450"))
    assert settled.payout_amount == Decimal("450.00")


def test_negative_payout_rejected(consignment_service, sold_consignment):
    _, settlement = sold_consignment

    with pytest.raises(ValidationError):
        consignment_service.record_payout(settlement.id, payout_amount=Decimal("-1"))


def test_missing_settlement(consignment_service):
    with pytest.raises(NotFoundError):
        consignment_service.record_payout(123)


def test_duplicate_settlement_conflicts(consignment_service, sold_consignment, consignment_product):
    sale_id, _ = sold_consignment

    with pytest.raises(ConflictError):
        consignment_service.create_settlement(consignment_product.id, sale_id)


def test_create_settlement_requires_consignment_product(consignment_service, sale_service, owned_product):
    sale_id = sale_service.record_sale([SaleLine(owned_product.id)], "cash", "Sam")

    with pytest.raises(ValidationError, match="not a consignment"):
        consignment_service.create_settlement(owned_product.id, sale_id)


def test_list_by_status_and_supplier(consignment_service, sold_consignment, consignor):
    _, settlement = sold_consignment

    assert [s.id for s in consignment_service.list_settlements(SettlementStatus.UNSETTLED)] == [settlement.id]
    assert consignment_service.list_settlements(SettlementStatus.SETTLED) == []

    consignment_service.record_payout(settlement.id)

    assert consignment_service.list_settlements(SettlementStatus.UNSETTLED) == []
    assert [s.id for s in consignment_service.list_settlements(supplier_id=consignor.id)] == [settlement.id]
    assert consignment_service.list_settlements(supplier_id=consignor.id + 100) == []


def test_unsettled_total(consignment_service, sold_consignment):
    _, settlement = sold_consignment

    assert consignment_service.unsettled_total() == Decimal("600.00")

    consignment_service.record_payout(settlement.id)

    assert consignment_service.unsettled_total() == Decimal("0")
