"""Tests for ReportService."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from shopledger.domain.entities import CostBasisKind, SummaryGroupBy
from shopledger.domain.errors import ValidationError
from shopledger.domain.sale import SaleLine, TradeIn

MARCH = (date(2024, 3, 1), date(2024, 3, 31))


@pytest.fixture
def trading_month(
    sale_service,
    expense_service,
    product_service,
    owned_product,
    consignment_product,
    walk_in_customer,
):
    """Three sales over two days plus the month's expenses."""
    traded_ring = product_service.create_product(
        name="Traded ring", unit_price=Decimal("300.00"), category="rings", is_trade_in=True
    )
    sale_service.record_sale(
        [SaleLine(owned_product.id)], "card", "Sam", sold_at=datetime(2024, 3, 15, 10, 0)
    )
    sale_service.record_sale(
        [SaleLine(consignment_product.id)], "card", "Sam", sold_at=datetime(2024, 3, 15, 14, 0)
    )
    sale_service.record_sale(
        [SaleLine(traded_ring)],
        "cash",
        "Alex",
        trade_ins=[
            TradeIn(
                allowance=Decimal("120.00"),
                description="Broken chain",
                customer_supplier_id=walk_in_customer.id,
            )
        ],
        sold_at=datetime(2024, 3, 16, 12, 0),
    )

    expense_service.create_expense("Shop rent", Decimal("1000"), "rent", "transfer", date(2024, 3, 1))
    expense_service.create_expense(
        "Card fees", Decimal("120"), "fees", "card", date(2024, 3, 20), include_vat=True
    )
    expense_service.create_expense(
        "Stock purchase", Decimal("500"), "other", "transfer", date(2024, 3, 5), is_cogs=True
    )
    # Outside the period
    expense_service.create_expense("April rent", Decimal("1000"), "rent", "transfer", date(2024, 4, 1))


def test_pnl_lines_resolve_each_cost_basis(report_service, trading_month):
    lines = report_service.pnl_lines(*MARCH)

    kinds = [r.resolution.cost_basis_kind for r in lines]
    assert kinds == [CostBasisKind.OWNED, CostBasisKind.CONSIGNMENT, CostBasisKind.TRADE_IN]
    assert [r.resolution.cogs for r in lines] == [
        Decimal("100.00"),
        Decimal("600.00"),
        Decimal("120.00"),
    ]


def test_consolidated_pnl(report_service, trading_month):
    report = report_service.consolidated_pnl(*MARCH)

    assert report.revenue == Decimal("1550.00")
    assert report.cogs == Decimal("820.00")
    assert report.gross_profit == Decimal("730.00")
    assert report.expenses_by_category == {"rent": Decimal("1000.00"), "fees": Decimal("120.00")}
    assert report.operating_expenses == Decimal("1120.00")
    assert report.net_profit == Decimal("-390.00")
    assert report.unsettled_amount == Decimal("600.00")
    assert report.transaction_count == 3
    assert report.items_sold == 3

    assert [d.day for d in report.daily] == [date(2024, 3, 15), date(2024, 3, 16)]
    assert report.daily[0].revenue == Decimal("1250.00")
    assert report.daily[0].gross_profit == Decimal("550.00")
    assert report.daily[1].gross_profit == Decimal("180.00")


def test_px_consignment_summary_before_payout(report_service, trading_month):
    summary = report_service.px_consignment_summary(*MARCH)

    assert summary.px_items == 1
    assert summary.px_allowances == Decimal("120.00")
    assert summary.px_gross_profit == Decimal("180.00")
    assert summary.consignment_items == 1
    assert summary.consignment_payouts == Decimal("600.00")
    assert summary.consignment_gross_profit == Decimal("0")
    assert summary.unsettled_amount == Decimal("600.00")
    assert len(summary.unsettled_settlements) == 1


def test_payout_moves_consignment_into_settled_profit(
    report_service, consignment_service, trading_month
):
    report_service.px_consignment_summary(*MARCH)
    settlement = consignment_service.list_settlements()[0]

    consignment_service.record_payout(settlement.id, payout_amount=Decimal("550.00"))

    summary = report_service.px_consignment_summary(*MARCH)
    assert summary.consignment_payouts == Decimal("550.00")
    assert summary.consignment_gross_profit == Decimal("450.00")
    assert summary.unsettled_amount == Decimal("0")
    assert summary.unsettled_settlements == ()


def test_summarise_by_supplier(
    report_service, trading_month, sample_supplier, consignor, walk_in_customer
):
    groups = report_service.summarise("supplier", *MARCH)

    assert set(groups) == {sample_supplier.id, consignor.id, walk_in_customer.id}
    assert groups[consignor.id]["unsettled_amount"] == Decimal("600.00")
    assert groups[consignor.id]["settled_gross_profit"] == Decimal("0")
    assert groups[walk_in_customer.id]["gross_profit"] == Decimal("180.00")


def test_summarise_by_category(report_service, trading_month):
    groups = report_service.summarise(SummaryGroupBy.CATEGORY, *MARCH)

    assert groups["watches"]["revenue"] == Decimal("1000.00")
    assert groups["rings"]["quantity"] == 1
    assert groups["bracelets"]["settled_gross_profit"] == Decimal("150.00")


def test_period_filter(report_service, trading_month):
    report = report_service.consolidated_pnl(date(2024, 3, 16), date(2024, 3, 16))

    assert report.revenue == Decimal("300.00")
    assert report.transaction_count == 1
    assert report.operating_expenses == Decimal("0")


def test_reversed_range_rejected(report_service):
    with pytest.raises(ValidationError):
        report_service.consolidated_pnl(date(2024, 3, 31), date(2024, 3, 1))


def test_unknown_grouping(report_service):
    with pytest.raises(ValidationError):
        report_service.summarise("staff")


def test_empty_period(report_service):
    report = report_service.consolidated_pnl(*MARCH)

    assert report.revenue == Decimal("0")
    assert report.net_profit == Decimal("0")
    assert report.daily == ()
