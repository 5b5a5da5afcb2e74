"""Profit and loss reporting service."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.cost_basis import (
    ResolvedLine,
    aggregate,
    resolve_sold_line,
    settled_consignment_gross_profit,
    unsettled_consignment_total,
)
from shopledger.domain.entities import (
    ConsignmentSettlement,
    CostBasisKind,
    SettlementStatus,
    SummaryGroupBy,
)
from shopledger.domain.errors import ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class DailyPnl:
    """Revenue and profit for one trading day."""

    day: date
    revenue: Decimal
    cogs: Decimal
    gross_profit: Decimal


@dataclass(frozen=True)
class PxConsignmentSummary:
    """Part-exchange and consignment figures for a period."""

    px_items: int
    px_allowances: Decimal
    px_gross_profit: Decimal
    consignment_items: int
    consignment_payouts: Decimal
    consignment_gross_profit: Decimal
    unsettled_amount: Decimal
    unsettled_settlements: tuple[ConsignmentSettlement, ...] = ()


@dataclass(frozen=True)
class ConsolidatedPnl:
    """Trading result for a period after operating expenses."""

    revenue: Decimal
    cogs: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    net_profit: Decimal
    expenses_by_category: dict[str, Decimal] = field(default_factory=dict)
    daily: tuple[DailyPnl, ...] = ()
    unsettled_amount: Decimal = ZERO
    transaction_count: int = 0
    items_sold: int = 0


def parse_group_by(value: str | SummaryGroupBy) -> SummaryGroupBy:
    """Parse a grouping mode.

    Raises:
        ValidationError: If the value is not product, category or supplier
    """
    if isinstance(value, SummaryGroupBy):
        return value
    try:
        return SummaryGroupBy(value.strip().lower())
    except ValueError:
        allowed = ", ".join(g.value for g in SummaryGroupBy)
        raise ValidationError(f"Unknown grouping '{value}'. Supported: {allowed}")


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValidationError(f"End date {end_date} is before start date {start_date}")


class ReportService:
    """Service for P&L reports.

    Reports are rebuilt from sold lines on every read: the cost basis of a
    line can change after the sale when a consignment settlement is paid.
    """

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        """Initialize report service.

        Args:
            db: Database instance
            cache: Shared query cache
        """
        self.db = db
        self.cache = cache if cache is not None else QueryCache()

    def pnl_lines(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[ResolvedLine]:
        """Resolve every line sold in a date range.

        Args:
            start_date: First day to include
            end_date: Last day to include

        Returns:
            Resolved lines, oldest sale first

        Raises:
            ValidationError: If the range is reversed
        """
        _check_range(start_date, end_date)
        return self.cache.read(
            tags.REPORTS + ("lines", start_date, end_date),
            lambda: [
                ResolvedLine(line=line, resolution=resolve_sold_line(line))
                for line in self.db.list_sold_lines(start_date=start_date, end_date=end_date)
            ],
        )

    def summarise(
        self,
        group_by: str | SummaryGroupBy = SummaryGroupBy.PRODUCT,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[Optional[object], dict[str, Decimal | int]]:
        """Sum revenue, COGS and gross profit per product, category or supplier.

        Returns:
            Mapping of group key to its totals. Unsettled consignment payouts
            are under "unsettled_amount" and kept out of "settled_gross_profit".
        """
        mode = parse_group_by(group_by)
        return aggregate(self.pnl_lines(start_date, end_date), mode)

    def px_consignment_summary(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> PxConsignmentSummary:
        """Summarise trade-in and consignment lines for a period.

        Consignment gross profit counts only lines whose settlement is paid.
        """
        resolved = self.pnl_lines(start_date, end_date)
        px = [r.resolution for r in resolved if r.resolution.cost_basis_kind == CostBasisKind.TRADE_IN]
        consignment = [
            r.resolution
            for r in resolved
            if r.resolution.cost_basis_kind == CostBasisKind.CONSIGNMENT
        ]
        sale_ids = {r.line.sale_item.sale_id for r in resolved}
        awaiting = [
            s
            for s in self.db.list_settlements(status=SettlementStatus.UNSETTLED)
            if s.sale_id in sale_ids
        ]

        return PxConsignmentSummary(
            px_items=len(px),
            px_allowances=sum((r.cogs for r in px), ZERO),
            px_gross_profit=sum((r.gross_profit for r in px), ZERO),
            consignment_items=len(consignment),
            consignment_payouts=sum((r.cogs for r in consignment), ZERO),
            consignment_gross_profit=settled_consignment_gross_profit(consignment),
            unsettled_amount=unsettled_consignment_total(consignment),
            unsettled_settlements=tuple(awaiting),
        )

    def consolidated_pnl(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> ConsolidatedPnl:
        """Build the consolidated P&L for a period.

        Operating expenses are the period's expenses that are not stock
        purchases, at their VAT-inclusive amount where one was recorded.

        Raises:
            ValidationError: If the range is reversed
        """
        _check_range(start_date, end_date)
        key = tags.REPORTS + ("consolidated", start_date, end_date)
        return self.cache.read(key, lambda: self._build_consolidated(start_date, end_date))

    def _build_consolidated(
        self, start_date: Optional[date], end_date: Optional[date]
    ) -> ConsolidatedPnl:
        resolved = self.pnl_lines(start_date, end_date)

        by_day: dict[date, list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
        for r in resolved:
            totals = by_day[r.line.sold_at.date()]
            totals[0] += r.resolution.revenue
            totals[1] += r.resolution.cogs
        daily = tuple(
            DailyPnl(day=day, revenue=rev, cogs=cogs, gross_profit=rev - cogs)
            for day, (rev, cogs) in sorted(by_day.items())
        )

        revenue = sum((d.revenue for d in daily), ZERO)
        cogs = sum((d.cogs for d in daily), ZERO)
        gross_profit = revenue - cogs

        expenses_by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for expense in self.db.list_expenses(
            start_date=start_date, end_date=end_date, is_cogs=False
        ):
            expenses_by_category[expense.category] += expense.reporting_amount
        operating_expenses = sum(expenses_by_category.values(), ZERO)

        sales = self.db.list_sales(start_date=start_date, end_date=end_date)
        logger.debug(
            "Consolidated P&L %s..%s: %d sale(s), %d line(s)",
            start_date,
            end_date,
            len(sales),
            len(resolved),
        )

        return ConsolidatedPnl(
            revenue=revenue,
            cogs=cogs,
            gross_profit=gross_profit,
            operating_expenses=operating_expenses,
            net_profit=gross_profit - operating_expenses,
            expenses_by_category=dict(expenses_by_category),
            daily=daily,
            unsettled_amount=unsettled_consignment_total(r.resolution for r in resolved),
            transaction_count=len(sales),
            items_sold=sum(r.line.sale_item.quantity for r in resolved),
        )
