"""Cost-basis resolution and gross-profit attribution for sold lines.

A sold line takes its COGS from exactly one of three sources. The rules are
kept in an ordered list so the precedence is explicit: the first rule whose
predicate matches handles the line.

1. Trade-in: the product came from a part-exchange on this sale. COGS is the
   sum of every allowance linked to the sale.
2. Consignment: the product is held for a supplier. COGS is the settlement
   payout (or agreed price) once a settlement exists, otherwise the sale-time
   unit cost snapshot.
3. Owned: COGS is the sale-time unit cost snapshot.

Inconsistent data never raises here; it degrades to zero or to the owned
cost basis so reports always have a number to show.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from shopledger.domain.entities import (
    ConsignmentSettlement,
    CostBasisKind,
    PartExchange,
    Product,
    SaleItem,
    SoldLine,
    SummaryGroupBy,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class LineResolution:
    """Report-time revenue, COGS and profit for one sold line."""

    revenue: Decimal
    cogs: Decimal
    gross_profit: Decimal
    cost_basis_kind: CostBasisKind
    settled: bool
    supplier_id: Optional[int]


@dataclass(frozen=True)
class LineContext:
    """Inputs shared by every rule."""

    sale_item: SaleItem
    product: Product
    part_exchanges: Sequence[PartExchange]
    settlement: Optional[ConsignmentSettlement]


Predicate = Callable[[LineContext], bool]
Handler = Callable[[LineContext, Decimal], LineResolution]


def line_revenue(sale_item: SaleItem) -> Decimal:
    """Revenue for a line: quantity times price less the flat pre-tax discount."""
    return sale_item.quantity * sale_item.unit_price - (sale_item.discount or ZERO)


def snapshot_cogs(sale_item: SaleItem) -> Decimal:
    return sale_item.quantity * (sale_item.unit_cost or ZERO)


def _resolution(
    revenue: Decimal,
    cogs: Decimal,
    kind: CostBasisKind,
    settled: bool,
    supplier_id: Optional[int],
) -> LineResolution:
    return LineResolution(
        revenue=revenue,
        cogs=cogs,
        gross_profit=revenue - cogs,
        cost_basis_kind=kind,
        settled=settled,
        supplier_id=supplier_id,
    )


def _is_trade_in(ctx: LineContext) -> bool:
    return ctx.product.is_trade_in and len(ctx.part_exchanges) > 0


def _trade_in(ctx: LineContext, revenue: Decimal) -> LineResolution:
    cogs = sum((px.allowance or ZERO for px in ctx.part_exchanges), ZERO)
    customer_id = next(
        (px.customer_supplier_id for px in ctx.part_exchanges if px.customer_supplier_id),
        None,
    )
    return _resolution(revenue, cogs, CostBasisKind.TRADE_IN, True, customer_id)


def _is_consignment(ctx: LineContext) -> bool:
    return ctx.product.is_consignment


def _consignment(ctx: LineContext, revenue: Decimal) -> LineResolution:
    product = ctx.product
    if product.consignment_supplier_id is None:
        logger.warning("Consignment product %s has no consignment supplier", product.id)

    settlement = ctx.settlement
    if settlement is None:
        return _resolution(
            revenue,
            snapshot_cogs(ctx.sale_item),
            CostBasisKind.CONSIGNMENT,
            False,
            product.consignment_supplier_id,
        )

    per_unit = settlement.payout_amount
    if per_unit is None:
        per_unit = settlement.agreed_price
    if per_unit is None:
        logger.warning(
            "Settlement %s has neither payout nor agreed price; using zero", settlement.id
        )
        per_unit = ZERO

    return _resolution(
        revenue,
        ctx.sale_item.quantity * per_unit,
        CostBasisKind.CONSIGNMENT,
        settlement.paid_at is not None,
        product.consignment_supplier_id,
    )


def _owned(ctx: LineContext, revenue: Decimal) -> LineResolution:
    return _resolution(
        revenue,
        snapshot_cogs(ctx.sale_item),
        CostBasisKind.OWNED,
        True,
        ctx.product.supplier_id,
    )


COST_BASIS_RULES: tuple[tuple[Predicate, Handler], ...] = (
    (_is_trade_in, _trade_in),
    (_is_consignment, _consignment),
    (lambda ctx: True, _owned),
)


def resolve_line(
    sale_item: SaleItem,
    product: Product,
    part_exchanges: Sequence[PartExchange] = (),
    settlement: Optional[ConsignmentSettlement] = None,
) -> LineResolution:
    """Resolve revenue, COGS and gross profit for one sold line.

    Args:
        sale_item: Sold line with its sale-time cost snapshot
        product: Product sold
        part_exchanges: Part-exchanges linked to the line's sale
        settlement: Consignment settlement for (product, sale), if any

    Returns:
        LineResolution
    """
    ctx = LineContext(
        sale_item=sale_item,
        product=product,
        part_exchanges=tuple(part_exchanges),
        settlement=settlement,
    )
    revenue = line_revenue(sale_item)
    for predicate, handler in COST_BASIS_RULES:
        if predicate(ctx):
            return handler(ctx, revenue)
    raise AssertionError("owned rule always matches")


def resolve_sold_line(line: SoldLine) -> LineResolution:
    """Resolve a joined sold line."""
    return resolve_line(
        line.sale_item, line.product, line.part_exchanges, line.settlement
    )


@dataclass(frozen=True)
class ResolvedLine:
    """A sold line together with its resolution."""

    line: SoldLine
    resolution: LineResolution


def group_key(resolved: ResolvedLine, group_by: SummaryGroupBy) -> Optional[object]:
    """Return the aggregation key of a resolved line."""
    if group_by == SummaryGroupBy.PRODUCT:
        return resolved.line.product.id
    if group_by == SummaryGroupBy.CATEGORY:
        return resolved.line.product.category
    return resolved.resolution.supplier_id


def aggregate(
    lines: Iterable[ResolvedLine], group_by: SummaryGroupBy
) -> dict[Optional[object], dict[str, Decimal | int]]:
    """Sum revenue, COGS and gross profit per group.

    ``settled_gross_profit`` leaves out unsettled consignment lines entirely;
    their owed payouts are reported under ``unsettled_amount`` instead.
    """
    groups: dict[Optional[object], dict[str, Decimal | int]] = defaultdict(
        lambda: {
            "revenue": ZERO,
            "cogs": ZERO,
            "gross_profit": ZERO,
            "settled_gross_profit": ZERO,
            "unsettled_amount": ZERO,
            "quantity": 0,
        }
    )

    for resolved in lines:
        data = groups[group_key(resolved, group_by)]
        res = resolved.resolution
        data["quantity"] += resolved.line.sale_item.quantity
        data["revenue"] += res.revenue
        data["cogs"] += res.cogs
        data["gross_profit"] += res.gross_profit
        if res.cost_basis_kind == CostBasisKind.CONSIGNMENT and not res.settled:
            data["unsettled_amount"] += res.cogs
        else:
            data["settled_gross_profit"] += res.gross_profit

    return dict(groups)


def settled_consignment_gross_profit(resolutions: Iterable[LineResolution]) -> Decimal:
    """Gross profit of consignment lines whose settlement has been paid."""
    return sum(
        (
            r.gross_profit
            for r in resolutions
            if r.cost_basis_kind == CostBasisKind.CONSIGNMENT and r.settled
        ),
        ZERO,
    )


def unsettled_consignment_total(resolutions: Iterable[LineResolution]) -> Decimal:
    """Payouts still owed on consignment lines that are not yet settled."""
    return sum(
        (
            r.cogs
            for r in resolutions
            if r.cost_basis_kind == CostBasisKind.CONSIGNMENT and not r.settled
        ),
        ZERO,
    )
