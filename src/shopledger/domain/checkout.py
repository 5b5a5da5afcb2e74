"""POS checkout arithmetic and completion rules."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from shopledger.domain.errors import ValidationError
from shopledger.domain.vat import round2

ZERO = Decimal("0")


class DiscountKind(str, Enum):
    """How a cart-level discount is expressed."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class CartLine:
    """One line in the cart before the sale is recorded."""

    product_id: int
    quantity: int
    unit_price: Decimal
    tax_rate: Decimal = ZERO
    discount: Decimal = ZERO

    @property
    def line_subtotal(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class CartTotals:
    """Cart totals after discount and tax."""

    subtotal: Decimal
    discount_total: Decimal
    tax_total: Decimal
    total: Decimal


def calculate_cart_totals(lines: Sequence[CartLine]) -> CartTotals:
    """Compute subtotal, discount, tax and total for a cart.

    Tax is charged on each line's subtotal after its discount.
    """
    subtotal = sum((line.line_subtotal for line in lines), ZERO)
    discount_total = sum((line.discount for line in lines), ZERO)
    tax_total = sum(
        ((line.line_subtotal - line.discount) * line.tax_rate / 100 for line in lines),
        ZERO,
    )
    return CartTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        tax_total=tax_total,
        total=subtotal + tax_total - discount_total,
    )


def allocate_discount(
    lines: Sequence[CartLine], discount: Decimal, kind: DiscountKind
) -> list[CartLine]:
    """Spread a cart-level discount across lines in proportion to their subtotal.

    Raises:
        ValidationError: If the discount is negative or exceeds the cart
    """
    if discount < 0:
        raise ValidationError("Discount must not be negative")

    subtotal = sum((line.line_subtotal for line in lines), ZERO)
    if kind == DiscountKind.PERCENTAGE:
        if discount > 100:
            raise ValidationError("Percentage discount cannot exceed 100")
        ratio = discount / 100
    else:
        if discount > subtotal:
            raise ValidationError("Fixed discount cannot exceed the cart subtotal")
        ratio = discount / subtotal if subtotal > 0 else ZERO

    return [
        CartLine(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_rate=line.tax_rate,
            discount=line.line_subtotal * ratio,
        )
        for line in lines
    ]


def net_total(cart_total: Decimal, allowances: Sequence[Decimal]) -> Decimal:
    """Cart total less part-exchange allowances. Negative means owed to customer."""
    return cart_total - sum(allowances, ZERO)


def requires_owner_approval(net: Decimal) -> bool:
    return net < 0


def can_complete_sale(
    item_count: int,
    part_exchange_count: int,
    payment_method: Optional[str],
    staff_member: Optional[str],
    net: Decimal,
    owner_approved: bool = False,
) -> bool:
    """Return whether checkout may be completed.

    A sale needs at least one item or part-exchange, a payment method and a
    staff member. A negative net total needs owner approval.
    """
    if item_count == 0 and part_exchange_count == 0:
        return False
    if not payment_method or not staff_member:
        return False
    return not requires_owner_approval(net) or owner_approved


def rounded_totals(totals: CartTotals) -> CartTotals:
    """Round every total to two places for persistence."""
    return CartTotals(
        subtotal=round2(totals.subtotal),
        discount_total=round2(totals.discount_total),
        tax_total=round2(totals.tax_total),
        total=round2(totals.total),
    )
