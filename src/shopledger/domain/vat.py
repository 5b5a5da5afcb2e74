"""VAT breakdown calculations for expenses and sales."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from shopledger.domain.errors import ValidationError

TWO_PLACES = Decimal("0.01")
RECOGNISED_VAT_RATES = (Decimal("0"), Decimal("5"), Decimal("20"))
DEFAULT_VAT_RATE = Decimal("20")

Number = Union[Decimal, int, str]


@dataclass(frozen=True)
class VatBreakdown:
    """Ex-VAT, VAT and inc-VAT figures for one amount."""

    ex_vat: Decimal
    vat_amount: Decimal
    inc_vat: Decimal


def round2(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def breakdown(amount: Number, include_vat: bool, vat_rate: Number) -> VatBreakdown:
    """Split an entered amount into ex-VAT, VAT and inc-VAT parts.

    When include_vat is set the amount is treated as VAT-inclusive. The VAT
    part is taken as the amount minus the rounded ex-VAT figure, so the two
    parts always add back up to the amount entered.

    Args:
        amount: Amount as entered by the user
        include_vat: Whether the amount includes VAT
        vat_rate: VAT rate as a percentage (e.g. 20)

    Returns:
        VatBreakdown

    Raises:
        ValidationError: If the rate is negative
    """
    amount = to_decimal(amount)
    rate = to_decimal(vat_rate)
    if rate < 0:
        raise ValidationError(f"VAT rate must not be negative, got {rate}")

    if not include_vat:
        return VatBreakdown(ex_vat=amount, vat_amount=Decimal("0"), inc_vat=amount)

    ex_vat = round2(amount / (1 + rate / 100))
    vat_amount = round2(amount - ex_vat)
    return VatBreakdown(ex_vat=ex_vat, vat_amount=vat_amount, inc_vat=amount)


def expense_vat_fields(amount: Number, vat_rate: Optional[Number]) -> dict[str, Optional[Decimal]]:
    """Return the VAT columns persisted alongside an expense's gross amount.

    Without a rate all VAT columns are None and ``amount`` stays authoritative.
    """
    amount = to_decimal(amount)
    if vat_rate is None:
        return {
            "amount": amount,
            "amount_ex_vat": None,
            "vat_amount": None,
            "vat_rate": None,
            "amount_inc_vat": None,
        }

    rate = to_decimal(vat_rate)
    parts = breakdown(amount, True, rate)
    return {
        "amount": parts.inc_vat,
        "amount_ex_vat": parts.ex_vat,
        "vat_amount": parts.vat_amount,
        "vat_rate": rate,
        "amount_inc_vat": parts.inc_vat,
    }
