"""Bill arithmetic: base amounts, tax/charge amounts and totals.

All money math runs on ``Decimal``. Every tax or charge amount is rounded to
two places with ROUND_HALF_UP on its own, and the total is the base plus the
already rounded amounts (round, then sum).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


class PricedLine(Protocol):
    price: Any
    quantity: int


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from expanding to their binary value.
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxRates:
    """Percentages in [0, 100]; ``None`` contributes nothing."""

    vat_low: Decimal | None = None
    vat_high: Decimal | None = None
    service_tax: Decimal | None = None
    service_charge: Decimal | None = None

    @classmethod
    def of(
        cls,
        vat_low: Any = None,
        vat_high: Any = None,
        service_tax: Any = None,
        service_charge: Any = None,
    ) -> TaxRates:
        return cls(
            vat_low=None if vat_low is None else to_decimal(vat_low),
            vat_high=None if vat_high is None else to_decimal(vat_high),
            service_tax=None if service_tax is None else to_decimal(service_tax),
            service_charge=None if service_charge is None else to_decimal(service_charge),
        )

    @classmethod
    def from_bill(cls, bill: Any | None) -> TaxRates:
        if bill is None:
            return cls()
        return cls.of(bill.vat_low, bill.vat_high, bill.service_tax, bill.service_charge)


@dataclass(frozen=True)
class BillTotals:
    vat_low_amount: Decimal
    vat_high_amount: Decimal
    service_tax_amount: Decimal
    service_charge_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class BillPreview:
    original_amount: Decimal
    preview_amount: Decimal


def _rate_amount(base_amount: Decimal, rate: Decimal | None) -> Decimal:
    if not rate:
        return ZERO
    return round_money(base_amount * rate / HUNDRED)


def base_amount(lines: Iterable[PricedLine]) -> Decimal:
    """Sum of price x quantity over order lines, unrounded."""
    total = ZERO
    for line in lines:
        total += to_decimal(line.price) * line.quantity
    return total


def calculate_totals(base_amount: Decimal, tax_rates: TaxRates) -> BillTotals:
    """Compute the four rounded tax/charge amounts and the bill total."""
    base_amount = to_decimal(base_amount)
    vat_low_amount = _rate_amount(base_amount, tax_rates.vat_low)
    vat_high_amount = _rate_amount(base_amount, tax_rates.vat_high)
    service_tax_amount = _rate_amount(base_amount, tax_rates.service_tax)
    service_charge_amount = _rate_amount(base_amount, tax_rates.service_charge)
    total_amount = round_money(
        base_amount + vat_low_amount + vat_high_amount + service_tax_amount + service_charge_amount
    )
    return BillTotals(
        vat_low_amount=vat_low_amount,
        vat_high_amount=vat_high_amount,
        service_tax_amount=service_tax_amount,
        service_charge_amount=service_charge_amount,
        total_amount=total_amount,
    )


def calculate_preview(
    order_base: Decimal,
    tax_rates: TaxRates,
    extra_lines: Iterable[PricedLine],
) -> BillPreview:
    """Total of an order plus extra dishes, for a bill that is shown but not stored.

    Extras carry VAT and service tax but no service charge.
    """
    original_amount = calculate_totals(order_base, tax_rates).total_amount
    extra_base = base_amount(extra_lines)
    preview_amount = round_money(
        original_amount
        + extra_base
        + _rate_amount(extra_base, tax_rates.vat_low)
        + _rate_amount(extra_base, tax_rates.vat_high)
        + _rate_amount(extra_base, tax_rates.service_tax)
    )
    return BillPreview(original_amount=original_amount, preview_amount=preview_amount)
