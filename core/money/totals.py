"""
OrderDesk Money — Totals Calculator
====================================
Pure functions deriving subtotal, discount, tax and total from line items.

RULES:
- All amounts are integer cents
- Every percentage is applied with truncating integer division
  (values are non-negative, so floor division truncates)
- No rounding correction, ever

Orders:   discount = Σ line discounts + order-level discount, tax = 0
Invoices: discount and tax apply only for percentages in (0, 100]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol


class PricedLine(Protocol):
    """Anything with a qty, a unit price and a stored line total."""

    qty: int
    unit_price_cents: int
    total_cents: int


# ══════════════════════════════════════════════════════════════
# TOTALS VALUE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Totals:
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int

    def __iter__(self) -> Iterator[int]:
        return iter(
            (self.subtotal_cents, self.discount_cents, self.tax_cents, self.total_cents)
        )

    def to_dict(self) -> dict:
        return {
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
        }


# ══════════════════════════════════════════════════════════════
# LINE ARITHMETIC
# ══════════════════════════════════════════════════════════════

def line_total(qty: int, unit_price_cents: int) -> int:
    return qty * unit_price_cents


def percent_of(amount_cents: int, percent: int) -> int:
    return amount_cents * percent // 100


def discounted_line_total(qty: int, unit_price_cents: int, discount_percent: int) -> int:
    """Line total after its own discount; this is what an order adds to client debt."""
    gross = line_total(qty, unit_price_cents)
    return gross - percent_of(gross, discount_percent)


# ══════════════════════════════════════════════════════════════
# ORDER / INVOICE TOTALS
# ══════════════════════════════════════════════════════════════

def calc_order_totals(
    items: Iterable[PricedLine],
    discount_percent: int = 0,
    tax_percent: int = 0,
) -> Totals:
    """
    Order totals. Line discounts come from each item's discount_percent;
    the order-level discount_percent is added on top of the subtotal.
    Order views always pass 0 here. tax_percent is accepted but unused.
    """
    subtotal = 0
    discount = 0
    for item in items:
        item_subtotal = item.total_cents
        subtotal += item_subtotal
        discount += percent_of(item_subtotal, getattr(item, "discount_percent", 0) or 0)
    if discount_percent:
        discount += percent_of(subtotal, discount_percent)
    return Totals(
        subtotal_cents=subtotal,
        discount_cents=discount,
        tax_cents=0,
        total_cents=subtotal - discount,
    )


def calc_invoice_totals(
    items: Iterable[PricedLine],
    discount_percent: int = 0,
    tax_percent: int = 0,
) -> Totals:
    subtotal = sum(item.total_cents for item in items)
    discount = 0
    if 0 < discount_percent <= 100:
        discount = percent_of(subtotal, discount_percent)
    tax = 0
    if 0 < tax_percent <= 100:
        tax = percent_of(subtotal - discount, tax_percent)
    return Totals(
        subtotal_cents=subtotal,
        discount_cents=discount,
        tax_cents=tax,
        total_cents=subtotal - discount + tax,
    )


# ══════════════════════════════════════════════════════════════
# VALIDATORS
# ══════════════════════════════════════════════════════════════

def validate_percent(percent: int) -> bool:
    return 0 <= percent <= 100


def validate_quantity(qty: int) -> bool:
    return qty > 0


def validate_price(unit_price_cents: int) -> bool:
    return unit_price_cents >= 0
