"""
OrderDesk Money — Public API
=============================
Integer-cents totals and display helpers. No floats in stored amounts.
"""

from core.money.formatting import (
    format_cents,
    format_currency,
    parse_cents_from_float,
)
from core.money.totals import (
    Totals,
    calc_invoice_totals,
    calc_order_totals,
    discounted_line_total,
    line_total,
    validate_percent,
    validate_price,
    validate_quantity,
)

__all__ = [
    "Totals",
    "calc_invoice_totals",
    "calc_order_totals",
    "discounted_line_total",
    "format_cents",
    "format_currency",
    "line_total",
    "parse_cents_from_float",
    "validate_percent",
    "validate_price",
    "validate_quantity",
]
