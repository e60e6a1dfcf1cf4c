"""
OrderDesk Money — Display Helpers
==================================
Conversion between integer cents and the decimal text shown to users.
"""

from __future__ import annotations


def format_cents(cents: int) -> str:
    """Render cents as a two-decimal amount: 123456 -> '1234.56'."""
    sign = "-" if cents < 0 else ""
    units, minor = divmod(abs(cents), 100)
    return f"{sign}{units}.{minor:02d}"


def format_currency(cents: int, currency: str) -> str:
    return f"{format_cents(cents)} {currency}"


def parse_cents_from_float(amount: float) -> int:
    """
    Convert a user-entered decimal amount to cents.

    Truncates toward zero, so binary float error can lose a cent:
    0.57 -> 56.
    """
    return int(amount * 100)
