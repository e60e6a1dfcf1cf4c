"""
OrderDesk Documents - Numbering Models
=======================================
Declares how per-year document numbers are formatted.

Format: <PREFIX>-<YEAR>-<SEQ>, SEQ zero-padded (ORD-2025-0001).
The sequence restarts every calendar year.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NumberingPolicy:
    """
    Fields:
        prefix:  document kind marker (e.g. "ORD", "INV")
        table:   table holding the numbered documents
        column:  column holding the number
        padding: minimum digit width of the sequence
    """
    prefix: str
    table: str
    column: str
    padding: int = 4

    def __post_init__(self):
        if not self.prefix or not isinstance(self.prefix, str):
            raise ValueError("prefix must be a non-empty string.")
        if not self.table or not self.column:
            raise ValueError("table and column must be non-empty.")
        if not isinstance(self.padding, int) or self.padding < 1:
            raise ValueError("padding must be int >= 1.")

    def year_prefix(self, year: int) -> str:
        return f"{self.prefix}-{year}-"

    def format(self, year: int, sequence: int) -> str:
        if sequence < 1:
            raise ValueError("sequence must be >= 1.")
        return f"{self.year_prefix(year)}{sequence:0{self.padding}d}"


ORDER_NUMBERING = NumberingPolicy(prefix="ORD", table='"order"', column="order_number")
INVOICE_NUMBERING = NumberingPolicy(prefix="INV", table="invoice", column="invoice_number")
