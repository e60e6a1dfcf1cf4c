"""
OrderDesk Invoicing — Commands
===============================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class InvoiceItemDraft:
    name_snapshot: str
    qty: int
    unit_price_cents: int
    currency: str = ""
    product_id: Optional[int] = None
    sku_snapshot: Optional[str] = None


@dataclass(frozen=True)
class InvoiceDraft:
    client_id: int
    items: Tuple[InvoiceItemDraft, ...]
    order_id: Optional[int] = None
    notes: Optional[str] = None
    discount_percent: int = 0
    tax_percent: int = 0
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: str = ""

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items or ()))


@dataclass(frozen=True)
class InvoiceOverrides:
    """Header values to use instead of the order's when invoicing an order."""
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    discount_percent: Optional[int] = None
    tax_percent: Optional[int] = None


@dataclass(frozen=True)
class InvoiceUpdate:
    """Partial patch. None leaves a field alone; items replace all lines."""
    invoice_id: int
    status: Optional[str] = None
    notes: Optional[str] = None
    discount_percent: Optional[int] = None
    tax_percent: Optional[int] = None
    due_date: Optional[datetime] = None
    items: Optional[Tuple[InvoiceItemDraft, ...]] = None

    def __post_init__(self):
        if self.items is not None:
            object.__setattr__(self, "items", tuple(self.items))

    def header_changes(self) -> dict:
        changes = {}
        if self.status is not None:
            changes["status"] = self.status
        if self.notes is not None:
            changes["notes"] = self.notes
        if self.discount_percent is not None:
            changes["discount_percent"] = self.discount_percent
        if self.tax_percent is not None:
            changes["tax_percent"] = self.tax_percent
        if self.due_date is not None:
            changes["due_date"] = self.due_date
        return changes

    @property
    def replaces_items(self) -> bool:
        return bool(self.items)


@dataclass(frozen=True)
class PaymentDraft:
    invoice_id: int
    amount_cents: int
    method: str
    reference: Optional[str] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "method", (self.method or "").strip().upper())
