"""
OrderDesk Orders — Commands
============================
Request structures for creating, patching and listing orders.

OrderUpdate is a partial patch: a field left as None is not touched.
Items, when supplied, replace the order's items wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from engines.orders.models import ORDER_STATUSES


@dataclass(frozen=True)
class OrderItemDraft:
    name_snapshot: str
    qty: int
    unit_price_cents: int
    discount_percent: int = 0
    currency: str = ""
    product_id: Optional[int] = None
    sku_snapshot: Optional[str] = None


@dataclass(frozen=True)
class OrderDraft:
    client_id: int
    items: Tuple[OrderItemDraft, ...]
    notes: Optional[str] = None
    discount_percent: int = 0
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items or ()))


@dataclass(frozen=True)
class OrderUpdate:
    order_id: int
    status: Optional[str] = None
    notes: Optional[str] = None
    discount_percent: Optional[int] = None
    due_date: Optional[datetime] = None
    items: Optional[Tuple[OrderItemDraft, ...]] = None

    def __post_init__(self):
        if self.items is not None:
            object.__setattr__(self, "items", tuple(self.items))

    def header_changes(self) -> dict:
        """Supplied header fields only, keyed by column name."""
        changes = {}
        if self.status is not None:
            changes["status"] = self.status
        if self.notes is not None:
            changes["notes"] = self.notes
        if self.discount_percent is not None:
            changes["discount_percent"] = self.discount_percent
        if self.due_date is not None:
            changes["due_date"] = self.due_date
        return changes

    @property
    def replaces_items(self) -> bool:
        return bool(self.items)


ORDER_SORT_KEYS = {
    "newest": "o.id DESC",
    "oldest": "o.id ASC",
    "number": "o.order_number ASC",
    "client": "c.name ASC, o.id DESC",
    "issue_date": "o.issue_date DESC, o.id DESC",
    "status": "o.status ASC, o.id DESC",
}

DEFAULT_ORDER_SORT = "newest"


@dataclass(frozen=True)
class OrderFilters:
    client_id: Optional[int] = None
    status: Optional[str] = None
    query: Optional[str] = None
    sort: str = DEFAULT_ORDER_SORT

    def __post_init__(self):
        if self.status is not None and self.status not in ORDER_STATUSES:
            raise ValueError(f"status '{self.status}' is not a valid order status.")
        if self.sort not in ORDER_SORT_KEYS:
            raise ValueError(
                f"sort '{self.sort}' is not valid. Must be one of: {sorted(ORDER_SORT_KEYS)}"
            )

    @property
    def order_by(self) -> str:
        return ORDER_SORT_KEYS[self.sort]

