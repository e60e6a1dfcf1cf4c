"""
OrderDesk Orders — Row Models
==============================
Frozen views of order headers, order items and the reconciled detail
view returned to callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from core.money.totals import Totals
from core.time.clock import from_storage_text
from engines.clients.models import Client

ORDER_STATUS_PENDING = "PENDING"
ORDER_STATUS_CONFIRMED = "CONFIRMED"
ORDER_STATUS_CANCELED = "CANCELED"
ORDER_STATUS_COMPLETED = "COMPLETED"

ORDER_STATUSES = (
    ORDER_STATUS_PENDING,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_COMPLETED,
    ORDER_STATUS_CANCELED,
)


@dataclass(frozen=True)
class Order:
    id: int
    order_number: str
    client_id: int
    status: str
    notes: Optional[str]
    discount_percent: int
    issue_date: Optional[datetime]
    due_date: Optional[datetime]
    client_debt_snapshot_cents: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        return cls(
            id=row["id"],
            order_number=row["order_number"],
            client_id=row["client_id"],
            status=row["status"],
            notes=row.get("notes"),
            discount_percent=row.get("discount_percent") or 0,
            issue_date=from_storage_text(row.get("issue_date")),
            due_date=from_storage_text(row.get("due_date")),
            client_debt_snapshot_cents=row.get("client_debt_snapshot_cents"),
            created_at=from_storage_text(row.get("created_at")),
            updated_at=from_storage_text(row.get("updated_at")),
        )

    @property
    def is_canceled(self) -> bool:
        return self.status == ORDER_STATUS_CANCELED


@dataclass(frozen=True)
class OrderItem:
    id: int
    order_id: int
    product_id: Optional[int]
    name_snapshot: str
    sku_snapshot: Optional[str]
    qty: int
    unit_price_cents: int
    discount_percent: int
    currency: str
    total_cents: int

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OrderItem":
        return cls(
            id=row["id"],
            order_id=row["order_id"],
            product_id=row.get("product_id"),
            name_snapshot=row["name_snapshot"],
            sku_snapshot=row.get("sku_snapshot"),
            qty=row["qty"],
            unit_price_cents=row["unit_price_cents"],
            discount_percent=row.get("discount_percent") or 0,
            currency=row["currency"],
            total_cents=row["total_cents"],
        )


@dataclass(frozen=True)
class OrderDetail:
    order: Order
    client: Client
    items: Tuple[OrderItem, ...]
    totals: Totals

    @property
    def subtotal_cents(self) -> int:
        return self.totals.subtotal_cents

    @property
    def discount_cents(self) -> int:
        return self.totals.discount_cents

    @property
    def tax_cents(self) -> int:
        return self.totals.tax_cents

    @property
    def total_cents(self) -> int:
        return self.totals.total_cents
