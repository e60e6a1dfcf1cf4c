"""
OrderDesk Invoicing — Row Models
=================================
Invoices, their item snapshots and the payments recorded against them.
Invoices are independent of the client debt balance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from core.time.clock import from_storage_text
from engines.clients.models import Client

INVOICE_STATUS_DRAFT = "DRAFT"
INVOICE_STATUS_ISSUED = "ISSUED"
INVOICE_STATUS_PAID = "PAID"
INVOICE_STATUS_CANCELED = "CANCELED"

INVOICE_STATUSES = (
    INVOICE_STATUS_DRAFT,
    INVOICE_STATUS_ISSUED,
    INVOICE_STATUS_PAID,
    INVOICE_STATUS_CANCELED,
)

PAYMENT_METHOD_CASH = "CASH"
PAYMENT_METHOD_CARD = "CARD"
PAYMENT_METHOD_TRANSFER = "TRANSFER"
PAYMENT_METHOD_OTHER = "OTHER"

PAYMENT_METHODS = (
    PAYMENT_METHOD_CASH,
    PAYMENT_METHOD_CARD,
    PAYMENT_METHOD_TRANSFER,
    PAYMENT_METHOD_OTHER,
)


@dataclass(frozen=True)
class Invoice:
    id: int
    invoice_number: str
    order_id: Optional[int]
    client_id: int
    status: str
    issue_date: Optional[datetime]
    due_date: Optional[datetime]
    notes: Optional[str]
    subtotal_cents: int
    discount_percent: int
    tax_percent: int
    total_cents: int
    currency: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Invoice":
        return cls(
            id=row["id"],
            invoice_number=row["invoice_number"],
            order_id=row.get("order_id"),
            client_id=row["client_id"],
            status=row["status"],
            issue_date=from_storage_text(row.get("issue_date")),
            due_date=from_storage_text(row.get("due_date")),
            notes=row.get("notes"),
            subtotal_cents=row["subtotal_cents"],
            discount_percent=row.get("discount_percent") or 0,
            tax_percent=row.get("tax_percent") or 0,
            total_cents=row["total_cents"],
            currency=row["currency"],
            created_at=from_storage_text(row.get("created_at")),
            updated_at=from_storage_text(row.get("updated_at")),
        )


@dataclass(frozen=True)
class InvoiceItem:
    id: int
    invoice_id: int
    product_id: Optional[int]
    name_snapshot: str
    sku_snapshot: Optional[str]
    qty: int
    unit_price_cents: int
    currency: str
    total_cents: int

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "InvoiceItem":
        return cls(
            id=row["id"],
            invoice_id=row["invoice_id"],
            product_id=row.get("product_id"),
            name_snapshot=row["name_snapshot"],
            sku_snapshot=row.get("sku_snapshot"),
            qty=row["qty"],
            unit_price_cents=row["unit_price_cents"],
            currency=row["currency"],
            total_cents=row["total_cents"],
        )


@dataclass(frozen=True)
class Payment:
    id: int
    invoice_id: int
    amount_cents: int
    method: str
    reference: Optional[str]
    paid_at: Optional[datetime]
    notes: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Payment":
        return cls(
            id=row["id"],
            invoice_id=row["invoice_id"],
            amount_cents=row["amount_cents"],
            method=row["method"],
            reference=row.get("reference"),
            paid_at=from_storage_text(row.get("paid_at")),
            notes=row.get("notes"),
            created_at=from_storage_text(row.get("created_at")),
        )


@dataclass(frozen=True)
class InvoiceDetail:
    invoice: Invoice
    client: Client
    items: Tuple[InvoiceItem, ...]
    payments: Tuple[Payment, ...]
    paid_cents: int
    balance_cents: int
