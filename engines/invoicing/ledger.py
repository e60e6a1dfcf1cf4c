"""
OrderDesk Invoicing — Invoice Ledger
=====================================
Invoices and payments over the storage gateway.

RULES:
- Invoices never touch client.debt_cents
- Header totals are recomputed from the item rows inside the same
  transaction that writes the items
- Payments are additive rows; they never transition invoice status
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from core.commands.errors import NotFoundError
from core.documents.numbering import INVOICE_NUMBERING, next_document_number
from core.money.totals import calc_invoice_totals, line_total
from core.storage.gateway import StorageGateway
from core.storage.paging import Page
from core.time.clock import Clock, SystemClock, to_storage_text
from engines.clients.models import Client
from engines.invoicing.commands import (
    InvoiceDraft,
    InvoiceItemDraft,
    InvoiceOverrides,
    InvoiceUpdate,
    PaymentDraft,
)
from engines.invoicing.models import (
    INVOICE_STATUS_DRAFT,
    Invoice,
    InvoiceDetail,
    InvoiceItem,
    Payment,
)

logger = logging.getLogger("orderdesk.invoicing")

INVOICE_COLUMNS = (
    "id, invoice_number, order_id, client_id, status, issue_date, due_date, notes, "
    "subtotal_cents, discount_percent, tax_percent, total_cents, currency, "
    "created_at, updated_at"
)

ITEM_COLUMNS = (
    "id, invoice_id, product_id, name_snapshot, sku_snapshot, qty, unit_price_cents, "
    "currency, total_cents"
)

PAYMENT_COLUMNS = "id, invoice_id, amount_cents, method, reference, paid_at, notes, created_at"

UPDATABLE_COLUMNS = ("status", "notes", "discount_percent", "tax_percent", "due_date")


def _storage_value(value):
    if isinstance(value, datetime):
        return to_storage_text(value)
    return value


class InvoiceLedger:
    def __init__(
        self,
        gateway: StorageGateway,
        clock: Optional[Clock] = None,
        default_currency: str = "USD",
    ) -> None:
        self._gateway = gateway
        self._clock = clock or SystemClock()
        self._default_currency = default_currency

    # ══════════════════════════════════════════════════════════
    # INTERNAL STEPS
    # ══════════════════════════════════════════════════════════

    def _load_header(self, cursor, invoice_id: int) -> dict:
        row = self._gateway.fetch_one(
            cursor,
            "load_invoice",
            f"SELECT {INVOICE_COLUMNS} FROM invoice WHERE id = %s",
            [invoice_id],
        )
        if row is None:
            raise NotFoundError("invoice", invoice_id)
        return row

    def _load_items(self, cursor, invoice_id: int) -> List[InvoiceItem]:
        rows = self._gateway.fetch_all(
            cursor,
            "load_invoice_items",
            f"SELECT {ITEM_COLUMNS} FROM invoice_item WHERE invoice_id = %s ORDER BY id",
            [invoice_id],
        )
        return [InvoiceItem.from_row(row) for row in rows]

    def _load_payments(self, cursor, invoice_id: int) -> List[Payment]:
        rows = self._gateway.fetch_all(
            cursor,
            "load_invoice_payments",
            f"SELECT {PAYMENT_COLUMNS} FROM payment WHERE invoice_id = %s ORDER BY paid_at, id",
            [invoice_id],
        )
        return [Payment.from_row(row) for row in rows]

    def _load_client(self, cursor, client_id: int) -> Client:
        row = self._gateway.fetch_one(
            cursor,
            "load_invoice_client",
            "SELECT id, name, phone, address, debt_cents, created_at, updated_at "
            "FROM client WHERE id = %s",
            [client_id],
        )
        if row is None:
            raise NotFoundError("client", client_id)
        return Client.from_row(row)

    def _insert_items(
        self, cursor, invoice_id: int, items: Iterable[InvoiceItemDraft], currency: str
    ) -> None:
        for item in items:
            self._gateway.insert(
                cursor,
                "insert_invoice_item",
                "INSERT INTO invoice_item (invoice_id, product_id, name_snapshot, sku_snapshot, "
                "qty, unit_price_cents, currency, total_cents) "
                "VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
                [
                    invoice_id,
                    item.product_id,
                    item.name_snapshot,
                    item.sku_snapshot,
                    item.qty,
                    item.unit_price_cents,
                    item.currency or currency,
                    line_total(item.qty, item.unit_price_cents),
                ],
            )

    def _reconcile_totals(self, cursor, invoice_id: int, stamp: str) -> dict:
        header = self._load_header(cursor, invoice_id)
        totals = calc_invoice_totals(
            self._load_items(cursor, invoice_id),
            header["discount_percent"] or 0,
            header["tax_percent"] or 0,
        )
        self._gateway.execute(
            cursor,
            "write_invoice_totals",
            "UPDATE invoice SET subtotal_cents = %s, total_cents = %s, updated_at = %s "
            "WHERE id = %s",
            [totals.subtotal_cents, totals.total_cents, stamp, invoice_id],
        )
        return self._load_header(cursor, invoice_id)

    def _insert_invoice(self, cursor, draft: InvoiceDraft, now: datetime) -> Invoice:
        stamp = to_storage_text(now)
        currency = draft.currency or self._default_currency
        invoice_number = next_document_number(self._gateway, cursor, INVOICE_NUMBERING, now.year)
        self._load_client(cursor, draft.client_id)

        invoice_id = self._gateway.insert(
            cursor,
            "insert_invoice",
            "INSERT INTO invoice (invoice_number, order_id, client_id, status, issue_date, "
            "due_date, notes, subtotal_cents, discount_percent, tax_percent, total_cents, "
            "currency, created_at, updated_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, 0, %s, %s, 0, %s, %s, %s)",
            [
                invoice_number,
                draft.order_id,
                draft.client_id,
                INVOICE_STATUS_DRAFT,
                to_storage_text(draft.issue_date or now),
                to_storage_text(draft.due_date),
                draft.notes,
                draft.discount_percent,
                draft.tax_percent,
                currency,
                stamp,
                stamp,
            ],
        )
        self._insert_items(cursor, invoice_id, draft.items, currency)
        return Invoice.from_row(self._reconcile_totals(cursor, invoice_id, stamp))

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        now = self._clock.now_utc()
        with self._gateway.atomic() as cursor:
            invoice = self._insert_invoice(cursor, draft, now)
        logger.info(
            f"Created invoice {invoice.invoice_number} for client {invoice.client_id}: "
            f"total={invoice.total_cents} {invoice.currency}"
        )
        return invoice

    def create_invoice_from_order(
        self,
        order_id: int,
        overrides: Optional[InvoiceOverrides] = None,
    ) -> Invoice:
        """Invoice an order's item snapshots. Overrides replace the order's header values."""
        overrides = overrides or InvoiceOverrides()
        now = self._clock.now_utc()

        with self._gateway.atomic() as cursor:
            order = self._gateway.fetch_one(
                cursor,
                "load_order_for_invoice",
                'SELECT id, client_id, notes, discount_percent, due_date FROM "order" '
                "WHERE id = %s",
                [order_id],
            )
            if order is None:
                raise NotFoundError("order", order_id)
            rows = self._gateway.fetch_all(
                cursor,
                "load_order_items_for_invoice",
                "SELECT product_id, name_snapshot, sku_snapshot, qty, unit_price_cents, currency "
                "FROM order_item WHERE order_id = %s ORDER BY id",
                [order_id],
            )
            items = tuple(
                InvoiceItemDraft(
                    name_snapshot=row["name_snapshot"],
                    qty=row["qty"],
                    unit_price_cents=row["unit_price_cents"],
                    currency=row["currency"],
                    product_id=row["product_id"],
                    sku_snapshot=row["sku_snapshot"],
                )
                for row in rows
            )
            draft = InvoiceDraft(
                client_id=order["client_id"],
                items=items,
                order_id=order_id,
                notes=overrides.notes if overrides.notes is not None else order["notes"],
                discount_percent=(
                    overrides.discount_percent
                    if overrides.discount_percent is not None
                    else order["discount_percent"] or 0
                ),
                tax_percent=overrides.tax_percent or 0,
                issue_date=overrides.issue_date,
                due_date=overrides.due_date,
                currency=items[0].currency if items else "",
            )
            invoice = self._insert_invoice(cursor, draft, now)

        logger.info(
            f"Created invoice {invoice.invoice_number} from order {order_id}: "
            f"total={invoice.total_cents} {invoice.currency}"
        )
        return invoice

    def update_invoice(self, update: InvoiceUpdate) -> Invoice:
        stamp = to_storage_text(self._clock.now_utc())

        with self._gateway.atomic() as cursor:
            header = self._load_header(cursor, update.invoice_id)
            changes = {
                column: _storage_value(value)
                for column, value in update.header_changes().items()
                if column in UPDATABLE_COLUMNS
            }
            if changes:
                assignments = ", ".join(f"{column} = %s" for column in changes)
                self._gateway.execute(
                    cursor,
                    "patch_invoice",
                    f"UPDATE invoice SET {assignments}, updated_at = %s WHERE id = %s",
                    list(changes.values()) + [stamp, update.invoice_id],
                )
            if update.replaces_items:
                self._gateway.execute(
                    cursor,
                    "delete_invoice_items",
                    "DELETE FROM invoice_item WHERE invoice_id = %s",
                    [update.invoice_id],
                )
                self._insert_items(cursor, update.invoice_id, update.items, header["currency"])
            invoice = Invoice.from_row(self._reconcile_totals(cursor, update.invoice_id, stamp))

        logger.info(
            f"Updated invoice {invoice.invoice_number}: fields={sorted(changes)} "
            f"items_replaced={update.replaces_items} total={invoice.total_cents}"
        )
        return invoice

    def record_payment(self, draft: PaymentDraft) -> Payment:
        now = self._clock.now_utc()
        stamp = to_storage_text(now)

        with self._gateway.atomic() as cursor:
            header = self._load_header(cursor, draft.invoice_id)
            payment_id = self._gateway.insert(
                cursor,
                "insert_payment",
                "INSERT INTO payment (invoice_id, amount_cents, method, reference, paid_at, "
                "notes, created_at) VALUES (%s, %s, %s, %s, %s, %s, %s)",
                [
                    draft.invoice_id,
                    draft.amount_cents,
                    draft.method,
                    draft.reference,
                    to_storage_text(draft.paid_at or now),
                    draft.notes,
                    stamp,
                ],
            )
            row = self._gateway.fetch_one(
                cursor,
                "load_payment",
                f"SELECT {PAYMENT_COLUMNS} FROM payment WHERE id = %s",
                [payment_id],
            )

        logger.info(
            f"Recorded {draft.method} payment of {draft.amount_cents} "
            f"on invoice {header['invoice_number']}."
        )
        return Payment.from_row(row)

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_invoice(self, invoice_id: int) -> Invoice:
        with self._gateway.reading() as cursor:
            return Invoice.from_row(self._load_header(cursor, invoice_id))

    def get_invoice_detail(self, invoice_id: int) -> InvoiceDetail:
        with self._gateway.reading() as cursor:
            invoice = Invoice.from_row(self._load_header(cursor, invoice_id))
            client = self._load_client(cursor, invoice.client_id)
            items = self._load_items(cursor, invoice_id)
            payments = self._load_payments(cursor, invoice_id)
        return self._detail(invoice, client, items, payments)

    def list_invoices(self, limit: int = 20, offset: int = 0) -> Page[InvoiceDetail]:
        """Newest first. Items and payments are left empty; paid/balance are filled."""
        with self._gateway.reading() as cursor:
            total = self._gateway.fetch_value(cursor, "count_invoices", "SELECT COUNT(*) FROM invoice")
            rows = self._gateway.fetch_all(
                cursor,
                "list_invoices",
                "SELECT i.id, i.invoice_number, i.order_id, i.client_id, i.status, "
                "i.issue_date, i.due_date, i.notes, i.subtotal_cents, i.discount_percent, "
                "i.tax_percent, i.total_cents, i.currency, i.created_at, i.updated_at, "
                "COALESCE((SELECT SUM(p.amount_cents) FROM payment p "
                "WHERE p.invoice_id = i.id), 0) AS paid_cents, "
                "c.name AS client_name, c.phone AS client_phone, "
                "c.address AS client_address, c.debt_cents AS client_debt_cents, "
                "c.created_at AS client_created_at, c.updated_at AS client_updated_at "
                "FROM invoice i JOIN client c ON i.client_id = c.id "
                "ORDER BY i.created_at DESC, i.id DESC LIMIT %s OFFSET %s",
                [limit, offset],
            )
        details = []
        for row in rows:
            invoice = Invoice.from_row(row)
            paid = int(row["paid_cents"] or 0)
            details.append(
                InvoiceDetail(
                    invoice=invoice,
                    client=Client.from_row(row, prefix="client_"),
                    items=(),
                    payments=(),
                    paid_cents=paid,
                    balance_cents=invoice.total_cents - paid,
                )
            )
        return Page(items=tuple(details), total=int(total or 0), limit=limit, offset=offset)

    @staticmethod
    def _detail(
        invoice: Invoice,
        client: Client,
        items: List[InvoiceItem],
        payments: List[Payment],
    ) -> InvoiceDetail:
        paid = sum(payment.amount_cents for payment in payments)
        return InvoiceDetail(
            invoice=invoice,
            client=client,
            items=tuple(items),
            payments=tuple(payments),
            paid_cents=paid,
            balance_cents=invoice.total_cents - paid,
        )
