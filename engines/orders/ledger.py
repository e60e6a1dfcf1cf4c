"""
OrderDesk Orders — Order & Debt Ledger
=======================================
Creates, patches, cancels and purges orders while keeping each
client's running debt consistent. Every mutation is one transaction.

RULES:
- Creation adds the order's item total (after per-item discounts) to
  client.debt_cents, exactly once
- The order-level discount_percent is stored but never applied
- Updating an order never moves debt; it only refreshes the snapshot
- Cancel reverses the debt only when no invoice or payment references
  the order, clamped so debt never drops below zero
- After any mutation, the order's client_debt_snapshot_cents is
  re-read from the client row inside the same transaction

Any failing step rolls the whole transaction back and surfaces as
StorageError naming the step.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from core.commands.errors import NotFoundError
from core.documents.numbering import ORDER_NUMBERING, next_document_number
from core.money.totals import calc_order_totals, discounted_line_total, line_total
from core.storage.gateway import StorageGateway
from core.storage.paging import Page
from core.time.clock import Clock, SystemClock, to_storage_text
from engines.clients.models import Client
from engines.orders.commands import OrderDraft, OrderFilters, OrderItemDraft, OrderUpdate
from engines.orders.models import (
    ORDER_STATUS_CANCELED,
    ORDER_STATUS_PENDING,
    Order,
    OrderDetail,
    OrderItem,
)

logger = logging.getLogger("orderdesk.ledger")

ORDER_COLUMNS = (
    "id, order_number, client_id, status, notes, discount_percent, issue_date, "
    "due_date, client_debt_snapshot_cents, created_at, updated_at"
)

ITEM_COLUMNS = (
    "id, order_id, product_id, name_snapshot, sku_snapshot, qty, unit_price_cents, "
    "discount_percent, currency, total_cents"
)

# Header columns an update may patch. Anything else is ignored.
UPDATABLE_COLUMNS = ("status", "notes", "discount_percent", "due_date")


def _storage_value(value):
    if isinstance(value, datetime):
        return to_storage_text(value)
    return value


class OrderLedger:
    """Transactional order lifecycle over the storage gateway."""

    def __init__(self, gateway: StorageGateway, clock: Optional[Clock] = None) -> None:
        self._gateway = gateway
        self._clock = clock or SystemClock()

    # ══════════════════════════════════════════════════════════
    # INTERNAL STEPS (run inside the caller's transaction)
    # ══════════════════════════════════════════════════════════

    def _load_header(self, cursor, order_id: int) -> dict:
        row = self._gateway.fetch_one(
            cursor,
            "load_order",
            f'SELECT {ORDER_COLUMNS} FROM "order" WHERE id = %s',
            [order_id],
        )
        if row is None:
            raise NotFoundError("order", order_id)
        return row

    def _load_items(self, cursor, order_id: int) -> List[OrderItem]:
        rows = self._gateway.fetch_all(
            cursor,
            "load_order_items",
            f"SELECT {ITEM_COLUMNS} FROM order_item WHERE order_id = %s ORDER BY id",
            [order_id],
        )
        return [OrderItem.from_row(row) for row in rows]

    def _item_total(self, cursor, order_id: int) -> int:
        """Σ(qty × price − per-item discount), recomputed from the item rows."""
        rows = self._gateway.fetch_all(
            cursor,
            "compute_order_total",
            "SELECT qty, unit_price_cents, discount_percent FROM order_item WHERE order_id = %s",
            [order_id],
        )
        return sum(
            discounted_line_total(row["qty"], row["unit_price_cents"], row["discount_percent"] or 0)
            for row in rows
        )

    def _insert_items(self, cursor, order_id: int, items: Iterable[OrderItemDraft]) -> int:
        """Insert item rows; returns their total after per-item discounts."""
        order_total = 0
        for item in items:
            total_cents = line_total(item.qty, item.unit_price_cents)
            order_total += discounted_line_total(item.qty, item.unit_price_cents, item.discount_percent)
            self._gateway.insert(
                cursor,
                "insert_order_item",
                "INSERT INTO order_item (order_id, product_id, name_snapshot, sku_snapshot, "
                "qty, unit_price_cents, discount_percent, currency, total_cents) "
                "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)",
                [
                    order_id,
                    item.product_id,
                    item.name_snapshot,
                    item.sku_snapshot,
                    item.qty,
                    item.unit_price_cents,
                    item.discount_percent,
                    item.currency,
                    total_cents,
                ],
            )
        return order_total

    def _client_debt(self, cursor, client_id: int) -> int:
        debt = self._gateway.fetch_value(
            cursor,
            "read_client_debt",
            "SELECT debt_cents FROM client WHERE id = %s",
            [client_id],
        )
        if debt is None:
            raise NotFoundError("client", client_id)
        return int(debt)

    def _refresh_snapshot(self, cursor, order_id: int, client_id: int) -> int:
        debt = self._client_debt(cursor, client_id)
        self._gateway.execute(
            cursor,
            "write_debt_snapshot",
            'UPDATE "order" SET client_debt_snapshot_cents = %s WHERE id = %s',
            [debt, order_id],
        )
        return debt

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def create_order(self, draft: OrderDraft) -> Order:
        now = self._clock.now_utc()
        stamp = to_storage_text(now)
        issue_date = draft.issue_date or now

        with self._gateway.atomic() as cursor:
            order_number = next_document_number(self._gateway, cursor, ORDER_NUMBERING, now.year)
            self._client_debt(cursor, draft.client_id)

            order_id = self._gateway.insert(
                cursor,
                "insert_order",
                'INSERT INTO "order" (order_number, client_id, status, notes, discount_percent, '
                "issue_date, due_date, client_debt_snapshot_cents, created_at, updated_at) "
                "VALUES (%s, %s, %s, %s, %s, %s, %s, NULL, %s, %s)",
                [
                    order_number,
                    draft.client_id,
                    ORDER_STATUS_PENDING,
                    draft.notes,
                    draft.discount_percent,
                    to_storage_text(issue_date),
                    to_storage_text(draft.due_date),
                    stamp,
                    stamp,
                ],
            )

            order_total = self._insert_items(cursor, order_id, draft.items)

            if order_total > 0:
                self._gateway.execute(
                    cursor,
                    "increase_client_debt",
                    "UPDATE client SET debt_cents = debt_cents + %s, updated_at = %s WHERE id = %s",
                    [order_total, stamp, draft.client_id],
                )

            snapshot = self._refresh_snapshot(cursor, order_id, draft.client_id)
            order = Order.from_row(self._load_header(cursor, order_id))

        logger.info(
            f"Created order {order_number} for client {draft.client_id}: "
            f"total={order_total} debt_snapshot={snapshot}"
        )
        return order

    def update_order(self, update: OrderUpdate) -> Order:
        stamp = to_storage_text(self._clock.now_utc())

        with self._gateway.atomic() as cursor:
            header = self._load_header(cursor, update.order_id)
            client_id = header["client_id"]
            previous_total = self._item_total(cursor, update.order_id)

            changes = {
                column: _storage_value(value)
                for column, value in update.header_changes().items()
                if column in UPDATABLE_COLUMNS
            }
            if changes:
                assignments = ", ".join(f"{column} = %s" for column in changes)
                self._gateway.execute(
                    cursor,
                    "patch_order",
                    f'UPDATE "order" SET {assignments}, updated_at = %s WHERE id = %s',
                    list(changes.values()) + [stamp, update.order_id],
                )

            new_total = previous_total
            if update.replaces_items:
                self._gateway.execute(
                    cursor,
                    "delete_order_items",
                    "DELETE FROM order_item WHERE order_id = %s",
                    [update.order_id],
                )
                new_total = self._insert_items(cursor, update.order_id, update.items)

            # Debt is not reconciled on update; only the snapshot moves.
            snapshot = self._refresh_snapshot(cursor, update.order_id, client_id)
            order = Order.from_row(self._load_header(cursor, update.order_id))

        logger.info(
            f"Updated order {order.order_number}: fields={sorted(changes)} "
            f"items_replaced={update.replaces_items} total {previous_total}->{new_total} "
            f"debt_snapshot={snapshot}"
        )
        return order

    def cancel_order_and_adjust_debt(self, order_id: int) -> int:
        """
        Cancel an order. Returns the amount actually subtracted from the
        client's debt: 0 when already canceled, when an invoice or payment
        references the order, or when the order total is 0.
        """
        stamp = to_storage_text(self._clock.now_utc())

        with self._gateway.atomic() as cursor:
            header = self._load_header(cursor, order_id)
            if header["status"] == ORDER_STATUS_CANCELED:
                return 0
            client_id = header["client_id"]

            total = self._item_total(cursor, order_id)
            invoice_count = self._gateway.fetch_value(
                cursor,
                "count_order_invoices",
                "SELECT COUNT(*) FROM invoice WHERE order_id = %s",
                [order_id],
            )
            payment_count = self._gateway.fetch_value(
                cursor,
                "count_order_payments",
                "SELECT COUNT(p.id) FROM payment p JOIN invoice i ON p.invoice_id = i.id "
                "WHERE i.order_id = %s",
                [order_id],
            )

            self._gateway.execute(
                cursor,
                "cancel_order",
                'UPDATE "order" SET status = %s, updated_at = %s WHERE id = %s',
                [ORDER_STATUS_CANCELED, stamp, order_id],
            )

            adjusted = 0
            if invoice_count == 0 and payment_count == 0 and total > 0:
                debt_before = self._client_debt(cursor, client_id)
                self._gateway.execute(
                    cursor,
                    "decrease_client_debt",
                    "UPDATE client SET debt_cents = CASE WHEN debt_cents - %s < 0 THEN 0 "
                    "ELSE debt_cents - %s END, updated_at = %s WHERE id = %s",
                    [total, total, stamp, client_id],
                )
                adjusted = min(total, debt_before)

            snapshot = self._refresh_snapshot(cursor, order_id, client_id)

        if adjusted:
            logger.info(
                f"Canceled order {header['order_number']}: debt reduced by {adjusted} "
                f"(snapshot {snapshot})."
            )
        else:
            logger.info(
                f"Canceled order {header['order_number']} without debt change "
                f"(invoices={invoice_count}, payments={payment_count}, total={total})."
            )
        return adjusted

    def delete_canceled_orders_for_client(self, client_id: int) -> int:
        """Purge every CANCELED order of a client with its items. Returns orders removed."""
        with self._gateway.atomic() as cursor:
            rows = self._gateway.fetch_all(
                cursor,
                "collect_canceled_orders",
                'SELECT id FROM "order" WHERE client_id = %s AND status = %s',
                [client_id, ORDER_STATUS_CANCELED],
            )
            order_ids = [row["id"] for row in rows]
            if not order_ids:
                return 0

            placeholders = ", ".join(["%s"] * len(order_ids))
            self._gateway.execute(
                cursor,
                "purge_order_items",
                f"DELETE FROM order_item WHERE order_id IN ({placeholders})",
                order_ids,
            )
            self._gateway.execute(
                cursor,
                "purge_orders",
                f'DELETE FROM "order" WHERE id IN ({placeholders})',
                order_ids,
            )

        logger.info(f"Purged {len(order_ids)} canceled order(s) for client {client_id}.")
        return len(order_ids)

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_order(self, order_id: int) -> Order:
        with self._gateway.reading() as cursor:
            return Order.from_row(self._load_header(cursor, order_id))

    def get_order_detail(self, order_id: int) -> OrderDetail:
        with self._gateway.reading() as cursor:
            order = Order.from_row(self._load_header(cursor, order_id))
            client_row = self._gateway.fetch_one(
                cursor,
                "load_order_client",
                "SELECT id, name, phone, address, debt_cents, created_at, updated_at "
                "FROM client WHERE id = %s",
                [order.client_id],
            )
            if client_row is None:
                raise NotFoundError("client", order.client_id)
            items = self._load_items(cursor, order_id)
        return self._detail(order, Client.from_row(client_row), items)

    def list_orders(
        self,
        filters: Optional[OrderFilters] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[OrderDetail]:
        filters = filters or OrderFilters()
        conditions: List[str] = []
        params: list = []
        if filters.client_id is not None:
            conditions.append("o.client_id = %s")
            params.append(filters.client_id)
        if filters.status is not None:
            conditions.append("o.status = %s")
            params.append(filters.status)
        if filters.query:
            conditions.append("(o.order_number LIKE %s OR c.name LIKE %s)")
            pattern = f"%{filters.query}%"
            params.extend([pattern, pattern])
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        with self._gateway.reading() as cursor:
            total = self._gateway.fetch_value(
                cursor,
                "count_orders",
                f'SELECT COUNT(*) FROM "order" o JOIN client c ON o.client_id = c.id {where}',
                params,
            )
            rows = self._gateway.fetch_all(
                cursor,
                "list_orders",
                "SELECT o.id, o.order_number, o.client_id, o.status, o.notes, "
                "o.discount_percent, o.issue_date, o.due_date, o.client_debt_snapshot_cents, "
                "o.created_at, o.updated_at, "
                "c.name AS client_name, c.phone AS client_phone, "
                "c.address AS client_address, c.debt_cents AS client_debt_cents, "
                "c.created_at AS client_created_at, c.updated_at AS client_updated_at "
                f'FROM "order" o JOIN client c ON o.client_id = c.id {where} '
                f"ORDER BY {filters.order_by} LIMIT %s OFFSET %s",
                params + [limit, offset],
            )
            details = []
            for row in rows:
                client = Client.from_row(row, prefix="client_")
                items = self._load_items(cursor, row["id"])
                details.append(self._detail(Order.from_row(row), client, items))

        return Page(items=tuple(details), total=int(total or 0), limit=limit, offset=offset)

    def has_active_orders_for_client(self, client_id: int) -> bool:
        with self._gateway.reading() as cursor:
            count = self._gateway.fetch_value(
                cursor,
                "count_active_orders",
                'SELECT COUNT(*) FROM "order" WHERE client_id = %s AND status != %s',
                [client_id, ORDER_STATUS_CANCELED],
            )
        return int(count or 0) > 0

    def product_order_usage(self, product_id: int) -> Tuple[int, int]:
        """(item rows referencing the product, non-canceled orders using it)."""
        with self._gateway.reading() as cursor:
            total = self._gateway.fetch_value(
                cursor,
                "count_product_items",
                "SELECT COUNT(*) FROM order_item WHERE product_id = %s",
                [product_id],
            )
            active = self._gateway.fetch_value(
                cursor,
                "count_product_active_orders",
                'SELECT COUNT(DISTINCT o.id) FROM order_item oi JOIN "order" o '
                "ON oi.order_id = o.id WHERE oi.product_id = %s AND o.status != %s",
                [product_id, ORDER_STATUS_CANCELED],
            )
        return int(total or 0), int(active or 0)

    @staticmethod
    def _detail(order: Order, client: Client, items: List[OrderItem]) -> OrderDetail:
        # Order views never apply the order-level discount.
        return OrderDetail(
            order=order,
            client=client,
            items=tuple(items),
            totals=calc_order_totals(items, 0, 0),
        )
