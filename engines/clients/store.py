"""
OrderDesk Clients — Store
==========================
SQL access for client rows and manual debt adjustments.

Debt adjustments clamp so the balance never drops below zero, and each
one writes a debt_payment row in the same transaction.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from core.commands.errors import NotFoundError
from core.storage.gateway import StorageGateway
from core.storage.paging import Page
from core.time.clock import Clock, SystemClock, to_storage_text
from engines.clients.commands import ClientDraft, ClientUpdate, DebtAdjustmentRequest
from engines.clients.models import Client, DebtPayment

logger = logging.getLogger("orderdesk.clients")

CLIENT_COLUMNS = "id, name, phone, address, debt_cents, created_at, updated_at"


class ClientStore:
    def __init__(self, gateway: StorageGateway, clock: Optional[Clock] = None) -> None:
        self._gateway = gateway
        self._clock = clock or SystemClock()

    def _now(self) -> str:
        return to_storage_text(self._clock.now_utc())

    def _load(self, cursor, client_id: int) -> Client:
        row = self._gateway.fetch_one(
            cursor,
            "load_client",
            f"SELECT {CLIENT_COLUMNS} FROM client WHERE id = %s",
            [client_id],
        )
        if row is None:
            raise NotFoundError("client", client_id)
        return Client.from_row(row)

    # ── Writes ────────────────────────────────────────────────

    def create(self, draft: ClientDraft) -> Client:
        now = self._now()
        with self._gateway.atomic() as cursor:
            client_id = self._gateway.insert(
                cursor,
                "insert_client",
                "INSERT INTO client (name, phone, address, debt_cents, created_at, updated_at) "
                "VALUES (%s, %s, %s, 0, %s, %s)",
                [draft.name, draft.phone, draft.address, now, now],
            )
            client = self._load(cursor, client_id)
        logger.info(f"Created client {client.id} ({client.name}).")
        return client

    def update(self, update: ClientUpdate) -> Client:
        with self._gateway.atomic() as cursor:
            changed = self._gateway.execute(
                cursor,
                "update_client",
                "UPDATE client SET name = %s, phone = %s, address = %s, updated_at = %s "
                "WHERE id = %s",
                [update.name, update.phone, update.address, self._now(), update.client_id],
            )
            if changed == 0:
                raise NotFoundError("client", update.client_id)
            return self._load(cursor, update.client_id)

    def delete(self, client_id: int) -> None:
        """Raises StorageIntegrityError when other rows still reference the client."""
        with self._gateway.atomic() as cursor:
            deleted = self._gateway.execute(
                cursor, "delete_client", "DELETE FROM client WHERE id = %s", [client_id]
            )
            if deleted == 0:
                raise NotFoundError("client", client_id)
        logger.info(f"Deleted client {client_id}.")

    def adjust_debt(self, request: DebtAdjustmentRequest) -> Tuple[Client, DebtPayment]:
        now = self._now()
        with self._gateway.atomic() as cursor:
            current = self._load(cursor, request.client_id)
            delta = request.delta_cents
            if current.debt_cents + delta < 0:
                delta = -current.debt_cents
            self._gateway.execute(
                cursor,
                "adjust_client_debt",
                "UPDATE client SET debt_cents = debt_cents + %s, updated_at = %s WHERE id = %s",
                [delta, now, request.client_id],
            )
            payment_id = self._gateway.insert(
                cursor,
                "insert_debt_payment",
                "INSERT INTO debt_payment (client_id, amount_cents, notes, created_at) "
                "VALUES (%s, %s, %s, %s)",
                [request.client_id, delta, request.notes, now],
            )
            client = self._load(cursor, request.client_id)
            payment_row = self._gateway.fetch_one(
                cursor,
                "load_debt_payment",
                "SELECT id, client_id, amount_cents, notes, created_at "
                "FROM debt_payment WHERE id = %s",
                [payment_id],
            )
        if delta != request.delta_cents:
            logger.info(
                f"Debt adjustment for client {request.client_id} clamped "
                f"from {request.delta_cents} to {delta}."
            )
        return client, DebtPayment.from_row(payment_row)

    # ── Reads ─────────────────────────────────────────────────

    def get(self, client_id: int) -> Client:
        with self._gateway.reading() as cursor:
            return self._load(cursor, client_id)

    def exists(self, client_id: int) -> bool:
        with self._gateway.reading() as cursor:
            found = self._gateway.fetch_value(
                cursor, "client_exists", "SELECT 1 FROM client WHERE id = %s", [client_id]
            )
        return found is not None

    def list(self, query: str, limit: int, offset: int) -> Page[Client]:
        pattern = f"%{query or ''}%"
        with self._gateway.reading() as cursor:
            total = self._gateway.fetch_value(
                cursor,
                "count_clients",
                "SELECT COUNT(*) FROM client WHERE name LIKE %s",
                [pattern],
            )
            rows = self._gateway.fetch_all(
                cursor,
                "list_clients",
                f"SELECT {CLIENT_COLUMNS} FROM client WHERE name LIKE %s "
                "ORDER BY name LIMIT %s OFFSET %s",
                [pattern, limit, offset],
            )
        return Page(
            items=tuple(Client.from_row(row) for row in rows),
            total=int(total or 0),
            limit=limit,
            offset=offset,
        )

    def list_debt_payments(
        self, client_id: Optional[int], limit: int, offset: int
    ) -> Page[DebtPayment]:
        """All adjustments newest first, optionally for one client."""
        where = ""
        params: list = []
        if client_id is not None:
            where = "WHERE dp.client_id = %s"
            params.append(client_id)
        with self._gateway.reading() as cursor:
            total = self._gateway.fetch_value(
                cursor,
                "count_debt_payments",
                f"SELECT COUNT(*) FROM debt_payment dp {where}",
                params,
            )
            rows = self._gateway.fetch_all(
                cursor,
                "list_debt_payments",
                "SELECT dp.id, dp.client_id, dp.amount_cents, dp.notes, dp.created_at, "
                "c.name AS client_name "
                f"FROM debt_payment dp JOIN client c ON c.id = dp.client_id {where} "
                "ORDER BY dp.created_at DESC, dp.id DESC LIMIT %s OFFSET %s",
                params + [limit, offset],
            )
        return Page(
            items=tuple(DebtPayment.from_row(row) for row in rows),
            total=int(total or 0),
            limit=limit,
            offset=offset,
        )
