"""
OrderDesk Clients — application service
========================================
Client deletion follows a remediation flow:
1. Refuse while any non-canceled order references the client
2. Try the delete
3. If foreign keys block it, purge the client's canceled orders and retry once
4. If still blocked, report DeletionBlockedError
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from core.commands.errors import DeletionBlockedError
from core.config.options import OrderDeskOptions
from core.policy.common import enforce, id_must_be_positive_policy, name_must_be_present_policy
from core.storage.errors import StorageIntegrityError
from core.storage.paging import Page
from engines.clients.commands import ClientDraft, ClientUpdate, DebtAdjustmentRequest
from engines.clients.models import Client, DebtPayment
from engines.clients.policies import (
    client_must_be_unreferenced_rejection,
    client_must_not_have_active_orders_policy,
    debt_adjustment_must_be_nonzero_policy,
)
from engines.clients.store import ClientStore
from engines.orders.ledger import OrderLedger

logger = logging.getLogger("orderdesk.clients")


class ClientService:
    def __init__(
        self,
        store: ClientStore,
        ledger: OrderLedger,
        options: Optional[OrderDeskOptions] = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._options = options or OrderDeskOptions()

    @property
    def _locale(self) -> str:
        return self._options.locale

    def create(self, draft: ClientDraft) -> Client:
        enforce([name_must_be_present_policy(draft.name, self._locale)])
        return self._store.create(draft)

    def get(self, client_id: int) -> Client:
        enforce([id_must_be_positive_policy(client_id, "client", self._locale)])
        return self._store.get(client_id)

    def list(
        self,
        query: str = "",
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page[Client]:
        limit, offset = self._options.clamp_page(limit, offset)
        return self._store.list(query, limit, offset)

    def update(self, update: ClientUpdate) -> Client:
        enforce([
            id_must_be_positive_policy(update.client_id, "client", self._locale),
            name_must_be_present_policy(update.name, self._locale),
        ])
        return self._store.update(update)

    def adjust_debt(self, request: DebtAdjustmentRequest) -> Tuple[Client, DebtPayment]:
        """Apply a signed debt change, clamped at zero, and record it."""
        enforce([
            id_must_be_positive_policy(request.client_id, "client", self._locale),
            debt_adjustment_must_be_nonzero_policy(request.delta_cents, self._locale),
        ])
        return self._store.adjust_debt(request)

    def list_debt_payments(
        self,
        client_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page[DebtPayment]:
        if client_id is not None:
            enforce([id_must_be_positive_policy(client_id, "client", self._locale)])
        limit, offset = self._options.clamp_page(limit, offset)
        return self._store.list_debt_payments(client_id, limit, offset)

    def delete(self, client_id: int) -> None:
        enforce([id_must_be_positive_policy(client_id, "client", self._locale)])
        self._store.get(client_id)

        rejection = client_must_not_have_active_orders_policy(
            self._ledger.has_active_orders_for_client(client_id), self._locale
        )
        if rejection is not None:
            raise DeletionBlockedError("client", client_id, rejection)

        try:
            self._store.delete(client_id)
            return
        except StorageIntegrityError as exc:
            logger.info(
                f"Client {client_id} delete blocked ({exc.cause}); purging canceled orders."
            )

        try:
            purged = self._ledger.delete_canceled_orders_for_client(client_id)
            self._store.delete(client_id)
        except StorageIntegrityError as exc:
            raise DeletionBlockedError(
                "client", client_id, client_must_be_unreferenced_rejection(self._locale)
            ) from exc
        logger.info(f"Client {client_id} deleted after purging {purged} canceled order(s).")
