"""OrderDesk Orders - application service."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from django.db import transaction

from core.commands.errors import NotFoundError
from core.config.options import OrderDeskOptions
from core.money.totals import validate_percent
from core.policy.common import (
    discount_must_be_in_range_policy,
    enforce,
    id_must_be_positive_policy,
    line_items_must_be_valid_policy,
    line_items_required_policy,
)
from core.storage.paging import Page
from engines.clients.store import ClientStore
from engines.orders.commands import OrderDraft, OrderFilters, OrderItemDraft, OrderUpdate
from engines.orders.ledger import OrderLedger
from engines.orders.models import ORDER_STATUS_CANCELED, ORDER_STATUSES, Order, OrderDetail
from engines.orders.policies import (
    order_must_not_be_completed_policy,
    order_status_must_be_known_policy,
)

logger = logging.getLogger("orderdesk.orders")


class OrderService:
    """Validates order requests, then delegates to the ledger."""

    def __init__(
        self,
        ledger: OrderLedger,
        clients: ClientStore,
        options: Optional[OrderDeskOptions] = None,
    ) -> None:
        self._ledger = ledger
        self._clients = clients
        self._options = options or OrderDeskOptions()

    @property
    def _locale(self) -> str:
        return self._options.locale

    def _with_default_currency(self, items: Tuple[OrderItemDraft, ...]) -> Tuple[OrderItemDraft, ...]:
        default = self._options.default_item_currency
        return tuple(item if item.currency else replace(item, currency=default) for item in items)

    def create(self, draft: OrderDraft) -> Order:
        enforce([
            id_must_be_positive_policy(draft.client_id, "client", self._locale),
            line_items_required_policy(draft.items, self._locale),
            line_items_must_be_valid_policy(draft.items, self._locale),
        ])

        discount = draft.discount_percent
        if not validate_percent(discount):
            logger.info(f"Order discount {discount} out of range; stored as 0.")
            discount = 0

        if not self._clients.exists(draft.client_id):
            raise NotFoundError("client", draft.client_id)

        return self._ledger.create_order(
            replace(
                draft,
                items=self._with_default_currency(draft.items),
                discount_percent=discount,
            )
        )

    def update(self, update: OrderUpdate) -> Order:
        enforce([
            id_must_be_positive_policy(update.order_id, "order", self._locale),
            order_status_must_be_known_policy(update.status, self._locale),
            discount_must_be_in_range_policy(update.discount_percent, self._locale),
            line_items_must_be_valid_policy(update.items or (), self._locale),
        ])

        current = self._ledger.get_order(update.order_id)
        if update.items:
            update = replace(update, items=self._with_default_currency(update.items))

        # Cancel and patch commit as one unit.
        with transaction.atomic(using=self._options.database_alias):
            if update.status == ORDER_STATUS_CANCELED and not current.is_canceled:
                # Cancellation goes through the ledger path that reverses debt.
                self.cancel(update.order_id)
                update = replace(update, status=None)
            return self._ledger.update_order(update)

    def cancel(self, order_id: int) -> int:
        """Cancel an order. Returns the debt amount reversed."""
        enforce([id_must_be_positive_policy(order_id, "order", self._locale)])
        order = self._ledger.get_order(order_id)
        enforce([order_must_not_be_completed_policy(order.status, self._locale)])
        return self._ledger.cancel_order_and_adjust_debt(order_id)

    def get(self, order_id: int) -> OrderDetail:
        enforce([id_must_be_positive_policy(order_id, "order", self._locale)])
        return self._ledger.get_order_detail(order_id)

    def list(
        self,
        filters: Optional[OrderFilters] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page[OrderDetail]:
        limit, offset = self._options.clamp_page(limit, offset)
        return self._ledger.list_orders(filters, limit, offset)

    def purge_canceled_for_client(self, client_id: int) -> int:
        enforce([id_must_be_positive_policy(client_id, "client", self._locale)])
        return self._ledger.delete_canceled_orders_for_client(client_id)

    def order_statuses(self) -> List[str]:
        return list(ORDER_STATUSES)
