"""OrderDesk Products - application service."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from core.commands.errors import DeletionBlockedError
from core.config.options import OrderDeskOptions
from core.policy.common import enforce, id_must_be_positive_policy, name_must_be_present_policy
from core.storage.errors import StorageIntegrityError
from core.storage.paging import Page
from engines.orders.ledger import OrderLedger
from engines.products.commands import ProductDraft, ProductUpdate
from engines.products.models import Product
from engines.products.policies import (
    price_must_not_be_negative_policy,
    product_in_use_rejection,
    product_must_not_be_in_use_policy,
)
from engines.products.store import ProductStore

logger = logging.getLogger("orderdesk.products")


class ProductService:
    def __init__(
        self,
        store: ProductStore,
        ledger: OrderLedger,
        options: Optional[OrderDeskOptions] = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._options = options or OrderDeskOptions()

    @property
    def _locale(self) -> str:
        return self._options.locale

    def create(self, draft: ProductDraft) -> Product:
        enforce([
            name_must_be_present_policy(draft.name, self._locale),
            price_must_not_be_negative_policy(draft.unit_price_cents, self._locale),
        ])
        if not draft.currency:
            draft = replace(draft, currency=self._options.default_product_currency)
        return self._store.create(draft)

    def update(self, update: ProductUpdate) -> Product:
        enforce([
            id_must_be_positive_policy(update.product_id, "product", self._locale),
            name_must_be_present_policy(update.name, self._locale),
            price_must_not_be_negative_policy(update.unit_price_cents, self._locale),
        ])
        if not update.currency:
            update = replace(update, currency=self._options.default_product_currency)
        return self._store.update(update)

    def get(self, product_id: int) -> Product:
        enforce([id_must_be_positive_policy(product_id, "product", self._locale)])
        return self._store.get(product_id)

    def list(
        self,
        query: str = "",
        active: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page[Product]:
        limit, offset = self._options.clamp_page(limit, offset)
        return self._store.list(query, active, limit, offset)

    def activate(self, product_id: int) -> Product:
        enforce([id_must_be_positive_policy(product_id, "product", self._locale)])
        return self._store.set_active(product_id, True)

    def deactivate(self, product_id: int) -> Product:
        enforce([id_must_be_positive_policy(product_id, "product", self._locale)])
        return self._store.set_active(product_id, False)

    def delete(self, product_id: int) -> None:
        enforce([id_must_be_positive_policy(product_id, "product", self._locale)])
        self._store.get(product_id)

        total_rows, active_orders = self._ledger.product_order_usage(product_id)
        rejection = product_must_not_be_in_use_policy(active_orders, self._locale)
        if rejection is not None:
            raise DeletionBlockedError("product", product_id, rejection)

        try:
            self._store.delete(product_id)
        except StorageIntegrityError as exc:
            logger.info(
                f"Product {product_id} delete blocked by references "
                f"({total_rows} order item row(s)): {exc.cause}"
            )
            raise DeletionBlockedError(
                "product", product_id, product_in_use_rejection(self._locale)
            ) from exc
