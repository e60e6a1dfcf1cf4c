"""
OrderDesk Products — Store
===========================
SQL access for product rows.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.commands.errors import NotFoundError
from core.storage.gateway import StorageGateway
from core.storage.paging import Page
from core.time.clock import Clock, SystemClock, to_storage_text
from engines.products.commands import ProductDraft, ProductUpdate
from engines.products.models import Product

logger = logging.getLogger("orderdesk.products")

PRODUCT_COLUMNS = (
    "id, sku, name, description, unit_price_cents, currency, active, created_at, updated_at"
)


class ProductStore:
    def __init__(self, gateway: StorageGateway, clock: Optional[Clock] = None) -> None:
        self._gateway = gateway
        self._clock = clock or SystemClock()

    def _now(self) -> str:
        return to_storage_text(self._clock.now_utc())

    def _load(self, cursor, product_id: int) -> Product:
        row = self._gateway.fetch_one(
            cursor,
            "load_product",
            f"SELECT {PRODUCT_COLUMNS} FROM product WHERE id = %s",
            [product_id],
        )
        if row is None:
            raise NotFoundError("product", product_id)
        return Product.from_row(row)

    def create(self, draft: ProductDraft) -> Product:
        now = self._now()
        with self._gateway.atomic() as cursor:
            product_id = self._gateway.insert(
                cursor,
                "insert_product",
                "INSERT INTO product (sku, name, description, unit_price_cents, currency, "
                "active, created_at, updated_at) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
                [
                    draft.sku,
                    draft.name,
                    draft.description,
                    draft.unit_price_cents,
                    draft.currency,
                    1 if draft.active else 0,
                    now,
                    now,
                ],
            )
            product = self._load(cursor, product_id)
        logger.info(f"Created product {product.id} ({product.name}).")
        return product

    def update(self, update: ProductUpdate) -> Product:
        with self._gateway.atomic() as cursor:
            changed = self._gateway.execute(
                cursor,
                "update_product",
                "UPDATE product SET sku = %s, name = %s, description = %s, "
                "unit_price_cents = %s, currency = %s, active = %s, updated_at = %s "
                "WHERE id = %s",
                [
                    update.sku,
                    update.name,
                    update.description,
                    update.unit_price_cents,
                    update.currency,
                    1 if update.active else 0,
                    self._now(),
                    update.product_id,
                ],
            )
            if changed == 0:
                raise NotFoundError("product", update.product_id)
            return self._load(cursor, update.product_id)

    def set_active(self, product_id: int, active: bool) -> Product:
        with self._gateway.atomic() as cursor:
            changed = self._gateway.execute(
                cursor,
                "set_product_active",
                "UPDATE product SET active = %s, updated_at = %s WHERE id = %s",
                [1 if active else 0, self._now(), product_id],
            )
            if changed == 0:
                raise NotFoundError("product", product_id)
            return self._load(cursor, product_id)

    def delete(self, product_id: int) -> None:
        """Raises StorageIntegrityError while order or invoice items still reference it."""
        with self._gateway.atomic() as cursor:
            deleted = self._gateway.execute(
                cursor, "delete_product", "DELETE FROM product WHERE id = %s", [product_id]
            )
            if deleted == 0:
                raise NotFoundError("product", product_id)
        logger.info(f"Deleted product {product_id}.")

    def get(self, product_id: int) -> Product:
        with self._gateway.reading() as cursor:
            return self._load(cursor, product_id)

    def list(
        self,
        query: str,
        active: Optional[bool],
        limit: int,
        offset: int,
    ) -> Page[Product]:
        pattern = f"%{query or ''}%"
        where = "WHERE (name LIKE %s OR sku LIKE %s)"
        params: list = [pattern, pattern]
        if active is not None:
            where += " AND active = %s"
            params.append(1 if active else 0)
        with self._gateway.reading() as cursor:
            total = self._gateway.fetch_value(
                cursor, "count_products", f"SELECT COUNT(*) FROM product {where}", params
            )
            rows = self._gateway.fetch_all(
                cursor,
                "list_products",
                f"SELECT {PRODUCT_COLUMNS} FROM product {where} "
                "ORDER BY name LIMIT %s OFFSET %s",
                params + [limit, offset],
            )
        return Page(
            items=tuple(Product.from_row(row) for row in rows),
            total=int(total or 0),
            limit=limit,
            offset=offset,
        )
