"""
OrderDesk Core Config — Application Options
============================================
Every runtime toggle is a named field here, passed at construction
time to the storage gateway, the ledgers and the services.

OrderDeskOptions.from_settings() reads the ORDERDESK dict from Django
settings once; tests build options directly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from core.commands.messages import supported_locales


@dataclass(frozen=True)
class OrderDeskOptions:
    """
    Fields:
        database_alias:           Django connection alias of the SQLite store.
        migrations_dir:           Optional directory of extra *.up.sql files.
        debug_sql:                Log SQLite version and schema on connect.
        locale:                   Message locale ('en' or 'ar').
        default_item_currency:    Currency for order/invoice lines without one.
        default_product_currency: Currency for products without one.
        default_page_size:        List size when the caller passes none.
        max_page_size:            Upper bound for any list request.
        wal_journal:              Request WAL journal mode for file databases.
    """

    database_alias: str = "default"
    migrations_dir: Optional[str] = None
    debug_sql: bool = False
    locale: str = "en"
    default_item_currency: str = "USD"
    default_product_currency: str = "DZD"
    default_page_size: int = 20
    max_page_size: int = 100
    wal_journal: bool = True

    def __post_init__(self) -> None:
        if not self.database_alias:
            raise ValueError("database_alias must be non-empty.")
        if self.locale not in supported_locales():
            raise ValueError(
                f"locale must be one of {supported_locales()}, got '{self.locale}'."
            )
        if self.default_page_size <= 0 or self.max_page_size <= 0:
            raise ValueError("page sizes must be positive.")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size.")
        if not self.default_item_currency or not self.default_product_currency:
            raise ValueError("default currencies must be non-empty.")

    @classmethod
    def from_settings(cls, settings_obj: Any = None) -> "OrderDeskOptions":
        if settings_obj is None:
            from django.conf import settings as settings_obj
        raw: Dict[str, Any] = dict(getattr(settings_obj, "ORDERDESK", {}) or {})
        defaults = cls()
        return cls(
            database_alias=raw.get("DATABASE_ALIAS", defaults.database_alias),
            migrations_dir=raw.get("MIGRATIONS_DIR", defaults.migrations_dir),
            debug_sql=bool(raw.get("DEBUG_SQL", defaults.debug_sql)),
            locale=raw.get("LOCALE", defaults.locale),
            default_item_currency=raw.get(
                "DEFAULT_ITEM_CURRENCY", defaults.default_item_currency
            ),
            default_product_currency=raw.get(
                "DEFAULT_PRODUCT_CURRENCY", defaults.default_product_currency
            ),
            default_page_size=int(raw.get("DEFAULT_PAGE_SIZE", defaults.default_page_size)),
            max_page_size=int(raw.get("MAX_PAGE_SIZE", defaults.max_page_size)),
            wal_journal=bool(raw.get("WAL_JOURNAL", defaults.wal_journal)),
        )

    def with_overrides(self, **changes: Any) -> "OrderDeskOptions":
        return replace(self, **changes)

    def clamp_page(self, limit: Optional[int], offset: Optional[int]) -> tuple[int, int]:
        """Normalize list paging: default when unset, capped at max_page_size."""
        if limit is None or limit <= 0:
            limit = self.default_page_size
        if limit > self.max_page_size:
            limit = self.max_page_size
        if offset is None or offset < 0:
            offset = 0
        return limit, offset
