"""
OrderDesk Products — Commands
==============================
Products are referenced by order and invoice items through snapshots;
editing a product never rewrites historical lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class ProductDraft:
    name: str
    unit_price_cents: int
    sku: Optional[str] = None
    description: Optional[str] = None
    currency: str = ""
    active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "name", (self.name or "").strip())
        object.__setattr__(self, "sku", _clean(self.sku))
        object.__setattr__(self, "description", _clean(self.description))
        object.__setattr__(self, "currency", (self.currency or "").strip().upper())


@dataclass(frozen=True)
class ProductUpdate:
    product_id: int
    name: str
    unit_price_cents: int
    sku: Optional[str] = None
    description: Optional[str] = None
    currency: str = ""
    active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "name", (self.name or "").strip())
        object.__setattr__(self, "sku", _clean(self.sku))
        object.__setattr__(self, "description", _clean(self.description))
        object.__setattr__(self, "currency", (self.currency or "").strip().upper())
