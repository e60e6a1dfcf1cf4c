"""OrderDesk Products — Row Models"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from core.time.clock import from_storage_text


@dataclass(frozen=True)
class Product:
    id: int
    sku: Optional[str]
    name: str
    description: Optional[str]
    unit_price_cents: int
    currency: str
    active: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        return cls(
            id=row["id"],
            sku=row.get("sku"),
            name=row["name"],
            description=row.get("description"),
            unit_price_cents=row["unit_price_cents"],
            currency=row["currency"],
            active=bool(row["active"]),
            created_at=from_storage_text(row.get("created_at")),
            updated_at=from_storage_text(row.get("updated_at")),
        )
