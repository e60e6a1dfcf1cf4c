"""
OrderDesk Clients — Row Models
===============================
Frozen views of client and debt_payment rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from core.time.clock import from_storage_text


@dataclass(frozen=True)
class Client:
    id: int
    name: str
    phone: Optional[str]
    address: Optional[str]
    debt_cents: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Dict[str, Any], prefix: str = "") -> "Client":
        """Build from a dict row; joined queries alias client columns with a prefix."""
        return cls(
            id=row[f"{prefix}id"],
            name=row[f"{prefix}name"],
            phone=row.get(f"{prefix}phone"),
            address=row.get(f"{prefix}address"),
            debt_cents=row[f"{prefix}debt_cents"] or 0,
            created_at=from_storage_text(row.get(f"{prefix}created_at")),
            updated_at=from_storage_text(row.get(f"{prefix}updated_at")),
        )


@dataclass(frozen=True)
class DebtPayment:
    """One manual debt adjustment. Negative amounts reduce the debt."""

    id: int
    client_id: int
    amount_cents: int
    notes: Optional[str]
    created_at: Optional[datetime]
    client_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DebtPayment":
        return cls(
            id=row["id"],
            client_id=row["client_id"],
            amount_cents=row["amount_cents"],
            notes=row.get("notes"),
            created_at=from_storage_text(row.get("created_at")),
            client_name=row.get("client_name"),
        )
