"""
OrderDesk Clients — Commands
=============================
Request structures for client maintenance and debt adjustment.
Business validation happens in the service; these only normalize.
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
class ClientDraft:
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "name", (self.name or "").strip())
        object.__setattr__(self, "phone", _clean(self.phone))
        object.__setattr__(self, "address", _clean(self.address))


@dataclass(frozen=True)
class ClientUpdate:
    """Full replacement of a client's editable fields. Debt is never set here."""
    client_id: int
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "name", (self.name or "").strip())
        object.__setattr__(self, "phone", _clean(self.phone))
        object.__setattr__(self, "address", _clean(self.address))


@dataclass(frozen=True)
class DebtAdjustmentRequest:
    """Signed change to a client's debt: positive adds debt, negative records a payment."""
    client_id: int
    delta_cents: int
    notes: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.delta_cents, int):
            raise ValueError("delta_cents must be an integer number of cents.")
        object.__setattr__(self, "notes", _clean(self.notes))
