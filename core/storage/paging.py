"""
OrderDesk Storage — Paged Results
==================================
A page of rows plus the total count matching the same filters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Tuple[T, ...]
    total: int
    limit: int
    offset: int

    def __len__(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total
