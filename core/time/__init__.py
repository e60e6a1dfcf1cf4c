"""
OrderDesk Core Time — Public API
=================================
Explicit clock protocol. Ledgers receive a Clock at construction.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    from_storage_text,
    to_storage_text,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "from_storage_text",
    "to_storage_text",
]
