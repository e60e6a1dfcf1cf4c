"""
OrderDesk Documents - Numbering Engine
=======================================
The next sequence is the highest sequence already issued in the same
year, plus one. The lookup runs inside the caller's transaction.

Purged documents never free their number. Numbers are monotonic for a
single writer; they are not gap-free and not collision-free under
concurrent writers.
"""

from __future__ import annotations

from core.documents.numbering.models import NumberingPolicy


def next_document_number(gateway, cursor, policy: NumberingPolicy, year: int) -> str:
    year_prefix = policy.year_prefix(year)
    highest = gateway.fetch_value(
        cursor,
        f"number_{policy.prefix.lower()}",
        f"SELECT MAX(CAST(SUBSTR({policy.column}, %s) AS INTEGER)) "
        f"FROM {policy.table} WHERE {policy.column} LIKE %s",
        [len(year_prefix) + 1, year_prefix + "%"],
    )
    return policy.format(year, int(highest or 0) + 1)
