"""
OrderDesk Policies — Shared Validation
=======================================
Policies shared by several engines. Each policy returns
Optional[RejectionReason]; enforce() raises on the first rejection.
"""

from core.policy.common import (
    discount_must_be_in_range_policy,
    enforce,
    id_must_be_positive_policy,
    line_items_must_be_valid_policy,
    line_items_required_policy,
    name_must_be_present_policy,
    tax_must_be_in_range_policy,
)

__all__ = [
    "discount_must_be_in_range_policy",
    "enforce",
    "id_must_be_positive_policy",
    "line_items_must_be_valid_policy",
    "line_items_required_policy",
    "name_must_be_present_policy",
    "tax_must_be_in_range_policy",
]
