"""
OrderDesk Products — Policies
==============================
"""

from typing import Optional

from core.commands.messages import message_for
from core.commands.rejection import ReasonCode, RejectionReason
from core.money.totals import validate_price


def price_must_not_be_negative_policy(
    unit_price_cents: int,
    locale: str = "en",
) -> Optional[RejectionReason]:
    if not isinstance(unit_price_cents, int) or not validate_price(unit_price_cents):
        return RejectionReason(
            code=ReasonCode.INVALID_PRICE,
            message=message_for(ReasonCode.INVALID_PRICE, locale),
            policy_name="price_must_not_be_negative_policy",
        )
    return None


def product_must_not_be_in_use_policy(
    active_order_count: int,
    locale: str = "en",
) -> Optional[RejectionReason]:
    """Products used by non-canceled orders cannot be deleted."""
    if active_order_count > 0:
        return product_in_use_rejection(locale)
    return None


def product_in_use_rejection(locale: str = "en") -> RejectionReason:
    return RejectionReason(
        code=ReasonCode.PRODUCT_IN_USE,
        message=message_for(ReasonCode.PRODUCT_IN_USE, locale),
        policy_name="product_must_not_be_in_use_policy",
    )
