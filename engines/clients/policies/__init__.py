"""
OrderDesk Clients — Policies
=============================
"""

from typing import Optional

from core.commands.messages import message_for
from core.commands.rejection import ReasonCode, RejectionReason


def client_must_not_have_active_orders_policy(
    has_active_orders: bool,
    locale: str = "en",
) -> Optional[RejectionReason]:
    """A client with PENDING, CONFIRMED or COMPLETED orders cannot be deleted."""
    if has_active_orders:
        return RejectionReason(
            code=ReasonCode.CLIENT_HAS_ACTIVE_ORDERS,
            message=message_for(ReasonCode.CLIENT_HAS_ACTIVE_ORDERS, locale),
            policy_name="client_must_not_have_active_orders_policy",
        )
    return None


def client_must_be_unreferenced_rejection(locale: str = "en") -> RejectionReason:
    return RejectionReason(
        code=ReasonCode.CLIENT_STILL_REFERENCED,
        message=message_for(ReasonCode.CLIENT_STILL_REFERENCED, locale),
        policy_name="client_must_be_unreferenced_policy",
    )


def debt_adjustment_must_be_nonzero_policy(
    delta_cents: int,
    locale: str = "en",
) -> Optional[RejectionReason]:
    if delta_cents == 0:
        return RejectionReason(
            code=ReasonCode.INVALID_DEBT_ADJUSTMENT,
            message=message_for(ReasonCode.INVALID_DEBT_ADJUSTMENT, locale),
            policy_name="debt_adjustment_must_be_nonzero_policy",
        )
    return None
