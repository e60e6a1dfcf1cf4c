"""
OrderDesk Orders — Policies
============================
Order-specific rules. Shared line and percent rules live in core.policy.
"""

from typing import Optional

from core.commands.messages import message_for
from core.commands.rejection import ReasonCode, RejectionReason
from engines.orders.models import ORDER_STATUS_COMPLETED, ORDER_STATUSES


def order_status_must_be_known_policy(
    status: Optional[str],
    locale: str = "en",
) -> Optional[RejectionReason]:
    if status is not None and status not in ORDER_STATUSES:
        return RejectionReason(
            code=ReasonCode.INVALID_ORDER_STATUS,
            message=message_for(ReasonCode.INVALID_ORDER_STATUS, locale, status=status),
            policy_name="order_status_must_be_known_policy",
        )
    return None


def order_must_not_be_completed_policy(
    status: str,
    locale: str = "en",
) -> Optional[RejectionReason]:
    """Completed orders are settled; they cannot be canceled."""
    if status == ORDER_STATUS_COMPLETED:
        return RejectionReason(
            code=ReasonCode.ORDER_COMPLETED,
            message=message_for(ReasonCode.ORDER_COMPLETED, locale),
            policy_name="order_must_not_be_completed_policy",
        )
    return None

