"""
OrderDesk Invoicing — Policies
===============================
"""

from typing import Optional

from core.commands.messages import message_for
from core.commands.rejection import ReasonCode, RejectionReason
from engines.invoicing.models import INVOICE_STATUSES, PAYMENT_METHODS


def invoice_status_must_be_known_policy(
    status: Optional[str],
    locale: str = "en",
) -> Optional[RejectionReason]:
    if status is not None and status not in INVOICE_STATUSES:
        return RejectionReason(
            code=ReasonCode.INVALID_INVOICE_STATUS,
            message=message_for(ReasonCode.INVALID_INVOICE_STATUS, locale, status=status),
            policy_name="invoice_status_must_be_known_policy",
        )
    return None


def payment_amount_must_be_positive_policy(
    amount_cents: int,
    locale: str = "en",
) -> Optional[RejectionReason]:
    if not isinstance(amount_cents, int) or amount_cents <= 0:
        return RejectionReason(
            code=ReasonCode.INVALID_PAYMENT_AMOUNT,
            message=message_for(ReasonCode.INVALID_PAYMENT_AMOUNT, locale),
            policy_name="payment_amount_must_be_positive_policy",
        )
    return None


def payment_method_must_be_known_policy(
    method: str,
    locale: str = "en",
) -> Optional[RejectionReason]:
    if method not in PAYMENT_METHODS:
        return RejectionReason(
            code=ReasonCode.INVALID_PAYMENT_METHOD,
            message=message_for(ReasonCode.INVALID_PAYMENT_METHOD, locale, method=method),
            policy_name="payment_method_must_be_known_policy",
        )
    return None
