"""
OrderDesk Policies — Common Rules
==================================
Field-level rules used by the order, invoice, client and product
services. They run before any transaction opens.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from core.commands.errors import ValidationError
from core.commands.messages import message_for
from core.commands.rejection import ReasonCode, RejectionReason
from core.money.totals import validate_percent, validate_quantity


def enforce(rejections: Iterable[Optional[RejectionReason]]) -> None:
    """Raise ValidationError for the first rejection produced, if any."""
    for rejection in rejections:
        if rejection is not None:
            raise ValidationError(rejection)


def _reject(code: str, policy_name: str, locale: str, **params) -> RejectionReason:
    return RejectionReason(
        code=code,
        message=message_for(code, locale, **params),
        policy_name=policy_name,
    )


def id_must_be_positive_policy(
    entity_id, entity: str, locale: str = "en"
) -> Optional[RejectionReason]:
    if not isinstance(entity_id, int) or entity_id <= 0:
        code = ReasonCode.CLIENT_REQUIRED if entity == "client" else ReasonCode.INVALID_ID
        return _reject(code, "id_must_be_positive_policy", locale, entity=entity)
    return None


def name_must_be_present_policy(name, locale: str = "en") -> Optional[RejectionReason]:
    if not name or not str(name).strip():
        return _reject(ReasonCode.NAME_REQUIRED, "name_must_be_present_policy", locale)
    return None


def line_items_required_policy(items: Sequence, locale: str = "en") -> Optional[RejectionReason]:
    if not items:
        return _reject(ReasonCode.ITEMS_REQUIRED, "line_items_required_policy", locale)
    return None


def line_items_must_be_valid_policy(
    items: Sequence, locale: str = "en"
) -> Optional[RejectionReason]:
    """Every line needs qty > 0, unit price > 0 and a name snapshot. Lines are numbered from 1."""
    for index, item in enumerate(items, start=1):
        if not validate_quantity(item.qty):
            return _reject(
                ReasonCode.INVALID_QUANTITY,
                "line_items_must_be_valid_policy",
                locale,
                index=index,
            )
        if item.unit_price_cents <= 0:
            return _reject(
                ReasonCode.INVALID_UNIT_PRICE,
                "line_items_must_be_valid_policy",
                locale,
                index=index,
            )
        if not item.name_snapshot or not item.name_snapshot.strip():
            return _reject(
                ReasonCode.ITEM_NAME_REQUIRED,
                "line_items_must_be_valid_policy",
                locale,
                index=index,
            )
        discount = getattr(item, "discount_percent", 0) or 0
        if not validate_percent(discount):
            return _reject(
                ReasonCode.INVALID_DISCOUNT, "line_items_must_be_valid_policy", locale
            )
    return None


def discount_must_be_in_range_policy(
    percent: Optional[int], locale: str = "en"
) -> Optional[RejectionReason]:
    if percent is not None and not validate_percent(percent):
        return _reject(ReasonCode.INVALID_DISCOUNT, "discount_must_be_in_range_policy", locale)
    return None


def tax_must_be_in_range_policy(
    percent: Optional[int], locale: str = "en"
) -> Optional[RejectionReason]:
    if percent is not None and not validate_percent(percent):
        return _reject(ReasonCode.INVALID_TAX, "tax_must_be_in_range_policy", locale)
    return None
