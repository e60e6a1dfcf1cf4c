"""
OrderDesk Command Layer — Rejection Model
==========================================
Structured rejection reasons for requests that fail validation.

A rejection is produced by a policy before any storage transaction
opens. It carries:
- code:        machine-readable (ReasonCode constant)
- message:     human-readable, already localized
- policy_name: the policy that refused the request
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a refused request.

    Fields:
        code:        Machine-readable rejection code (e.g. 'ITEMS_REQUIRED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE. Every code has a message in
    core.commands.messages for each supported locale.
    """

    # ── Identity ──────────────────────────────────────────────
    INVALID_ID = "INVALID_ID"
    CLIENT_REQUIRED = "CLIENT_REQUIRED"
    NAME_REQUIRED = "NAME_REQUIRED"

    # ── Line items ────────────────────────────────────────────
    ITEMS_REQUIRED = "ITEMS_REQUIRED"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_UNIT_PRICE = "INVALID_UNIT_PRICE"
    ITEM_NAME_REQUIRED = "ITEM_NAME_REQUIRED"
    INVALID_PRICE = "INVALID_PRICE"

    # ── Percentages ───────────────────────────────────────────
    INVALID_DISCOUNT = "INVALID_DISCOUNT"
    INVALID_TAX = "INVALID_TAX"

    # ── Status / lifecycle ────────────────────────────────────
    INVALID_ORDER_STATUS = "INVALID_ORDER_STATUS"
    INVALID_INVOICE_STATUS = "INVALID_INVOICE_STATUS"
    ORDER_COMPLETED = "ORDER_COMPLETED"

    # ── Payments / debt ───────────────────────────────────────
    INVALID_PAYMENT_AMOUNT = "INVALID_PAYMENT_AMOUNT"
    INVALID_PAYMENT_METHOD = "INVALID_PAYMENT_METHOD"
    INVALID_DEBT_ADJUSTMENT = "INVALID_DEBT_ADJUSTMENT"

    # ── Deletion guards ───────────────────────────────────────
    CLIENT_HAS_ACTIVE_ORDERS = "CLIENT_HAS_ACTIVE_ORDERS"
    PRODUCT_IN_USE = "PRODUCT_IN_USE"
    CLIENT_STILL_REFERENCED = "CLIENT_STILL_REFERENCED"
