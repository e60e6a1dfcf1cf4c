"""
OrderDesk Command Layer
========================
Rejections, localized messages and the domain error taxonomy.
Every request is validated before any transaction opens.
"""

from core.commands.errors import (
    DeletionBlockedError,
    NotFoundError,
    OrderDeskError,
    ValidationError,
)
from core.commands.messages import message_for
from core.commands.rejection import ReasonCode, RejectionReason

__all__ = [
    "DeletionBlockedError",
    "NotFoundError",
    "OrderDeskError",
    "ReasonCode",
    "RejectionReason",
    "ValidationError",
    "message_for",
]
