"""
OrderDesk Command Layer — Domain Errors
========================================
Errors raised across the service boundary.

Four kinds reach callers:
- ValidationError:      a policy refused the request (no transaction opened)
- NotFoundError:        a referenced row does not exist
- DeletionBlockedError: a delete is blocked by existing references
- StorageError:         see core.storage.errors
"""

from __future__ import annotations

from core.commands.rejection import RejectionReason


class OrderDeskError(Exception):
    """Base error for OrderDesk domain operations."""
    pass


class ValidationError(OrderDeskError):
    """A request failed validation before reaching storage."""

    def __init__(self, rejection: RejectionReason):
        self.rejection = rejection
        super().__init__(rejection.message)

    @property
    def code(self) -> str:
        return self.rejection.code


class NotFoundError(OrderDeskError):
    """A referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found.")


class DeletionBlockedError(OrderDeskError):
    """A delete was refused because other rows still depend on the target."""

    def __init__(self, entity: str, entity_id: int, rejection: RejectionReason):
        self.entity = entity
        self.entity_id = entity_id
        self.rejection = rejection
        super().__init__(rejection.message)

    @property
    def code(self) -> str:
        return self.rejection.code
