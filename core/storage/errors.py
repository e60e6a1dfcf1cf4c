"""
OrderDesk Storage — Errors
===========================
Every failure inside a transaction surfaces after full rollback and
names the step that failed. Startup failures are fatal: the gateway
refuses to serve until a successful connect().
"""

from __future__ import annotations


class StorageError(Exception):
    """A storage step failed; the enclosing transaction was rolled back."""

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(
            f"Storage step '{step}' failed: {type(cause).__name__}: {cause}"
        )


class StorageIntegrityError(StorageError):
    """A foreign-key or uniqueness constraint refused the write."""
    pass


class MigrationError(Exception):
    """A migration could not be applied or recorded."""

    def __init__(self, version: str, detail: str):
        self.version = version
        self.detail = detail
        super().__init__(f"Migration '{version}' failed: {detail}")


class StorageStartupError(Exception):
    """
    Raised when the store cannot be brought up.

    If this exception is raised the application MUST NOT serve requests.
    """

    def __init__(self, stage: str, detail: str):
        self.stage = stage
        self.detail = detail
        super().__init__(f"ORDERDESK STORAGE STARTUP FAILURE — {stage}: {detail}")
