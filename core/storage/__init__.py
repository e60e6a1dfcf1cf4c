"""
OrderDesk Storage — Public API
===============================
SQLite store behind a Django connection: startup, migrations,
transactions and error translation.
"""

from core.storage.errors import (
    MigrationError,
    StorageError,
    StorageIntegrityError,
    StorageStartupError,
)
from core.storage.gateway import StorageGateway
from core.storage.migrations import (
    DirectoryMigrationSource,
    Migration,
    MigrationRunner,
    PackagedMigrationSource,
)
from core.storage.paging import Page

__all__ = [
    "DirectoryMigrationSource",
    "Migration",
    "MigrationError",
    "MigrationRunner",
    "PackagedMigrationSource",
    "Page",
    "StorageError",
    "StorageGateway",
    "StorageIntegrityError",
    "StorageStartupError",
]
