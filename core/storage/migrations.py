"""
OrderDesk Storage — Migration Runner
=====================================
Applies versioned *.up.sql scripts exactly once, in lexicographic
version order, recording each in schema_migrations.

Sources:
- PackagedMigrationSource:  scripts shipped in core/storage/schema
- DirectoryMigrationSource: scripts in a configured filesystem directory

The version of a script is its file name minus '.up.sql'. When both
sources carry the same version the packaged script wins.

A statement failing because the column or table it creates already
exists counts as applied. Any other failure is a MigrationError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from django.db import DatabaseError, OperationalError, connections, transaction

from core.storage.errors import MigrationError

logger = logging.getLogger("orderdesk.migrations")

MIGRATION_SUFFIX = ".up.sql"
PACKAGED_SCHEMA = "core.storage.schema"

_TOLERATED_MESSAGES = ("duplicate column", "already exists")

CREATE_MIGRATIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version TEXT PRIMARY KEY,
        applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
"""


@dataclass(frozen=True)
class Migration:
    version: str
    sql: str
    origin: str


class MigrationSource(Protocol):
    def load(self) -> List[Migration]:
        ...  # pragma: no cover


def version_from_filename(filename: str) -> Optional[str]:
    if not filename.endswith(MIGRATION_SUFFIX):
        return None
    version = filename[: -len(MIGRATION_SUFFIX)]
    return version or None


# ══════════════════════════════════════════════════════════════
# SOURCES
# ══════════════════════════════════════════════════════════════

class PackagedMigrationSource:
    """Scripts bundled with the package, read via importlib.resources."""

    def __init__(self, package: str = PACKAGED_SCHEMA) -> None:
        self._package = package

    def load(self) -> List[Migration]:
        migrations = []
        for entry in resources.files(self._package).iterdir():
            version = version_from_filename(entry.name)
            if version is None:
                continue
            migrations.append(
                Migration(
                    version=version,
                    sql=entry.read_text(encoding="utf-8"),
                    origin=f"package:{entry.name}",
                )
            )
        return migrations


class DirectoryMigrationSource:
    """Scripts from a filesystem directory, e.g. site-specific additions."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def load(self) -> List[Migration]:
        if not self._directory.is_dir():
            logger.warning(
                f"Migrations directory {self._directory} does not exist; skipping."
            )
            return []
        migrations = []
        for path in self._directory.glob(f"*{MIGRATION_SUFFIX}"):
            version = version_from_filename(path.name)
            if version is None:
                continue
            migrations.append(
                Migration(
                    version=version,
                    sql=path.read_text(encoding="utf-8"),
                    origin=str(path),
                )
            )
        return migrations


def merge_sources(sources: Iterable[MigrationSource]) -> List[Migration]:
    """Union of all sources by version, first source wins, sorted by version."""
    by_version: dict[str, Migration] = {}
    for source in sources:
        for migration in source.load():
            if migration.version in by_version:
                logger.debug(
                    f"Migration {migration.version} from {migration.origin} "
                    f"shadowed by {by_version[migration.version].origin}."
                )
                continue
            by_version[migration.version] = migration
    return [by_version[version] for version in sorted(by_version)]


# ══════════════════════════════════════════════════════════════
# RUNNER
# ══════════════════════════════════════════════════════════════

def _is_tolerated(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _TOLERATED_MESSAGES)


class MigrationRunner:
    """Applies pending migrations on one Django connection alias."""

    def __init__(
        self,
        database_alias: str = "default",
        sources: Optional[Sequence[MigrationSource]] = None,
    ) -> None:
        self._alias = database_alias
        self._sources = list(sources) if sources is not None else [PackagedMigrationSource()]

    @classmethod
    def for_options(cls, options) -> "MigrationRunner":
        sources: List[MigrationSource] = [PackagedMigrationSource()]
        if options.migrations_dir:
            sources.append(DirectoryMigrationSource(options.migrations_dir))
        return cls(database_alias=options.database_alias, sources=sources)

    def plan(self) -> List[Migration]:
        return merge_sources(self._sources)

    def applied_versions(self) -> set[str]:
        connection = connections[self._alias]
        with connection.cursor() as cursor:
            cursor.execute(CREATE_MIGRATIONS_TABLE)
            cursor.execute("SELECT version FROM schema_migrations")
            return {row[0] for row in cursor.fetchall()}

    def pending(self) -> List[Migration]:
        applied = self.applied_versions()
        return [m for m in self.plan() if m.version not in applied]

    def run(self) -> List[str]:
        """Apply every pending migration. Returns the versions applied."""
        try:
            pending = self.pending()
        except DatabaseError as exc:
            raise MigrationError("schema_migrations", str(exc)) from exc

        applied: List[str] = []
        for migration in pending:
            self._apply(migration)
            applied.append(migration.version)
            logger.info(f"Applied migration {migration.version} ({migration.origin}).")
        if not applied:
            logger.debug("Schema is up to date.")
        return applied

    def _apply(self, migration: Migration) -> None:
        connection = connections[self._alias]
        statements = connection.ops.prepare_sql_script(migration.sql)
        try:
            with transaction.atomic(using=self._alias):
                with connection.cursor() as cursor:
                    for statement in statements:
                        self._execute_statement(cursor, migration, statement)
                    cursor.execute(
                        "INSERT INTO schema_migrations (version) VALUES (%s)",
                        [migration.version],
                    )
        except MigrationError:
            raise
        except DatabaseError as exc:
            raise MigrationError(migration.version, str(exc)) from exc

    def _execute_statement(self, cursor, migration: Migration, statement: str) -> None:
        try:
            with transaction.atomic(using=self._alias):
                cursor.execute(statement)
        except OperationalError as exc:
            if _is_tolerated(exc):
                logger.info(
                    f"Migration {migration.version}: treating '{exc}' as already applied."
                )
                return
            raise MigrationError(migration.version, str(exc)) from exc
