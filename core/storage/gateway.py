"""
OrderDesk Storage — Gateway
============================
Owns the embedded SQLite store behind one Django connection alias.

connect() brings the store up, in order:
1. Ensure the database directory and file exist (file databases only)
2. Open the connection and check it is alive
3. Enable foreign-key enforcement and verify it (fatal if off)
4. Request WAL journal mode (file databases; failure is a warning)
5. Apply pending migrations (fatal on failure)

The busy timeout comes from DATABASES[alias]['OPTIONS']['timeout'].

Every multi-statement operation runs inside atomic(). Statement helpers
translate driver errors into StorageError / StorageIntegrityError
carrying the failing step, after which the transaction rolls back.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from django.db import DatabaseError, IntegrityError, connections, transaction
from django.utils.connection import ConnectionDoesNotExist

from core.config.options import OrderDeskOptions
from core.storage.errors import (
    MigrationError,
    StorageError,
    StorageIntegrityError,
    StorageStartupError,
)
from core.storage.migrations import MigrationRunner

logger = logging.getLogger("orderdesk.storage")

Params = Optional[Sequence[Any]]


def _rows_as_dicts(cursor) -> List[Dict[str, Any]]:
    columns = [col[0] for col in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


class StorageGateway:
    """Single entry point to the relational store."""

    def __init__(
        self,
        options: Optional[OrderDeskOptions] = None,
        runner: Optional[MigrationRunner] = None,
    ) -> None:
        self._options = options or OrderDeskOptions()
        self._runner = runner or MigrationRunner.for_options(self._options)
        self._ready = False
        self._applied: List[str] = []

    @property
    def alias(self) -> str:
        return self._options.database_alias

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def applied_migrations(self) -> List[str]:
        return list(self._applied)

    def _connection(self):
        try:
            return connections[self.alias]
        except ConnectionDoesNotExist as exc:
            raise StorageStartupError("resolve", str(exc)) from exc

    # ══════════════════════════════════════════════════════════
    # STARTUP
    # ══════════════════════════════════════════════════════════

    def connect(self) -> List[str]:
        """Bring the store up. Returns migration versions applied by this call."""
        if self._ready:
            return []

        connection = self._connection()
        if connection.vendor != "sqlite":
            raise StorageStartupError(
                "resolve", f"alias '{self.alias}' is '{connection.vendor}', expected sqlite."
            )

        in_memory = connection.is_in_memory_db()
        if not in_memory:
            self._ensure_database_file(Path(connection.settings_dict["NAME"]))

        try:
            connection.ensure_connection()
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError as exc:
            raise StorageStartupError("ping", str(exc)) from exc

        self._enable_foreign_keys(connection)
        if not in_memory and self._options.wal_journal:
            self._enable_wal(connection)
        if self._options.debug_sql:
            self._log_diagnostics(connection)

        try:
            applied = self._runner.run()
        except MigrationError as exc:
            raise StorageStartupError("migrate", str(exc)) from exc

        self._applied = applied
        self._ready = True
        logger.info(
            f"Storage ready on '{self.alias}' "
            f"({'memory' if in_memory else connection.settings_dict['NAME']}), "
            f"{len(applied)} migration(s) applied."
        )
        return applied

    def ensure_ready(self) -> None:
        if not self._ready:
            raise StorageStartupError("not_ready", "backend not initialized; call connect() first.")

    def _ensure_database_file(self, path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists():
                path.touch()
                logger.info(f"Created database file {path}.")
        except OSError as exc:
            raise StorageStartupError("create_file", f"{path}: {exc}") from exc

    def _enable_foreign_keys(self, connection) -> None:
        try:
            with connection.cursor() as cursor:
                cursor.execute("PRAGMA foreign_keys = ON")
                cursor.execute("PRAGMA foreign_keys")
                row = cursor.fetchone()
        except DatabaseError as exc:
            raise StorageStartupError("foreign_keys", str(exc)) from exc
        if not row or row[0] != 1:
            raise StorageStartupError("foreign_keys", "foreign key enforcement is off.")

    def _enable_wal(self, connection) -> None:
        if connection.in_atomic_block:
            logger.warning("Skipping WAL journal mode: connection is inside a transaction.")
            return
        try:
            with connection.cursor() as cursor:
                cursor.execute("PRAGMA journal_mode=WAL")
                row = cursor.fetchone()
        except DatabaseError as exc:
            logger.warning(f"Could not enable WAL journal mode: {exc}")
            return
        mode = (row[0] if row else "") or ""
        if str(mode).lower() != "wal":
            logger.warning(f"WAL journal mode not applied; journal_mode is '{mode}'.")

    def _log_diagnostics(self, connection) -> None:
        with connection.cursor() as cursor:
            cursor.execute("SELECT sqlite_version()")
            version = cursor.fetchone()[0]
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            )
            tables = [row[0] for row in cursor.fetchall()]
        logger.debug(f"SQLite {version}; tables: {', '.join(tables) or '(none)'}")

    # ══════════════════════════════════════════════════════════
    # TRANSACTIONS
    # ══════════════════════════════════════════════════════════

    @contextmanager
    def atomic(self) -> Iterator[Any]:
        """
        Yield a cursor inside one transaction.

        Any exception leaving the block rolls back every write made in it.
        """
        self.ensure_ready()
        connection = connections[self.alias]
        with transaction.atomic(using=self.alias):
            with connection.cursor() as cursor:
                yield cursor

    @contextmanager
    def reading(self) -> Iterator[Any]:
        """Yield a cursor for read-only queries outside an explicit transaction."""
        self.ensure_ready()
        with connections[self.alias].cursor() as cursor:
            yield cursor

    # ══════════════════════════════════════════════════════════
    # STATEMENT HELPERS
    # ══════════════════════════════════════════════════════════

    def _run(self, cursor, step: str, sql: str, params: Params) -> None:
        try:
            cursor.execute(sql, list(params) if params is not None else [])
        except IntegrityError as exc:
            raise StorageIntegrityError(step, exc) from exc
        except DatabaseError as exc:
            raise StorageError(step, exc) from exc

    def execute(self, cursor, step: str, sql: str, params: Params = None) -> int:
        """Run a write statement. Returns the affected row count."""
        self._run(cursor, step, sql, params)
        return cursor.rowcount

    def insert(self, cursor, step: str, sql: str, params: Params = None) -> int:
        """Run an INSERT. Returns the new row id."""
        self._run(cursor, step, sql, params)
        return cursor.lastrowid

    def fetch_all(self, cursor, step: str, sql: str, params: Params = None) -> List[Dict[str, Any]]:
        self._run(cursor, step, sql, params)
        return _rows_as_dicts(cursor)

    def fetch_one(self, cursor, step: str, sql: str, params: Params = None) -> Optional[Dict[str, Any]]:
        rows = self.fetch_all(cursor, step, sql, params)
        return rows[0] if rows else None

    def fetch_value(self, cursor, step: str, sql: str, params: Params = None) -> Any:
        self._run(cursor, step, sql, params)
        row = cursor.fetchone()
        return row[0] if row else None

    # ══════════════════════════════════════════════════════════
    # DIAGNOSTICS
    # ══════════════════════════════════════════════════════════

    def describe_schema(self) -> Dict[str, List[str]]:
        """Table name -> column names, for troubleshooting."""
        schema: Dict[str, List[str]] = {}
        with self.reading() as cursor:
            tables = self.fetch_all(
                cursor,
                "list_tables",
                "SELECT name FROM sqlite_master "
                "WHERE type = 'table' AND name NOT LIKE 'sqlite_%%' ORDER BY name",
            )
            for table in tables:
                name = table["name"]
                columns = self.fetch_all(
                    cursor, "table_info", f'PRAGMA table_info("{name}")'
                )
                schema[name] = [column["name"] for column in columns]
        return schema
