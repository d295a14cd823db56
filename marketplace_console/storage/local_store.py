"""
Versioned Local Key-Value Store.

Replaces ad-hoc browser localStorage with an explicit, injected store
backed by the local SQLite database.  Every key family has a registered
Pydantic schema and a current version; values are persisted as JSON
envelopes::

    {"version": 1, "data": {...}}

Values written before versioning existed (a bare JSON blob) are read as
version 0.  On read, registered migrations upgrade the payload step by
step to the current version and the upgraded envelope is written back.

Table layout::

    local_store
    ├── key         TEXT PRIMARY KEY
    ├── value       TEXT NOT NULL   (JSON envelope)
    └── updated_at  TIMESTAMP
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from marketplace_console.database import DatabaseManager
from marketplace_console.exceptions import LocalStoreError
from marketplace_console.logger import StructuredLogger

M = TypeVar("M", bound=BaseModel)

Migration = Callable[[dict], dict]


@dataclass(frozen=True)
class KeySchema:
    """Schema registration for one key or key prefix.

    ``migrations[n]`` upgrades a version-``n`` payload to version ``n + 1``.
    """

    pattern: str
    model: type[BaseModel]
    version: int = 1
    migrations: dict[int, Migration] = field(default_factory=dict)

    @property
    def is_prefix(self) -> bool:
        return self.pattern.endswith("_")


class LocalStore:
    """Typed key-value persistence with per-key schemas and migration.

    Parameters
    ----------
    db:
        ``DatabaseManager`` providing the SQLite connection and write lock.
    logger:
        Structured logger instance.
    """

    TABLE: str = "local_store"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger
        self._schemas: dict[str, KeySchema] = {}
        self._ensure_table()

    # ------------------------------------------------------------------
    # Schema registry
    # ------------------------------------------------------------------

    def register(
        self,
        pattern: str,
        model: type[BaseModel],
        version: int = 1,
        migrations: Optional[dict[int, Migration]] = None,
    ) -> None:
        """Register the schema for an exact key or a ``prefix_`` family."""
        if version < 1:
            raise ValueError("Schema version must be >= 1")
        self._schemas[pattern] = KeySchema(
            pattern=pattern,
            model=model,
            version=version,
            migrations=dict(migrations or {}),
        )

    def register_migration(self, pattern: str, from_version: int, step: Migration) -> None:
        """Add the step that upgrades *pattern* payloads from *from_version*."""
        schema = self._schemas.get(pattern)
        if schema is None:
            raise LocalStoreError(f"No schema registered for '{pattern}'")
        if not 0 <= from_version < schema.version:
            raise ValueError(
                f"Migration from v{from_version} is outside 0..{schema.version - 1}"
            )
        schema.migrations[from_version] = step

    def schema_for(self, key: str) -> KeySchema:
        """Return the schema registered for *key*.

        Exact registrations win over prefixes; among prefixes the longest
        match wins.

        Raises:
            LocalStoreError: If no schema covers *key*.
        """
        exact = self._schemas.get(key)
        if exact is not None and not exact.is_prefix:
            return exact
        candidates = [
            schema for schema in self._schemas.values()
            if schema.is_prefix and key.startswith(schema.pattern)
        ]
        if not candidates:
            raise LocalStoreError(f"No schema registered for key '{key}'")
        return max(candidates, key=lambda schema: len(schema.pattern))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str, model: Optional[type[M]] = None) -> Optional[M]:
        """Read, migrate and validate the value stored under *key*.

        Args:
            key: Store key.
            model: Optional expected model class; must match the schema.

        Returns:
            The validated model instance, or ``None`` when the key is absent.

        Raises:
            LocalStoreError: On corrupt JSON, a missing migration step, a
                payload newer than the registered schema, or a payload
                that fails validation.
        """
        schema = self.schema_for(key)
        if model is not None and model is not schema.model:
            raise LocalStoreError(
                f"Key '{key}' holds {schema.model.__name__}, not {model.__name__}"
            )

        raw = self._read_raw(key)
        if raw is None:
            return None

        version, data = self._unwrap(key, raw)
        migrated = version < schema.version
        data = self._migrate(key, schema, version, data)

        try:
            value = schema.model.model_validate(data)
        except ValidationError as exc:
            raise LocalStoreError(f"Stored value for '{key}' is invalid: {exc}") from exc

        if migrated:
            self._logger.info(
                "Migrated local store key %s from v%d to v%d",
                key, version, schema.version,
            )
            self._write_raw(key, schema.version, value)
        return value

    def put(self, key: str, value: BaseModel) -> None:
        """Persist *value* under *key* using the registered schema version.

        Raises:
            LocalStoreError: If *value* is not an instance of the key's schema.
        """
        schema = self.schema_for(key)
        if not isinstance(value, schema.model):
            raise LocalStoreError(
                f"Key '{key}' expects {schema.model.__name__}, "
                f"got {type(value).__name__}"
            )
        self._write_raw(key, schema.version, value)

    def delete(self, key: str) -> bool:
        """Remove *key*.  Returns ``True`` when a row was deleted."""
        with self._db.write_lock:
            cursor = self._db.sqlite.execute(
                f"DELETE FROM {self.TABLE} WHERE key = ?", (key,),
            )
            self._db.sqlite.commit()
        return cursor.rowcount > 0

    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys, optionally restricted to *prefix*, sorted."""
        rows = self._db.sqlite.execute(
            f"SELECT key FROM {self.TABLE} WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        ).fetchall()
        return [row["key"] for row in rows]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_table(self) -> None:
        with self._db.write_lock:
            self._db.sqlite.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            self._db.sqlite.commit()

    def _read_raw(self, key: str) -> Optional[str]:
        row = self._db.sqlite.execute(
            f"SELECT value FROM {self.TABLE} WHERE key = ?", (key,),
        ).fetchone()
        return row["value"] if row is not None else None

    def _write_raw(self, key: str, version: int, value: BaseModel) -> None:
        envelope = json.dumps(
            {"version": version, "data": value.model_dump(mode="json")},
            ensure_ascii=False,
        )
        try:
            with self._db.write_lock:
                self._db.sqlite.execute(
                    f"""
                    INSERT INTO {self.TABLE} (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value      = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, envelope),
                )
                self._db.sqlite.commit()
        except sqlite3.Error as exc:
            raise LocalStoreError(f"Failed to write local store key '{key}': {exc}") from exc

    @staticmethod
    def _unwrap(key: str, raw: str) -> tuple[int, dict]:
        """Split a stored string into ``(version, data)``; bare blobs are v0."""
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LocalStoreError(f"Stored value for '{key}' is not valid JSON") from exc

        if (
            isinstance(parsed, dict)
            and set(parsed) == {"version", "data"}
            and isinstance(parsed["version"], int)
        ):
            data = parsed["data"]
            version = parsed["version"]
        else:
            data = parsed
            version = 0

        if not isinstance(data, dict):
            raise LocalStoreError(f"Stored value for '{key}' is not a JSON object")
        return version, data

    @staticmethod
    def _migrate(key: str, schema: KeySchema, version: int, data: dict) -> dict:
        if version > schema.version:
            raise LocalStoreError(
                f"Stored value for '{key}' is v{version}, newer than "
                f"supported v{schema.version}"
            )
        while version < schema.version:
            step = schema.migrations.get(version)
            if step is None:
                raise LocalStoreError(
                    f"No migration from v{version} for '{schema.pattern}'"
                )
            data = step(data)
            version += 1
        return data
