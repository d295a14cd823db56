"""
Table access shared by the pricing repositories.

Each subclass names one remote table in ``TABLE`` and gets the generic
``list_rows`` / ``insert`` / ``update`` / ``delete`` contract plus typed
helpers built on it.

Reads are remote-first.  Every successful list read is merged (by ``id``)
into the ``master_cache_<table>`` entry of the local store; when the remote
store is unreachable the same filters are applied to the cached rows.
Writes go straight to the remote store and raise on failure.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from supabase import Client as SupabaseClient

from marketplace_console.database import DatabaseManager
from marketplace_console.exceptions import LocalStoreError, RecordNotFoundError
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.storage_models import MasterDataCache
from marketplace_console.storage.local_store import LocalStore
from marketplace_console.storage.schemas import master_cache_key
from marketplace_console.utils.general import convert_to_json_safe
from marketplace_console.utils.string_helpers import JsonValue, normalize_keys

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

Row = dict[str, JsonValue]
Filters = Mapping[str, object]


class BaseRepository:
    """Repository over one remote table and its local cache."""

    TABLE: str = ""
    SELECT: str = "*"

    def __init__(
        self,
        db: DatabaseManager,
        local_store: LocalStore,
        logger: StructuredLogger,
        table: Optional[str] = None,
    ) -> None:
        self._db = db
        self._store = local_store
        self._logger = logger
        if table:
            self.TABLE = table

    @property
    def supabase(self) -> SupabaseClient:
        """Raises ``RuntimeError`` when offline."""
        return self._db.supabase

    # ------------------------------------------------------------------
    # Generic table contract
    # ------------------------------------------------------------------

    def list_rows(
        self,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        *,
        desc: bool = False,
    ) -> list[Row]:
        """Return rows matching every equality filter, optionally ordered.

        A filter value of ``None`` matches SQL ``NULL``.  Keys in the
        returned rows are snake_case.
        """
        filters = dict(filters or {})

        def _remote() -> list[Row]:
            query = self.supabase.table(self.TABLE).select(self.SELECT)
            for column, value in filters.items():
                if value is None:
                    query = query.is_(column, "null")
                else:
                    query = query.eq(column, convert_to_json_safe(value))
            if order_by:
                query = query.order(order_by, desc=desc)
            response = query.execute()
            return [normalize_keys(row) for row in response.data or []]

        def _cached() -> Optional[list[Row]]:
            cache = self._store.get(master_cache_key(self.TABLE), MasterDataCache)
            if cache is None:
                return None
            rows = [row for row in cache.rows.values() if _matches(row, filters)]
            if order_by:
                rows.sort(key=lambda row: _sort_key(row.get(order_by)), reverse=desc)
            return rows

        return self._execute_with_fallback(
            _remote,
            _cached,
            list,
            operation_name=f"list_rows ({self.TABLE})",
            on_supabase_success=self._merge_into_cache,
        )

    def insert(self, row: Mapping[str, object]) -> Row:
        """Insert *row* remotely and return the stored row."""
        response = (
            self.supabase.table(self.TABLE)
            .insert(convert_to_json_safe(dict(row)))
            .execute()
        )
        created = normalize_keys(response.data[0])
        self._merge_into_cache([created])
        self._logger.info("Inserted %s row %s", self.TABLE, created.get("id"))
        return created

    def update(self, record_id: str, patch: Mapping[str, object]) -> Row:
        """Apply *patch* to the row with *record_id* and return the stored row.

        Raises:
            RecordNotFoundError: If no row has *record_id*.
        """
        response = (
            self.supabase.table(self.TABLE)
            .update(convert_to_json_safe(dict(patch)))
            .eq("id", record_id)
            .execute()
        )
        if not response.data:
            raise RecordNotFoundError(self.TABLE, record_id)
        updated = normalize_keys(response.data[0])
        self._merge_into_cache([updated])
        self._logger.info("Updated %s row %s", self.TABLE, record_id)
        return updated

    def delete(self, record_id: str) -> None:
        """Delete the row with *record_id* remotely and from the cache."""
        self.supabase.table(self.TABLE).delete().eq("id", record_id).execute()
        self._drop_from_cache(record_id)
        self._logger.info("Deleted %s row %s", self.TABLE, record_id)

    def _to_models(self, rows: list[Row], model: type[M]) -> list[M]:
        """Validate *rows* into *model*, skipping (and logging) malformed rows."""
        parsed: list[M] = []
        for row in rows:
            try:
                parsed.append(model.model_validate(row))
            except ValidationError as exc:
                self._logger.warning(
                    "Skipping malformed %s row %s (%d validation errors)",
                    self.TABLE, row.get("id"), exc.error_count(),
                )
        return parsed

    # ------------------------------------------------------------------
    # Fallback plumbing
    # ------------------------------------------------------------------

    def _execute_with_fallback(
        self,
        supabase_op: Callable[[], Optional[T]],
        cache_op: Callable[[], Optional[T]],
        default_factory: Callable[[], T],
        *,
        operation_name: str,
        on_supabase_success: Optional[Callable[[T], None]] = None,
    ) -> T:
        """Run a read against Supabase, then the local cache, then a default.

        A non-``None`` remote result wins and is passed to
        ``on_supabase_success`` (used to refresh the cache); a failure in
        that callback is only logged.  Reads only: writes must surface
        remote errors to the caller.
        """
        try:
            result = supabase_op()
        except Exception as exc:
            self._logger.warning(
                "Remote read failed, trying cache",
                extra={"operation": operation_name, "error": str(exc)},
            )
        else:
            if result is not None:
                if on_supabase_success is not None:
                    try:
                        on_supabase_success(result)
                    except (sqlite3.Error, LocalStoreError) as exc:
                        self._logger.warning(
                            "Cache refresh failed for %s: %s", operation_name, exc,
                        )
                return result

        try:
            cached = cache_op()
        except (sqlite3.Error, LocalStoreError) as exc:
            self._logger.error("Cache read failed for %s: %s", operation_name, exc)
            cached = None
        if cached is not None:
            self._logger.info("Serving %s from local cache", operation_name)
            return cached
        return default_factory()

    def _load_cache(self) -> MasterDataCache:
        key = master_cache_key(self.TABLE)
        try:
            cache = self._store.get(key, MasterDataCache)
        except LocalStoreError as exc:
            self._logger.warning("Discarding unreadable cache %s: %s", key, exc)
            cache = None
        return cache if cache is not None else MasterDataCache()

    def _merge_into_cache(self, rows: list[Row]) -> None:
        keyed = {str(row["id"]): row for row in rows if row.get("id") is not None}
        if not keyed:
            return
        with self._db.write_lock:
            cache = self._load_cache()
            merged = MasterDataCache(rows={**cache.rows, **keyed})
            self._store.put(master_cache_key(self.TABLE), merged)

    def _drop_from_cache(self, record_id: str) -> None:
        with self._db.write_lock:
            cache = self._load_cache()
            if str(record_id) not in cache.rows:
                return
            rows = {k: v for k, v in cache.rows.items() if k != str(record_id)}
            self._store.put(master_cache_key(self.TABLE), MasterDataCache(rows=rows))


def _matches(row: Row, filters: Filters) -> bool:
    """Apply remote-style equality filters to a cached row."""
    for column, expected in filters.items():
        actual = row.get(column)
        if expected is None:
            if actual is not None:
                return False
        elif isinstance(expected, bool):
            if actual is not expected:
                return False
        elif str(actual) != str(convert_to_json_safe(expected)):
            return False
    return True


def _sort_key(value: JsonValue) -> tuple[bool, str, float]:
    # NULLs sort last, numbers numerically, everything else as text.
    if value is None:
        return (True, "", 0.0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (False, "", float(value))
    return (False, str(value).lower(), 0.0)
