"""
Connections used by the pricing console.

``DatabaseManager`` owns two handles and nothing else:

- the Supabase client, source of truth for the ``master_*`` pricing
  tables, reached through its PostgREST interface;
- a local SQLite file holding the ``local_store`` key-value table (the
  desktop stand-in for browser localStorage) and the ``audit_log``.

Queries live in the repositories and in ``LocalStore``.  Without Supabase
credentials the manager starts offline; repositories then read the master
data cached in the local store.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Optional

from supabase import Client as SupabaseClient
from supabase import create_client

from marketplace_console.logger import StructuredLogger


def _open_supabase(url: str, key: str, logger: StructuredLogger) -> Optional[SupabaseClient]:
    if not (url and key):
        logger.warning("No Supabase credentials; starting offline.")
        return None
    try:
        client = create_client(url, key)
    except (ValueError, TypeError) as exc:
        logger.warning("Rejected Supabase credentials (%s); starting offline.", exc)
        return None
    except Exception:
        logger.error("Supabase client could not be created; starting offline.", exc_info=True)
        return None
    logger.info("Connected Supabase client", extra={"url": url})
    return client


class DatabaseManager:
    """Owner of the Supabase client and the local SQLite connection.

    Built once in ``main.py`` and injected into every repository, the
    local store and the master-data service.  ``sqlite_path`` may be
    ``Path(":memory:")`` for an ephemeral store.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        sqlite_path: Path,
        logger: StructuredLogger,
    ) -> None:
        self._logger = logger
        # Fetches run on worker threads; SQLite writes are serialised here.
        self._write_lock = threading.RLock()
        self._supabase: Optional[SupabaseClient] = _open_supabase(supabase_url, supabase_key, logger)
        self._sqlite_conn: sqlite3.Connection = self._open_sqlite(sqlite_path)

    @property
    def supabase(self) -> SupabaseClient:
        """The Supabase client.

        Raises
        ------
        RuntimeError
            When running offline.
        """
        if self._supabase is None:
            raise RuntimeError("Supabase is unavailable: the console is offline.")
        return self._supabase

    @property
    def is_online(self) -> bool:
        return self._supabase is not None

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Hold while writing through :attr:`sqlite`."""
        return self._write_lock

    def close(self) -> None:
        """Close the SQLite connection; repeated calls do nothing."""
        with self._write_lock:
            try:
                self._sqlite_conn.close()
            except sqlite3.ProgrammingError:
                return
            self._logger.info("Closed local database")

    def _open_sqlite(self, path: Path) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
        except (PermissionError, sqlite3.OperationalError) as exc:
            message = (
                f"Cannot open the local database at '{path}'. Check that the "
                "file and its folder are writable and not locked by another process."
            )
            self._logger.error(message)
            raise PermissionError(message) from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        self._logger.info("Opened local database", extra={"path": str(path)})
        return conn
