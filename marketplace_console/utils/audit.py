"""
Audit trail for master-data writes.

``MasterDataService`` records one event per successful create, update or
delete.  Each event goes to the structured log and, when a connection is
given, into the local ``audit_log`` table so the history survives restarts
even while the remote store is unreachable.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from marketplace_console.logger import StructuredLogger

__all__ = ["AuditEvent", "ensure_audit_table", "log_audit_event", "persist_audit_event"]

AuditAction = Literal["CREATE", "UPDATE", "DELETE"]

# Flat scalars only.
DetailValue = Union[str, int, float, bool, None]

_CREATE_AUDIT_LOG = """
CREATE TABLE IF NOT EXISTS audit_log (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp   TEXT NOT NULL,
    action      TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id   TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    details     TEXT
)
"""

_INSERT_AUDIT_LOG = (
    "INSERT INTO audit_log (timestamp, action, entity_type, entity_id, user_id, details) "
    "VALUES (:timestamp, :action, :entity_type, :entity_id, :user_id, :details)"
)


class AuditEvent(BaseModel):
    """One master-data change: who touched which row of which table."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: AuditAction
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)

    def as_row(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "details": json.dumps(self.details),
        }


def ensure_audit_table(conn: sqlite3.Connection) -> None:
    conn.execute(_CREATE_AUDIT_LOG)
    conn.commit()


def persist_audit_event(conn: sqlite3.Connection, event: AuditEvent) -> None:
    conn.execute(_INSERT_AUDIT_LOG, event.as_row())
    conn.commit()


def log_audit_event(
    logger: StructuredLogger,
    action: AuditAction,
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> AuditEvent:
    """Record *action* on ``entity_type``/``entity_id`` by *user_id*.

    The event is always logged at INFO with its fields under ``extra``.
    A failed SQLite insert is reported as a warning and does not undo the
    remote write that triggered it.
    """
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        details=details or {},
    )
    logger.info("Audit %s %s/%s", action, entity_type, entity_id, extra={"audit": event.as_row()})

    if conn is None:
        return event
    try:
        persist_audit_event(conn, event)
    except sqlite3.Error as exc:
        logger.warning(
            "Audit event not persisted",
            extra={"entity_type": entity_type, "entity_id": entity_id, "error": str(exc)},
        )
    return event
