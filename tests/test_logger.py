"""
Tests: JSON log formatting and audit events.

Run with:
    pytest tests/test_logger.py -v
"""

import json
import logging
import sqlite3
from decimal import Decimal
from unittest.mock import MagicMock

from marketplace_console.logger import JSONFormatter, _resolve_level
from marketplace_console.utils.audit import ensure_audit_table, log_audit_event


def _record(msg, *args, **extra):
    record = logging.LogRecord(
        name="pricing", level=logging.WARNING, pathname=__file__, lineno=1,
        msg=msg, args=args, exc_info=None,
    )
    record.__dict__.update(extra)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record("Clamped %s%%", 150)))
        assert entry["level"] == "WARNING"
        assert entry["logger_name"] == "pricing"
        assert entry["message"] == "Clamped 150%"
        assert "extra" not in entry

    def test_extra_fields_keep_json_types(self):
        entry = json.loads(JSONFormatter().format(_record("Session", user_id="u1", attempt=2)))
        assert entry["extra"] == {"user_id": "u1", "attempt": 2}

    def test_decimal_extra_rendered_as_text(self):
        entry = json.loads(JSONFormatter().format(_record("Fee", fee=Decimal("12.50"))))
        assert entry["extra"] == {"fee": "12.50"}

    def test_level_names(self):
        assert _resolve_level("debug") == logging.DEBUG
        assert _resolve_level(logging.ERROR) == logging.ERROR
        assert _resolve_level("chatty") == logging.INFO


class TestAuditEvent:

    def test_event_logged_and_persisted(self):
        conn = sqlite3.connect(":memory:")
        ensure_audit_table(conn)
        logger = MagicMock()

        event = log_audit_event(
            logger, action="UPDATE", entity_type="master_challenge_complexity",
            entity_id="3", user_id="admin-1", details={"fields": "level_order"}, conn=conn,
        )

        assert event.details == {"fields": "level_order"}
        logger.info.assert_called_once()
        row = conn.execute("SELECT action, entity_id, details FROM audit_log").fetchone()
        assert row == ("UPDATE", "3", '{"fields": "level_order"}')

    def test_persistence_failure_only_warns(self):
        conn = sqlite3.connect(":memory:")
        logger = MagicMock()
        log_audit_event(
            logger, action="DELETE", entity_type="pricing_configurations",
            entity_id="p1", user_id="admin-1", conn=conn,
        )
        logger.warning.assert_called_once()
