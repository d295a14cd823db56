"""
Shared fixtures: an in-memory DatabaseManager, a LocalStore with the
default schemas, a chainable fake Supabase client and master-data
factories.
"""

from __future__ import annotations

import copy
import itertools
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from marketplace_console.database import DatabaseManager
from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.models.engagement_model import EngagementModel
from marketplace_console.models.platform_fee_formula import PlatformFeeFormula
from marketplace_console.storage.local_store import LocalStore
from marketplace_console.storage.schemas import register_default_schemas


# ---------------------------------------------------------------------------
# Fake Supabase client
# ---------------------------------------------------------------------------

class FakeQuery:
    """Chainable stand-in for a PostgREST request builder."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self._client = client
        self._table = table
        self._op = "select"
        self._payload: dict = {}
        self._filters: list = []
        self._order: tuple[str, bool] | None = None

    def select(self, _columns: str = "*") -> "FakeQuery":
        self._op = "select"
        return self

    def insert(self, payload: dict) -> "FakeQuery":
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self._op, self._payload = "update", payload
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: object) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def is_(self, column: str, _value: str) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) is None)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def execute(self) -> SimpleNamespace:
        if self._client.fail:
            raise ConnectionError("remote store unreachable")
        self._client.calls.append((self._table, self._op, copy.deepcopy(self._payload)))
        rows = self._client.tables.setdefault(self._table, [])
        matched = [row for row in rows if all(f(row) for f in self._filters)]

        if self._op == "insert":
            created = {"id": f"gen-{next(self._client.ids)}", **self._payload}
            rows.append(created)
            return SimpleNamespace(data=[copy.deepcopy(created)])
        if self._op == "update":
            for row in matched:
                row.update(self._payload)
            return SimpleNamespace(data=copy.deepcopy(matched))
        if self._op == "delete":
            self._client.tables[self._table] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self._order is not None:
            column, desc = self._order
            matched.sort(key=lambda row: row.get(column), reverse=desc)
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str, dict]] = []
        self.fail = False
        self.ids = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def db(logger: MagicMock):
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=Path(":memory:"),
        logger=logger,
    )
    yield manager
    manager.close()


@pytest.fixture
def store(db: DatabaseManager, logger: MagicMock) -> LocalStore:
    local_store = LocalStore(db=db, logger=logger)
    register_default_schemas(local_store)
    return local_store


@pytest.fixture
def remote(db: DatabaseManager) -> FakeSupabase:
    """Attach a fake Supabase client so the manager reports online."""
    fake = FakeSupabase()
    db._supabase = fake
    return fake


# ---------------------------------------------------------------------------
# Master data factories
# ---------------------------------------------------------------------------

def make_model(name: str, model_id: str | None = None, **kwargs: object) -> EngagementModel:
    return EngagementModel(id=model_id or name.lower().replace(" ", "-"), name=name, **kwargs)


def make_formula(engagement_model_id: str, **kwargs: object) -> PlatformFeeFormula:
    values: dict = {
        "id": f"formula-{engagement_model_id}-{kwargs.get('country_id') or 'global'}",
        "engagement_model_id": engagement_model_id,
        "base_management_fee": Decimal("100"),
        "base_consulting_fee": Decimal("200"),
        "platform_usage_fee_percentage": Decimal("10"),
        "membership_discount_percentage": Decimal("0"),
    }
    values.update(kwargs)
    return PlatformFeeFormula(**values)


@pytest.fixture
def complexity_levels() -> list[ComplexityLevel]:
    # Deliberately out of order.
    return [
        ComplexityLevel(id="3", name="High", level_order=3,
                        management_fee_multiplier=Decimal("1.5"),
                        consulting_fee_multiplier=Decimal("1.5")),
        ComplexityLevel(id="1", name="Low", level_order=1,
                        management_fee_multiplier=Decimal("1"),
                        consulting_fee_multiplier=Decimal("1")),
        ComplexityLevel(id="4", name="Expert", level_order=4,
                        management_fee_multiplier=Decimal("2"),
                        consulting_fee_multiplier=Decimal("2.5")),
        ComplexityLevel(id="2", name="Medium", level_order=2,
                        management_fee_multiplier=Decimal("1.25"),
                        consulting_fee_multiplier=Decimal("1.25")),
    ]
