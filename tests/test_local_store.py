"""
Tests: versioned local key-value store and legacy migrations.

Run with:
    pytest tests/test_local_store.py -v
"""

import json
from decimal import Decimal

import pytest
from pydantic import BaseModel

from marketplace_console.exceptions import LocalStoreError
from marketplace_console.models.enums import (
    BillingCadence,
    MembershipStatus,
    SelectionState,
)
from marketplace_console.models.storage_models import (
    EngagementSelection,
    MasterDataCache,
    MembershipSnapshot,
    RememberedIdentifier,
)
from marketplace_console.services.billing_plans import SelectionCard
from marketplace_console.storage.schemas import (
    REMEMBER_ME_KEY,
    master_cache_key,
    membership_key,
    selection_key,
)


class Note(BaseModel):
    text: str


def _write_raw(db, key, value):
    db.sqlite.execute("INSERT INTO local_store (key, value) VALUES (?, ?)", (key, value))
    db.sqlite.commit()


def _read_raw(db, key):
    row = db.sqlite.execute("SELECT value FROM local_store WHERE key = ?", (key,)).fetchone()
    return json.loads(row["value"])


class TestEnvelope:

    def test_put_then_get(self, store):
        snapshot = MembershipSnapshot(status=MembershipStatus.ACTIVE, plan="annual")
        store.put(membership_key("u1"), snapshot)
        assert store.get(membership_key("u1"), MembershipSnapshot) == snapshot

    def test_values_are_stored_with_version(self, store, db):
        store.put(REMEMBER_ME_KEY, RememberedIdentifier(identifier="ops@acme.test"))
        raw = _read_raw(db, REMEMBER_ME_KEY)
        assert raw["version"] == 1
        assert raw["data"]["identifier"] == "ops@acme.test"

    def test_missing_key_is_none(self, store):
        assert store.get(membership_key("nobody")) is None

    def test_unregistered_key_rejected(self, store):
        with pytest.raises(LocalStoreError):
            store.get("something_else")

    def test_wrong_model_rejected(self, store):
        with pytest.raises(LocalStoreError):
            store.put(membership_key("u1"), RememberedIdentifier(identifier="x"))
        with pytest.raises(LocalStoreError):
            store.get(membership_key("u1"), EngagementSelection)

    def test_delete_and_keys(self, store):
        store.put(membership_key("a"), MembershipSnapshot())
        store.put(membership_key("b"), MembershipSnapshot())
        store.put(REMEMBER_ME_KEY, RememberedIdentifier(identifier="x"))
        assert store.keys("membership_") == ["membership_a", "membership_b"]
        assert store.delete(membership_key("a"))
        assert not store.delete(membership_key("a"))
        assert store.keys("membership_") == ["membership_b"]

    def test_longest_prefix_wins(self, store):
        store.register("membership_archive_", Note)
        assert store.schema_for("membership_archive_2023").model is Note
        assert store.schema_for("membership_u1").model is MembershipSnapshot

    def test_master_cache_keeps_nested_rows(self, store):
        cache = MasterDataCache(rows={
            "f1": {
                "id": "f1",
                "base_management_fee": 100.5,
                "master_engagement_model_subtypes": {"id": "s1", "name": "General"},
                "tags": ["a", 1, None, {"nested": [True]}],
            },
        })
        store.put(master_cache_key("master_platform_fee_formulas"), cache)
        loaded = store.get(master_cache_key("master_platform_fee_formulas"), MasterDataCache)
        assert loaded.rows == cache.rows
        assert MasterDataCache.model_validate_json(cache.model_dump_json()).rows == cache.rows


class TestLegacyMigration:

    def test_member_paid_becomes_active(self, store, db, logger):
        _write_raw(db, membership_key("u1"), json.dumps(
            {"status": "member_paid", "activatedAt": "2024-05-01T10:00:00Z"},
        ))
        snapshot = store.get(membership_key("u1"), MembershipSnapshot)
        assert snapshot.status is MembershipStatus.ACTIVE
        assert snapshot.updated_at.year == 2024
        logger.info.assert_any_call(
            "Migrated local store key %s from v%d to v%d", "membership_u1", 0, 1,
        )

    def test_migrated_value_is_written_back(self, store, db):
        _write_raw(db, membership_key("u1"), json.dumps({"membershipStatus": "not-a-member"}))
        store.get(membership_key("u1"))
        raw = _read_raw(db, membership_key("u1"))
        assert raw["version"] == 1
        assert raw["data"]["status"] == "inactive"

    def test_unknown_legacy_status_is_inactive(self, store, db):
        _write_raw(db, membership_key("u1"), json.dumps({"status": "trial"}))
        assert store.get(membership_key("u1")).status is MembershipStatus.INACTIVE

    def test_legacy_selection(self, store, db):
        _write_raw(db, selection_key("u1"), json.dumps({
            "model": "Aggregator",
            "duration": "quarterly",
            "pricing": {
                "currency": "USD",
                "originalAmount": 300,
                "discountedAmount": 240,
                "frequency": "quarterly",
            },
            "selectedAt": "2024-05-01T10:00:00Z",
        }))
        selection = store.get(selection_key("u1"), EngagementSelection)
        assert selection.engagement_model == "Aggregator"
        assert selection.cadence is BillingCadence.QUARTERLY
        assert selection.original_amount == Decimal("300")
        assert selection.discounted_amount == Decimal("240")
        assert selection.state is SelectionState.SUBMITTED

        card = SelectionCard.from_selection(selection)
        assert card.state is SelectionState.SUBMITTED
        assert card.quote.amount.discount_applied

    def test_legacy_selection_with_model_object(self, store, db):
        _write_raw(db, selection_key("u1"), json.dumps(
            {"model": {"name": "Market Place"}, "duration": "fortnightly"},
        ))
        selection = store.get(selection_key("u1"))
        assert selection.engagement_model == "Market Place"
        assert selection.cadence is None

    def test_legacy_remember_me(self, store, db):
        _write_raw(db, REMEMBER_ME_KEY, json.dumps({"email": "ops@acme.test", "rememberMe": True}))
        remembered = store.get(REMEMBER_ME_KEY)
        assert remembered.identifier == "ops@acme.test"
        assert remembered.remember


class TestCorruptValues:

    def test_corrupt_json(self, store, db):
        _write_raw(db, membership_key("u1"), "{not json")
        with pytest.raises(LocalStoreError):
            store.get(membership_key("u1"))

    def test_non_object_value(self, store, db):
        _write_raw(db, membership_key("u1"), json.dumps(["active"]))
        with pytest.raises(LocalStoreError):
            store.get(membership_key("u1"))

    def test_newer_version_rejected(self, store, db):
        _write_raw(db, membership_key("u1"), json.dumps({"version": 5, "data": {}}))
        with pytest.raises(LocalStoreError):
            store.get(membership_key("u1"))

    def test_missing_migration_step(self, store, db):
        store.register("note_", Note, version=2, migrations={0: lambda data: data})
        _write_raw(db, "note_1", json.dumps({"version": 1, "data": {"text": "hi"}}))
        with pytest.raises(LocalStoreError, match="No migration from v1"):
            store.get("note_1")

    def test_registered_migration_chain(self, store, db):
        store.register("note_", Note, version=2)
        store.register_migration("note_", 0, lambda data: {"text": data.get("body", "")})
        store.register_migration("note_", 1, lambda data: {"text": data["text"].upper()})
        _write_raw(db, "note_1", json.dumps({"body": "hi"}))
        assert store.get("note_1") == Note(text="HI")

    def test_invalid_payload(self, store, db):
        _write_raw(db, REMEMBER_ME_KEY, json.dumps({"version": 1, "data": {"identifier": ""}}))
        with pytest.raises(LocalStoreError):
            store.get(REMEMBER_ME_KEY)

    def test_migration_outside_range_rejected(self, store):
        with pytest.raises(ValueError):
            store.register_migration(REMEMBER_ME_KEY, 1, lambda data: data)
        with pytest.raises(LocalStoreError):
            store.register_migration("unknown_", 0, lambda data: data)
