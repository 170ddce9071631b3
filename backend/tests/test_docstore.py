"""
SQL document store tests.

Verifies:
- Paths are validated (documents even, collections odd)
- Dotted updates merge into nested maps
- Datetimes round-trip through the JSON body
- Transactions stage writes and roll back on error
- A commit landing between a transaction's read and its write is detected and re-run
- Batches are single-use and capped at 500 writes
"""

from datetime import datetime

import pytest

from bazaar.docstore import DocumentStoreError, MAX_BATCH_WRITES, apply_updates, get_field
from bazaar.docstore.sql import decode_body, encode_body
from bazaar.extensions import db
from bazaar.models import Document

from conftest import commit_elsewhere


# =============================================================================
# FIELD HELPERS
# =============================================================================


class TestFieldHelpers:

    def test_get_field_reads_dotted_paths(self):
        data = {"a": {"b": {"c": 3}}, "x": 1}
        assert get_field(data, "a.b.c") == 3
        assert get_field(data, "x") == 1

    def test_get_field_missing_returns_default(self):
        assert get_field({"a": 1}, "a.b") is None
        assert get_field({}, "missing", 0) == 0

    def test_apply_updates_keeps_siblings(self):
        data = {"dailyRevenue": {"today": 5, "total": 99}}
        result = apply_updates(data, {"dailyRevenue.today": 0})
        assert result == {"dailyRevenue": {"today": 0, "total": 99}}
        # Original untouched
        assert data["dailyRevenue"]["today"] == 5

    def test_apply_updates_creates_intermediate_maps(self):
        result = apply_updates({}, {"merchantAsist.statistics.todayCollected": 0})
        assert result == {"merchantAsist": {"statistics": {"todayCollected": 0}}}

    def test_datetime_round_trip(self):
        stamp = datetime(2025, 3, 1, 16, 0, 0)
        body = encode_body({"at": stamp, "nested": [{"at": stamp}]})
        decoded = decode_body(body)
        assert decoded["at"] == stamp
        assert decoded["nested"][0]["at"] == stamp


# =============================================================================
# BASIC READS AND WRITES
# =============================================================================


class TestSqlStore:

    def test_set_then_get(self, store):
        store.set("organizations/o1", {"name": "Org"})
        snap = store.get("organizations/o1")
        assert snap.exists
        assert snap.id == "o1"
        assert snap.data == {"name": "Org"}
        assert snap.to_dict() == {"name": "Org", "id": "o1"}

    def test_get_missing_document(self, store):
        snap = store.get("organizations/nope")
        assert not snap.exists
        assert snap.data == {}

    def test_document_path_must_have_even_segments(self, store):
        with pytest.raises(DocumentStoreError):
            store.get("organizations")
        with pytest.raises(DocumentStoreError):
            store.list_documents("organizations/o1")

    def test_list_documents_is_scoped_to_one_collection(self, store):
        store.set("organizations/o2", {})
        store.set("organizations/o1", {})
        store.set("organizations/o1/events/e1", {})

        ids = [snap.id for snap in store.list_documents("organizations")]
        assert ids == ["o1", "o2"]

        events = store.list_documents("organizations/o1/events")
        assert [snap.id for snap in events] == ["e1"]

    def test_query_array_contains(self, store):
        store.set("organizations/o1/events/e1/users/u1", {"roles": ["merchantAsist"]})
        store.set("organizations/o1/events/e1/users/u2", {"roles": ["seller"]})
        store.set("organizations/o1/events/e1/users/u3", {"roles": "merchantAsist"})

        found = store.query("organizations/o1/events/e1/users", "roles", "array-contains", "merchantAsist")
        assert [snap.id for snap in found] == ["u1"]

    def test_query_rejects_unknown_operator(self, store):
        with pytest.raises(DocumentStoreError):
            store.query("organizations", "name", ">", 1)

    def test_version_increments_on_update(self, store):
        store.set("organizations/o1", {"n": 1})
        first = db.session.get(Document, "organizations/o1", populate_existing=True).version

        batch = store.batch()
        batch.update("organizations/o1", {"n": 2})
        batch.commit()

        row = db.session.get(Document, "organizations/o1", populate_existing=True)
        assert row.version == first + 1
        assert row.collection_path == "organizations"


# =============================================================================
# TRANSACTIONS
# =============================================================================


class TestTransactions:

    def test_transaction_applies_staged_writes(self, store):
        store.set("organizations/o1", {"count": 1})

        def _txn(txn):
            snap = txn.get("organizations/o1")
            txn.update("organizations/o1", {"count": snap.get("count") + 1})
            return snap.get("count")

        assert store.run_transaction(_txn) == 1
        assert store.get("organizations/o1").data == {"count": 2}

    def test_transaction_rolls_back_on_error(self, store):
        store.set("organizations/o1", {"count": 1})

        def _txn(txn):
            txn.get("organizations/o1")
            txn.update("organizations/o1", {"count": 99})
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            store.run_transaction(_txn)
        assert store.get("organizations/o1").data == {"count": 1}

    def test_reads_must_precede_writes(self, store):
        store.set("organizations/o1", {})
        store.set("organizations/o2", {})

        def _txn(txn):
            txn.update("organizations/o1", {"a": 1})
            txn.get("organizations/o2")

        with pytest.raises(DocumentStoreError):
            store.run_transaction(_txn)
        assert store.get("organizations/o1").data == {}

    def test_update_of_missing_document_fails(self, store):
        def _txn(txn):
            txn.get("organizations/ghost")
            txn.update("organizations/ghost", {"a": 1})

        with pytest.raises(DocumentStoreError):
            store.run_transaction(_txn)
        assert not store.get("organizations/ghost").exists

    def test_conflicting_commit_reruns_from_first_read(self, store, interleave):
        store.set("organizations/o1", {"count": 1})
        interleave("organizations/o1", {"organizations/o1": {"count": 10}})
        seen = []

        def _txn(txn):
            snap = txn.get("organizations/o1")
            seen.append(snap.get("count"))
            txn.update("organizations/o1", {"count": snap.get("count") + 1})

        store.run_transaction(_txn)

        assert seen == [1, 10]
        assert store.get("organizations/o1").data == {"count": 11}
        assert db.session.get(Document, "organizations/o1", populate_existing=True).version == 3

    def test_commit_guards_every_document_read(self, store, interleave):
        store.set("organizations/o1", {"count": 1})
        store.set("organizations/o2", {"count": 1})
        interleave("organizations/o2", {"organizations/o2": {"count": 5}})
        runs = []

        def _txn(txn):
            first = txn.get("organizations/o1")
            second = txn.get("organizations/o2")
            runs.append((first.get("count"), second.get("count")))
            txn.update("organizations/o1", {"count": first.get("count") + 1})
            txn.update("organizations/o2", {"count": second.get("count") + 1})

        store.run_transaction(_txn)

        assert runs == [(1, 1), (1, 5)]
        assert store.get("organizations/o1").data == {"count": 2}
        assert store.get("organizations/o2").data == {"count": 6}

    def test_write_outside_transaction_bumps_version(self, store):
        store.set("organizations/o1", {"count": 1})
        commit_elsewhere({"organizations/o1": {"count": 2}})
        assert store.get("organizations/o1").data == {"count": 2}
        assert db.session.get(Document, "organizations/o1", populate_existing=True).version == 2


# =============================================================================
# BATCHES
# =============================================================================


class TestBatches:

    def test_batch_commit_returns_write_count(self, store):
        store.set("organizations/o1", {})
        store.set("organizations/o2", {})

        batch = store.batch()
        batch.update("organizations/o1", {"x": 1})
        batch.update("organizations/o2", {"x": 2})
        assert batch.commit() == 2
        assert store.get("organizations/o2").data == {"x": 2}

    def test_batch_is_single_use(self, store):
        store.set("organizations/o1", {})
        batch = store.batch()
        batch.update("organizations/o1", {"x": 1})
        batch.commit()

        with pytest.raises(DocumentStoreError):
            batch.update("organizations/o1", {"x": 2})
        with pytest.raises(DocumentStoreError):
            batch.commit()

    def test_batch_write_limit(self, store):
        batch = store.batch()
        for i in range(MAX_BATCH_WRITES):
            batch.update(f"organizations/o{i}", {"x": i})
        with pytest.raises(DocumentStoreError):
            batch.update("organizations/one-too-many", {"x": 0})

    def test_failed_batch_writes_nothing(self, store):
        store.set("organizations/o1", {"x": 0})
        batch = store.batch()
        batch.update("organizations/o1", {"x": 1})
        batch.update("organizations/missing", {"x": 1})

        with pytest.raises(DocumentStoreError):
            batch.commit()
        assert store.get("organizations/o1").data == {"x": 0}
