"""Tests for snapshot building and the snapshot store."""

from datetime import date, timedelta

import pytest

from pantry_watch.models import Item, Status
from pantry_watch.snapshot import Snapshot, SnapshotStore, build_snapshot

TODAY = date(2025, 3, 10)


@pytest.fixture
def items():
    return [
        Item(id="milk", name="Milk", expiry_date=TODAY - timedelta(days=2)),
        Item(id="eggs", name="Eggs", expiry_date=(TODAY + timedelta(days=3)).isoformat()),
        Item(id="rice", name="Rice", expiry_date=TODAY + timedelta(days=90)),
    ]


def test_build_snapshot_classifies(items):
    snapshot, rejected = build_snapshot(items, TODAY)
    assert rejected == []
    assert len(snapshot) == 3
    assert snapshot.status_of("milk") is Status.EXPIRED
    assert snapshot.status_of("eggs") is Status.EXPIRING_SOON
    assert snapshot.status_of("rice") is Status.ACTIVE
    assert snapshot["eggs"].days_left == 3
    assert snapshot["eggs"].expiry == TODAY + timedelta(days=3)
    assert snapshot.taken_on == TODAY


def test_build_snapshot_rejects_bad_dates(items):
    items.append(Item(id="bad", name="Mystery jar", expiry_date="someday"))
    snapshot, rejected = build_snapshot(items, TODAY)
    assert "bad" not in snapshot
    assert len(snapshot) == 3
    assert len(rejected) == 1
    assert rejected[0].item.id == "bad"


def test_duplicate_ids_keep_last():
    rows = [
        Item(id="x", name="Old", expiry_date=TODAY + timedelta(days=30)),
        Item(id="x", name="New", expiry_date=TODAY),
    ]
    snapshot, _ = build_snapshot(rows, TODAY)
    assert len(snapshot) == 1
    assert snapshot["x"].item.name == "New"


def test_snapshot_is_read_only(items):
    snapshot, _ = build_snapshot(items, TODAY)
    with pytest.raises(TypeError):
        snapshot["milk"] = None
    with pytest.raises(TypeError):
        snapshot._entries["milk"] = None


def test_status_of_missing_item():
    assert Snapshot().status_of("nope") is None


def test_counts_and_urgent(items):
    snapshot, _ = build_snapshot(items, TODAY)
    assert snapshot.counts() == {
        "active": 1,
        "expiring_soon": 1,
        "expired": 1,
        "total": 3,
    }
    assert [e.item.id for e in snapshot.urgent()] == ["milk", "eggs"]


class TestSnapshotStore:
    def test_starts_empty(self):
        store = SnapshotStore()
        assert len(store.current()) == 0

    def test_replace_swaps_whole_snapshot(self, items):
        store = SnapshotStore()
        first, _ = build_snapshot(items[:1], TODAY)
        second, _ = build_snapshot(items, TODAY)

        store.replace(first)
        held = store.current()
        previous = store.replace(second)

        assert previous is first
        assert store.current() is second
        # A reader holding the old reference still sees the complete old view
        assert list(held) == ["milk"]

    def test_replace_rejects_other_types(self):
        with pytest.raises(TypeError):
            SnapshotStore().replace({"a": 1})
