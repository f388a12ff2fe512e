"""Immutable point-in-time views of the tracked items and their statuses."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType

from .classifier import (
    EXPIRING_SOON_DAYS,
    classify,
    days_until_expiry,
    parse_expiry_date,
)
from .errors import ClassificationError
from .models import Item, Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotEntry:
    item: Item
    status: Status
    expiry: date
    days_left: int


@dataclass(frozen=True)
class RejectedItem:
    item: Item
    error: ClassificationError


class Snapshot(Mapping):
    """Read-only mapping of item id to :class:`SnapshotEntry`."""

    __slots__ = ("_entries", "_taken_on")

    def __init__(
        self,
        entries: Mapping[str, SnapshotEntry] | None = None,
        taken_on: date | None = None,
    ) -> None:
        self._entries = MappingProxyType(dict(entries or {}))
        self._taken_on = taken_on

    def __getitem__(self, item_id: str) -> SnapshotEntry:
        return self._entries[item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Snapshot(taken_on={self._taken_on}, items={len(self)})"

    @property
    def taken_on(self) -> date | None:
        return self._taken_on

    def status_of(self, item_id: str) -> Status | None:
        entry = self._entries.get(item_id)
        return entry.status if entry else None

    def items_by_expiry(self) -> list[SnapshotEntry]:
        return sorted(self._entries.values(), key=lambda e: (e.expiry, e.item.id))

    def urgent(self) -> list[SnapshotEntry]:
        """Entries that are expiring soon or expired, most urgent first."""
        return [e for e in self.items_by_expiry() if e.status is not Status.ACTIVE]

    def counts(self) -> dict[str, int]:
        result = {s.value: 0 for s in Status}
        for entry in self._entries.values():
            result[entry.status.value] += 1
        result["total"] = len(self._entries)
        return result


EMPTY_SNAPSHOT = Snapshot()


def build_snapshot(
    items: Iterable[Item],
    today: date,
    *,
    soon_days: int = EXPIRING_SOON_DAYS,
) -> tuple[Snapshot, list[RejectedItem]]:
    """Classify ``items`` as of ``today``.

    Items with an unusable expiry date are left out of the snapshot and
    returned separately; they never abort the build.
    """
    entries: dict[str, SnapshotEntry] = {}
    rejected: list[RejectedItem] = []
    for item in items:
        try:
            expiry = parse_expiry_date(item.expiry_date, item.id)
        except ClassificationError as e:
            logger.warning("Skipping item %s (%s): %s", item.id, item.name, e)
            rejected.append(RejectedItem(item=item, error=e))
            continue
        if item.id in entries:
            logger.warning("Duplicate item id %s in fetch; keeping the later row", item.id)
        entries[item.id] = SnapshotEntry(
            item=item,
            status=classify(expiry, today, soon_days=soon_days),
            expiry=expiry,
            days_left=days_until_expiry(expiry, today),
        )
    return Snapshot(entries, taken_on=today), rejected


class SnapshotStore:
    """Holds the single live snapshot.

    The only mutation is :meth:`replace`, which swaps the whole reference, so
    a reader always gets one complete snapshot.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._current = initial if initial is not None else EMPTY_SNAPSHOT

    def current(self) -> Snapshot:
        return self._current

    def replace(self, snapshot: Snapshot) -> Snapshot:
        """Install ``snapshot`` as the live one and return the previous."""
        if not isinstance(snapshot, Snapshot):
            raise TypeError(f"expected Snapshot, got {type(snapshot).__name__}")
        previous, self._current = self._current, snapshot
        return previous
