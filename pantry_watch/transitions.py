"""Status change detection between two snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .models import Item, Status
from .snapshot import Snapshot


@dataclass(frozen=True)
class Transition:
    """A status change for one item.

    ``previous`` is None for an item seen for the first time; ``current`` is
    None for an item that disappeared.
    """

    item_id: str
    previous: Status | None
    current: Status | None
    item: Item
    expiry: date
    days_left: int | None = None

    @property
    def is_new(self) -> bool:
        return self.previous is None

    @property
    def is_removed(self) -> bool:
        return self.current is None


def diff(previous: Snapshot, latest: Snapshot) -> list[Transition]:
    """Compute the transitions that turn ``previous`` into ``latest``.

    Items whose status did not change produce nothing. The result is ordered
    by ascending expiry date, most urgent first.
    """
    transitions: list[Transition] = []

    for item_id, entry in latest.items():
        before = previous.status_of(item_id)
        if before is entry.status:
            continue
        transitions.append(
            Transition(
                item_id=item_id,
                previous=before,
                current=entry.status,
                item=entry.item,
                expiry=entry.expiry,
                days_left=entry.days_left,
            )
        )

    for item_id, entry in previous.items():
        if item_id in latest:
            continue
        transitions.append(
            Transition(
                item_id=item_id,
                previous=entry.status,
                current=None,
                item=entry.item,
                expiry=entry.expiry,
            )
        )

    transitions.sort(key=lambda t: (t.expiry, t.item_id))
    return transitions
