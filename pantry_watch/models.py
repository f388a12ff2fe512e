"""Data models for tracked items and expiry notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from functools import total_ordering

DEFAULT_LOCATION = "unspecified"


@total_ordering
class Status(Enum):
    """Lifecycle status of an item, ordered by severity."""

    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"

    @property
    def severity(self) -> int:
        return _STATUS_RANK[self]

    def __lt__(self, other: Status) -> bool:
        if not isinstance(other, Status):
            return NotImplemented
        return self.severity < other.severity


_STATUS_RANK = {
    Status.ACTIVE: 0,
    Status.EXPIRING_SOON: 1,
    Status.EXPIRED: 2,
}


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


class RefreshSource(str, Enum):
    """What caused a reconciliation cycle to be requested."""

    TIMER = "timer"
    PUSH = "push"
    MUTATION = "mutation"


@dataclass(frozen=True)
class Item:
    """A tracked perishable item as handed over by the store.

    ``expiry_date`` may still be the raw ISO string read from storage; it is
    parsed (and rejected if malformed) when a snapshot is built.
    """

    id: str
    name: str
    expiry_date: date | str
    production_date: date | str | None = None
    quantity: float = 1.0
    storage_location: str = DEFAULT_LOCATION
    image_url: str | None = None


@dataclass
class Notification:
    """An alert raised for an item entering a warning or danger status."""

    id: str
    item_id: str
    item_name: str
    severity: Severity
    status: Status
    message: str
    is_read: bool = False
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def title(self) -> str:
        if self.status is Status.EXPIRED:
            return "Product expired"
        if self.status is Status.EXPIRING_SOON:
            return "Product expiring soon"
        return "Inventory notice"

    def mark_read(self) -> None:
        self.is_read = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "item_name": self.item_name,
            "type": self.severity.value,
            "status": self.status.value,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }
