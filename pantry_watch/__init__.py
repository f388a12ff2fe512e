"""Expiry tracking and alerting for perishable inventory."""

from .classifier import classify, days_until_expiry, parse_expiry_date
from .config import PantryConfig, load_config
from .coordinator import SyncCoordinator
from .dispatcher import (
    Channel,
    DispatchReport,
    Dispatcher,
    LocalAlertChannel,
    RemoteMessageChannel,
)
from .errors import (
    ClassificationError,
    DeliveryFailure,
    FetchFailure,
    PantryWatchError,
    StoreUnavailable,
)
from .models import Item, Notification, RefreshSource, Severity, Status
from .notifications import NotificationLog, to_notifications
from .snapshot import Snapshot, SnapshotEntry, SnapshotStore, build_snapshot
from .sources import ItemSource
from .transitions import Transition, diff

__all__ = [
    "classify",
    "days_until_expiry",
    "parse_expiry_date",
    "PantryConfig",
    "load_config",
    "SyncCoordinator",
    "Channel",
    "DispatchReport",
    "Dispatcher",
    "LocalAlertChannel",
    "RemoteMessageChannel",
    "ClassificationError",
    "DeliveryFailure",
    "FetchFailure",
    "PantryWatchError",
    "StoreUnavailable",
    "Item",
    "Notification",
    "RefreshSource",
    "Severity",
    "Status",
    "NotificationLog",
    "to_notifications",
    "Snapshot",
    "SnapshotEntry",
    "SnapshotStore",
    "build_snapshot",
    "ItemSource",
    "Transition",
    "diff",
]
