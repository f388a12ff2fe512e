"""Error types raised and reported by the reconciliation engine."""

from __future__ import annotations


class PantryWatchError(Exception):
    """Base class for engine errors."""


class ClassificationError(PantryWatchError, ValueError):
    """An item's expiry date could not be interpreted."""

    def __init__(self, value, item_id: str | None = None) -> None:
        self.value = value
        self.item_id = item_id
        target = f" for item {item_id!r}" if item_id else ""
        super().__init__(f"Invalid expiry date{target}: {value!r}")


class StoreUnavailable(PantryWatchError, RuntimeError):
    """The backing store could not be reached or refused the request."""


class FetchFailure(PantryWatchError):
    """A reconciliation cycle was aborted because the fetch failed.

    The last good snapshot is kept; the condition is recoverable and the next
    trigger retries.
    """

    user_message = "Could not refresh inventory; data may be stale."

    def __init__(self, source: str, cause: BaseException) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f"Refresh ({source}) failed: {cause}")


class DeliveryFailure(PantryWatchError):
    """A single channel failed to deliver a notification."""

    def __init__(
        self,
        channel: str,
        notification_id: str | None = None,
        cause: BaseException | str | None = None,
    ) -> None:
        self.channel = channel
        self.notification_id = notification_id
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Channel {channel!r} failed for {notification_id!r}{detail}"
        )
