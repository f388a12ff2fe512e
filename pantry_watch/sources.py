"""Item source interface consumed by the sync coordinator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from .models import Item

ChangeCallback = Callable[[], None]
Unsubscribe = Callable[[], None]


class ItemSource(ABC):
    """Abstract base for the store that holds the tracked items."""

    @abstractmethod
    async def list_items(self) -> list[Item]:
        """Return every tracked item.

        Raises:
            StoreUnavailable: On transport or authorization errors.
        """
        ...

    @abstractmethod
    def on_change(self, callback: ChangeCallback) -> Unsubscribe:
        """Call ``callback`` (with no arguments) whenever the data changes.

        The callback is a refresh signal only; it carries no delta.

        Returns:
            A function that cancels the subscription.
        """
        ...
