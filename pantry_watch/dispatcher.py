"""Fan-out of notifications to the configured delivery channels."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field

from .errors import DeliveryFailure
from .models import Notification

logger = logging.getLogger(__name__)

LocalSender = Callable[[str, str], Awaitable[None]]
RemoteSender = Callable[[str, str, str], Awaitable[bool]]


class Channel(ABC):
    """A single delivery mechanism. Raising from :meth:`send` is a failure."""

    name: str = "channel"

    @abstractmethod
    async def send(self, notification: Notification) -> None:
        ...


class LocalAlertChannel(Channel):
    """On-device alert. Best-effort: an unavailable channel is not an error."""

    name = "local"

    def __init__(self, send_local: LocalSender) -> None:
        self._send_local = send_local

    async def send(self, notification: Notification) -> None:
        try:
            await self._send_local(notification.title, notification.message)
        except Exception as e:
            logger.debug("Local alert unavailable for %s: %s", notification.id, e)


class RemoteMessageChannel(Channel):
    """Outbound message (e.g. email) to every configured recipient."""

    name = "remote"

    def __init__(
        self,
        send_remote: RemoteSender,
        recipients: Sequence[str] | Callable[[], Sequence[str]],
    ) -> None:
        self._send_remote = send_remote
        self._recipients = recipients

    def recipients(self) -> list[str]:
        if callable(self._recipients):
            return list(self._recipients())
        return list(self._recipients)

    async def send(self, notification: Notification) -> None:
        addresses = self.recipients()
        if not addresses:
            logger.debug("No recipients configured; skipping %s", notification.id)
            return

        results = await asyncio.gather(
            *(
                self._send_remote(addr, notification.title, notification.message)
                for addr in addresses
            ),
            return_exceptions=True,
        )
        failed = [
            addr for addr, ok in zip(addresses, results)
            if isinstance(ok, BaseException) or not ok
        ]
        if failed:
            raise DeliveryFailure(
                self.name,
                notification.id,
                f"not delivered to {', '.join(failed)}",
            )


@dataclass
class DispatchReport:
    delivered: int = 0
    failures: list[DeliveryFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Dispatcher:
    """Delivers notifications to every channel independently.

    A failing channel is logged and reported; it never stops the other
    channels and never propagates to the caller.
    """

    def __init__(self, channels: Iterable[Channel] = ()) -> None:
        self._channels = list(channels)

    @property
    def channels(self) -> list[Channel]:
        return list(self._channels)

    async def dispatch(self, notifications: Iterable[Notification]) -> DispatchReport:
        report = DispatchReport()
        for notification in notifications:
            if not self._channels:
                continue
            results = await asyncio.gather(
                *(ch.send(notification) for ch in self._channels),
                return_exceptions=True,
            )
            for channel, result in zip(self._channels, results):
                if result is None:
                    report.delivered += 1
                    continue
                if isinstance(result, DeliveryFailure):
                    failure = result
                else:
                    failure = DeliveryFailure(channel.name, notification.id, result)
                logger.warning("Delivery failed: %s", failure)
                report.failures.append(failure)
        return report
