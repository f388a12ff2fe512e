"""Single-flight reconciliation of the item store into the live snapshot."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone

from .classifier import EXPIRING_SOON_DAYS
from .dispatcher import Dispatcher, DispatchReport
from .errors import FetchFailure, StoreUnavailable
from .models import Notification, RefreshSource
from .notifications import NotificationLog, to_notifications
from .snapshot import Snapshot, SnapshotStore, build_snapshot
from .sources import ItemSource, Unsubscribe
from .transitions import diff

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Owns the live snapshot and the alert list, and runs refresh cycles.

    At most one cycle runs at a time. Triggers arriving while a cycle is in
    flight are coalesced into a single follow-up cycle that starts as soon as
    the current one finishes.

    Args:
        source: Where items are fetched from.
        dispatcher: Delivers newly accepted notifications.
        clock: Returns "today"; injectable for tests.
        soon_days: Window for the ``expiring_soon`` status.
        on_error: Called with a :class:`FetchFailure` when a cycle aborts.
    """

    def __init__(
        self,
        source: ItemSource,
        dispatcher: Dispatcher | None = None,
        *,
        snapshots: SnapshotStore | None = None,
        log: NotificationLog | None = None,
        clock: Callable[[], date] = date.today,
        soon_days: int = EXPIRING_SOON_DAYS,
        on_error: Callable[[FetchFailure], None] | None = None,
    ) -> None:
        self._source = source
        self._dispatcher = dispatcher or Dispatcher()
        self._snapshots = snapshots or SnapshotStore()
        self._log = log or NotificationLog()
        self._clock = clock
        self._soon_days = soon_days
        self._on_error = on_error

        self._task: asyncio.Task | None = None
        self._in_flight = False
        self._pending: RefreshSource | None = None

        self.cycles_started = 0
        self.cycles_completed = 0
        self.coalesced = 0
        self.last_error: FetchFailure | None = None
        self.last_refreshed_at: datetime | None = None
        self.last_report: DispatchReport | None = None

    # -- UI surface ---------------------------------------------------------

    def current(self) -> Snapshot:
        return self._snapshots.current()

    def notifications(self) -> list[Notification]:
        return self._log.all()

    def unread(self) -> list[Notification]:
        return self._log.unread()

    def mark_read(self, notification_id: str) -> bool:
        return self._log.mark_read(notification_id)

    def mark_all_read(self) -> int:
        return self._log.mark_all_read()

    @property
    def stale(self) -> bool:
        """True while the most recent cycle failed to fetch."""
        return self.last_error is not None

    @property
    def busy(self) -> bool:
        return self._in_flight

    # -- triggering ---------------------------------------------------------

    def trigger_refresh(
        self, source: RefreshSource | str = RefreshSource.MUTATION
    ) -> asyncio.Task:
        """Request a cycle. Must be called from within the running loop.

        Returns the task that runs (or will run) the cycle covering this
        trigger.
        """
        source = RefreshSource(source)
        if self._in_flight and self._task is not None:
            if self._pending is not None:
                logger.debug(
                    "Pending %s refresh superseded by %s",
                    self._pending.value,
                    source.value,
                )
            self._pending = source
            self.coalesced += 1
            return self._task

        self._in_flight = True
        self._task = asyncio.get_running_loop().create_task(self._drain(source))
        return self._task

    async def refresh(
        self, source: RefreshSource | str = RefreshSource.MUTATION
    ) -> Snapshot:
        """Trigger a cycle and wait for it (and any follow-up) to finish."""
        await self.trigger_refresh(source)
        return self.current()

    async def wait_idle(self) -> None:
        while self._in_flight and self._task is not None:
            await self._task

    def attach(self) -> Unsubscribe:
        """Refresh whenever the source reports a change.

        Change callbacks may come from any thread; they are handed to the
        running loop.
        """
        loop = asyncio.get_running_loop()

        def _on_change(*_args, **_kwargs) -> None:
            loop.call_soon_threadsafe(self.trigger_refresh, RefreshSource.PUSH)

        return self._source.on_change(_on_change)

    # -- cycle --------------------------------------------------------------

    async def _drain(self, source: RefreshSource) -> None:
        try:
            next_source: RefreshSource | None = source
            while next_source is not None:
                try:
                    await self._run_cycle(next_source)
                except Exception:
                    logger.exception("Refresh cycle (%s) failed", next_source.value)
                next_source, self._pending = self._pending, None
        finally:
            self._in_flight = False

    async def _run_cycle(self, source: RefreshSource) -> None:
        self.cycles_started += 1
        logger.debug("Refresh cycle %d (%s)", self.cycles_started, source.value)

        try:
            items = await self._source.list_items()
        except Exception as e:
            self._fail(FetchFailure(source.value, e))
            return

        latest, rejected = build_snapshot(
            items, self._clock(), soon_days=self._soon_days
        )
        transitions = diff(self._snapshots.current(), latest)
        self._log.end_epochs(transitions)
        accepted = self._log.add(
            to_notifications(transitions, id_factory=self._log.next_id)
        )
        self._snapshots.replace(latest)

        self.last_error = None
        self.cycles_completed += 1
        self.last_refreshed_at = datetime.now(timezone.utc)
        logger.info(
            "Refreshed %d items (%d rejected): %d transitions, %d new alerts",
            len(latest),
            len(rejected),
            len(transitions),
            len(accepted),
        )

        if accepted:
            self.last_report = await self._dispatcher.dispatch(accepted)

    def _fail(self, failure: FetchFailure) -> None:
        self.last_error = failure
        if isinstance(failure.cause, StoreUnavailable):
            logger.warning("%s; keeping last snapshot", failure)
        else:
            logger.error("%s; keeping last snapshot", failure, exc_info=failure.cause)

        if self._on_error is not None:
            try:
                self._on_error(failure)
            except Exception:
                logger.exception("Error handler raised")
