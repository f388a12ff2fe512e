"""Turning status transitions into alerts, and the in-memory alert list."""

from __future__ import annotations

import itertools
import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from .models import Notification, Severity, Status
from .transitions import Transition

logger = logging.getLogger(__name__)

_SEVERITY_FOR_STATUS: dict[Status, Severity] = {
    Status.EXPIRING_SOON: Severity.WARNING,
    Status.EXPIRED: Severity.DANGER,
}

IdFactory = Callable[[Transition], str]


def _random_id(transition: Transition) -> str:
    return uuid.uuid4().hex


def _message(transition: Transition) -> str:
    name = transition.item.name
    if transition.current is Status.EXPIRED:
        return f"{name} has expired"
    days = transition.days_left
    if days == 0:
        return f"{name} expires today"
    if days == 1:
        return f"{name} is expiring soon (in 1 day)"
    if days is None:
        return f"{name} is expiring soon"
    return f"{name} is expiring soon (in {days} days)"


def to_notifications(
    transitions: Iterable[Transition],
    *,
    now: datetime | None = None,
    id_factory: IdFactory | None = None,
) -> list[Notification]:
    """Build one notification per transition into a warning/danger status.

    Transitions into ``active`` and removals never notify.

    Ids come from ``id_factory`` (a random hex id when omitted), and
    ``created_at`` is ``now`` (the current UTC time when omitted). Two calls
    give equal notifications only when both get the same transitions, the
    same ``now`` and an ``id_factory`` returning the same ids.
    """
    now = now or datetime.now(timezone.utc)
    make_id = id_factory or _random_id

    notifications: list[Notification] = []
    for t in transitions:
        severity = _SEVERITY_FOR_STATUS.get(t.current)
        if severity is None:
            continue
        notifications.append(
            Notification(
                id=make_id(t),
                item_id=t.item_id,
                item_name=t.item.name,
                severity=severity,
                status=t.current,
                message=_message(t),
                created_at=now,
            )
        )
    return notifications


class NotificationLog:
    """The alert list shown to the user.

    While an item stays in one warning/danger status, the log holds at most
    one unread notification for it. Leaving that status (see
    :meth:`end_epochs`) lets the next entry into it alert again. Entries are
    only ever changed by marking them read.
    """

    def __init__(self) -> None:
        self._entries: list[Notification] = []
        self._ids: set[str] = set()
        self._open: dict[tuple[str, Severity], Notification] = {}
        self._seq = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def next_id(self, transition: Transition) -> str:
        """Id factory for :func:`to_notifications`, unique within this log."""
        status = transition.current.value if transition.current else "removed"
        return f"{transition.item_id}:{status}:{next(self._seq)}"

    def end_epochs(self, transitions: Iterable[Transition]) -> None:
        """Forget the pending alert of every item that left its status."""
        for t in transitions:
            severity = _SEVERITY_FOR_STATUS.get(t.previous)
            if severity is not None and t.current is not t.previous:
                self._open.pop((t.item_id, severity), None)

    def add(self, notifications: Iterable[Notification]) -> list[Notification]:
        """Append new notifications, returning the ones actually accepted."""
        accepted: list[Notification] = []
        for n in notifications:
            if n.id in self._ids:
                continue
            if self._has_unread(n.item_id, n.severity):
                logger.debug(
                    "Suppressing %s alert for %s: an unread one is pending",
                    n.severity.value,
                    n.item_id,
                )
                continue
            self._entries.append(n)
            self._ids.add(n.id)
            self._open[(n.item_id, n.severity)] = n
            accepted.append(n)
        return accepted

    def _has_unread(self, item_id: str, severity: Severity) -> bool:
        pending = self._open.get((item_id, severity))
        return pending is not None and not pending.is_read

    def all(self) -> list[Notification]:
        """All notifications, newest first."""
        return list(reversed(self._entries))

    def unread(self) -> list[Notification]:
        return [n for n in self.all() if not n.is_read]

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._entries if not n.is_read)

    def get(self, notification_id: str) -> Notification | None:
        for n in self._entries:
            if n.id == notification_id:
                return n
        return None

    def mark_read(self, notification_id: str) -> bool:
        n = self.get(notification_id)
        if n is None:
            return False
        n.mark_read()
        return True

    def mark_all_read(self) -> int:
        count = 0
        for n in self._entries:
            if not n.is_read:
                n.mark_read()
                count += 1
        return count
