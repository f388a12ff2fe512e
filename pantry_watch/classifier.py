"""Expiry status classification at calendar-day granularity."""

from __future__ import annotations

from datetime import date, datetime

from .errors import ClassificationError
from .models import Status

EXPIRING_SOON_DAYS = 7


def _as_day(value: date | datetime) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_expiry_date(value, item_id: str | None = None) -> date:
    """Normalize a stored expiry value to a calendar date.

    Accepts ``date``, ``datetime`` or an ISO ``YYYY-MM-DD`` string. ISO
    datetime strings are truncated to their date part.

    Raises:
        ClassificationError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, (date, datetime)):
        return _as_day(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            return date.fromisoformat(text)
        except ValueError:
            raise ClassificationError(value, item_id) from None
    raise ClassificationError(value, item_id)


def days_until_expiry(expiry_date: date | datetime, today: date | datetime) -> int:
    """Whole days from ``today`` to ``expiry_date`` (negative once past)."""
    return (_as_day(expiry_date) - _as_day(today)).days


def classify(
    expiry_date: date | datetime,
    today: date | datetime,
    *,
    soon_days: int = EXPIRING_SOON_DAYS,
) -> Status:
    """Return the status of an item expiring on ``expiry_date``.

    ``expired`` once the date has passed, ``expiring_soon`` from ``soon_days``
    days out up to and including the expiry day, ``active`` otherwise.
    """
    days = days_until_expiry(expiry_date, today)
    if days < 0:
        return Status.EXPIRED
    if days <= soon_days:
        return Status.EXPIRING_SOON
    return Status.ACTIVE
