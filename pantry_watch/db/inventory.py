"""SQLite-backed item store with change notification."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from collections.abc import Callable
from datetime import date
from pathlib import Path

from ..errors import StoreUnavailable
from ..models import DEFAULT_LOCATION, Item
from ..sources import ChangeCallback, ItemSource, Unsubscribe
from .schema import ensure_schema

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "name",
    "expiry_date",
    "production_date",
    "quantity",
    "storage_location",
    "image_url",
}


def _to_text(value: date | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _location(value: str | None) -> str:
    if value is None or not value.strip():
        return DEFAULT_LOCATION
    return value.strip()


class InventoryDB(ItemSource):
    """Manages the items table.

    Every committed mutation notifies the subscribers registered through
    :meth:`on_change`.
    """

    def __init__(self, db_path: str | Path = "~/.config/pantry-watch/pantry.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._subscribers: list[ChangeCallback] = []

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = ensure_schema(self._db_path)
            except (sqlite3.Error, OSError) as e:
                raise StoreUnavailable(f"Cannot open {self._db_path}: {e}") from e
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -- change notification -------------------------------------------------

    def on_change(self, callback: ChangeCallback) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception:
                logger.exception("Change subscriber raised")

    def _write(self, sql: str, params: tuple) -> sqlite3.Cursor:
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ValueError(str(e)) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreUnavailable(str(e)) from e
        return cur

    # -- reads --------------------------------------------------------------

    async def list_items(self) -> list[Item]:
        return self.get_all()

    def get_all(self) -> list[Item]:
        """Return all items, most recently created first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM items ORDER BY created_at DESC, id"
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailable(str(e)) from e
        return [self._row_to_item(r) for r in rows]

    def get_item(self, item_id: str) -> Item | None:
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM items WHERE id = ?", (item_id,)).fetchone()
        return self._row_to_item(row) if row else None

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> Item:
        return Item(
            id=row["id"],
            name=row["name"],
            expiry_date=row["expiry_date"],
            production_date=row["production_date"],
            quantity=row["quantity"],
            storage_location=row["storage_location"],
            image_url=row["image_url"],
        )

    # -- writes -------------------------------------------------------------

    def add_item(
        self,
        name: str,
        expiry_date: date | str,
        *,
        production_date: date | str | None = None,
        quantity: float | None = None,
        storage_location: str | None = None,
        image_url: str | None = None,
        item_id: str | None = None,
    ) -> str:
        """Insert an item.

        Returns:
            The new item's id.
        """
        if not name or not str(expiry_date).strip():
            raise ValueError("name and expiry_date are required")

        item_id = item_id or uuid.uuid4().hex
        self._write(
            """INSERT INTO items
               (id, name, expiry_date, production_date, quantity,
                storage_location, image_url)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                item_id,
                name,
                _to_text(expiry_date),
                _to_text(production_date),
                float(quantity) if quantity else 1.0,
                _location(storage_location),
                image_url,
            ),
        )
        logger.info("Added item %s (%s)", item_id, name)
        self._notify()
        return item_id

    def update_item(self, item_id: str, **fields) -> None:
        """Update the given fields of an item.

        Raises:
            ValueError: If an unknown field is given.
            KeyError: If no item has ``item_id``.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if not fields:
            return

        values = dict(fields)
        for key in ("expiry_date", "production_date"):
            if key in values:
                values[key] = _to_text(values[key])
        if "storage_location" in values:
            values["storage_location"] = _location(values["storage_location"])

        assignments = ", ".join(f"{k} = ?" for k in values)
        cur = self._write(
            f"""UPDATE items
                SET {assignments},
                    updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now', 'localtime')
                WHERE id = ?""",
            (*values.values(), item_id),
        )
        if cur.rowcount == 0:
            raise KeyError(item_id)
        self._notify()

    def delete_item(self, item_id: str) -> bool:
        """Delete an item by id. Returns False if it did not exist."""
        cur = self._write("DELETE FROM items WHERE id = ?", (item_id,))
        if cur.rowcount == 0:
            return False
        logger.info("Deleted item %s", item_id)
        self._notify()
        return True
