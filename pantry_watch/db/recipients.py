"""Email addresses that receive expiry alerts."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from .schema import ensure_schema


class RecipientDB:
    """Manages the notification_emails table."""

    def __init__(self, db_path: str | Path = "~/.config/pantry-watch/pantry.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get_all(self) -> list[str]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT email FROM notification_emails ORDER BY id"
        ).fetchall()
        return [r["email"] for r in rows]

    def add(self, email: str) -> None:
        """Register an address.

        Raises:
            ValueError: If the address is malformed or already registered.
        """
        email = email.strip()
        if "@" not in email:
            raise ValueError(f"Invalid email address: {email!r}")
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO notification_emails (email) VALUES (?)", (email,)
            )
        except sqlite3.IntegrityError:
            raise ValueError(f"Already registered: {email}") from None
        conn.commit()

    def update(self, old_email: str, new_email: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "UPDATE notification_emails SET email = ? WHERE email = ?",
                (new_email.strip(), old_email),
            )
        except sqlite3.IntegrityError:
            return False
        conn.commit()
        return cur.rowcount > 0

    def delete(self, email: str) -> bool:
        conn = self._get_conn()
        cur = conn.execute(
            "DELETE FROM notification_emails WHERE email = ?", (email,)
        )
        conn.commit()
        return cur.rowcount > 0
