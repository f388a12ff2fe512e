"""SQLite storage for tracked items and alert recipients."""

from .inventory import InventoryDB
from .recipients import RecipientDB
from .schema import ensure_schema

__all__ = [
    "InventoryDB",
    "RecipientDB",
    "ensure_schema",
]
