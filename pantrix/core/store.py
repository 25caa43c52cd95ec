"""Persistent key-value store — one JSON-serialized slice of state per key.

This is the only persistence boundary.  Every entity collection and every
UI-mode flag lives under its own stable key in the SQLite state table, and a
write always replaces the whole slice in a single upsert (last write wins).

Faults never reach the caller: a slice that cannot be read or decoded comes
back as the supplied default, and a write that fails is logged and dropped.
"""

import copy
import dataclasses
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

from pantrix.db.database import get_connection

LOGGER = logging.getLogger(__name__)

# Slice keys.  Each logical slice has its own key; never reuse one.
CURRENT_PAGE = "pantrix-currentPage"
USER_TYPE = "pantrix-userType"
PUBLIC_VIEW = "pantrix-publicView"
HOTEL_VIEW = "pantrix-hotelView"
USER_PROFILE = "pantrix-userProfile"
HOTEL_PROFILE = "pantrix-hotelProfile"
FOOD_BANK_PROFILE = "pantrix-foodBankProfile"
INVENTORY = "pantrix-inventory"
DONATION_REQUESTS = "pantrix-donationRequests"
SHOPPING_LIST = "pantrix-shoppingList"
REQUIREMENT_REQUESTS = "pantrix-requirementRequests"
WASTE_HOTSPOTS = "pantrix-wasteHotspots"
NOTIFICATIONS = "pantrix-notifications"
COOKED_FOOD = "pantrix-cookedFood"
COOKED_FOOD_ORDERS = "pantrix-cookedFoodOrders"
DONATION_COUNT = "pantrix-donationCount"
LANGUAGE = "pantrix-language"


class StorageReadError(Exception):
    """Raised internally when a stored slice cannot be read or decoded."""

    def __init__(self, key: str, cause: Exception) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"Error reading state key '{key}': {cause}")


class StorageWriteError(Exception):
    """Raised internally when a slice cannot be serialized or written."""

    def __init__(self, key: str, cause: Exception) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"Error writing state key '{key}': {cause}")


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class PersistentStore:
    """Read and write JSON slices in the state table.

    db_path=None resolves the path on every call, so override_db_path()
    and the DB_PATH env var are honoured per request.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for key, or a copy of default.

        Absence is not a fault.  Any read/decode failure is logged and the
        default is substituted.
        """
        try:
            raw = self._read(key)
            if raw is None:
                return copy.deepcopy(default)
            return json.loads(raw)
        except (sqlite3.Error, ValueError, TypeError) as exc:
            err = StorageReadError(key, exc)
            LOGGER.warning("%s; using default", err, exc_info=True)
            return copy.deepcopy(default)

    def set(self, key: str, value: Any) -> None:
        """Serialize value and replace the whole slice stored under key."""
        try:
            payload = json.dumps(value, default=_encode)
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    """INSERT INTO state (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                       ON CONFLICT(key) DO UPDATE SET value=excluded.value,
                       updated_at=excluded.updated_at""",
                    (key, payload),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, ValueError, TypeError) as exc:
            err = StorageWriteError(key, exc)
            LOGGER.warning("%s; value not persisted", err, exc_info=True)

    def delete(self, key: str) -> None:
        """Remove a slice. Missing keys are ignored."""
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute("DELETE FROM state WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            err = StorageWriteError(key, exc)
            LOGGER.warning("%s; slice not deleted", err, exc_info=True)

    def keys(self) -> list[str]:
        """Return every stored key, sorted."""
        try:
            conn = get_connection(self.db_path)
            try:
                rows = conn.execute("SELECT key FROM state ORDER BY key").fetchall()
                return [r["key"] for r in rows]
            finally:
                conn.close()
        except sqlite3.Error:
            LOGGER.warning("Error listing state keys", exc_info=True)
            return []

    def _read(self, key: str) -> Optional[str]:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("SELECT value FROM state WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()
