"""SQLite database connection management and schema initialization.

Provides a single-file database at ~/.pantrix/pantrix.db.
Every public function that needs a connection should call get_connection(),
use it, and close it in a finally block.
"""

import os
import sqlite3
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path

_db_path_override: ContextVar["Path | None"] = ContextVar("_db_path_override", default=None)


@contextmanager
def override_db_path(path: "Path"):
    """Context manager to override the DB path for the current async task/thread.

    Used by demo routes to serve reads from the demo DB without affecting
    other concurrent requests.

    Example:
        with override_db_path(DEMO_DB_PATH):
            items = AppState(PersistentStore()).inventory()
    """
    token = _db_path_override.set(path)
    try:
        yield
    finally:
        _db_path_override.reset(token)


def get_db_path() -> Path:
    """Return the active DB path.

    Priority order:
    1. ContextVar override (used by demo routes per-request)
    2. DB_PATH environment variable (used by Docker / local dev)
    3. Default ~/.pantrix/pantrix.db (desktop fallback)
    """
    override = _db_path_override.get()
    if override is not None:
        return override
    env_url = os.environ.get("DB_PATH")
    if env_url:
        p = Path(env_url)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    db_dir = Path.home() / ".pantrix"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "pantrix.db"


def get_connection(db_path: Path = None) -> sqlite3.Connection:
    """Return a new SQLite connection with Row factory enabled.

    Callers are responsible for closing the connection when done.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path = None) -> None:
    """Create all tables if they don't already exist.

    Called once at application startup from main.py.
    Tables: state (one JSON slice per key), settings.
    """
    conn = get_connection(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS state (
                key        TEXT PRIMARY KEY,
                value      TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS settings (
                key   TEXT PRIMARY KEY,
                value TEXT
            );
        """)
        conn.commit()
    finally:
        conn.close()
