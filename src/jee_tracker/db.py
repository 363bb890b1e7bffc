"""Database initialization and connection management.

The tracker keeps its whole state as one JSON document per key, so the
schema is a single key/value table.
"""
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_DB_PATH = str(Path.home() / ".jee_tracker" / "tracker.db")

STATE_KEY = "magma-jee-state"

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the documents table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def read_document(db_path: str, key: str = STATE_KEY) -> Optional[str]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM documents WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else None


def write_document(db_path: str, text: str, key: str = STATE_KEY) -> None:
    """Store ``text`` under ``key``; the last write wins."""
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO documents (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
        (key, text, datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()
