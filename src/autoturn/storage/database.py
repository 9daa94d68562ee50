"""
SQLite Database Connection Manager and Schema
Handles persistent storage for per-token action queues.
"""

import sqlite3
import json
from pathlib import Path
from typing import Any, Self
from contextlib import contextmanager

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- =============================================================================
-- SCHEMA VERSION TRACKING
-- =============================================================================
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- =============================================================================
-- ACTION QUEUES
-- One row per token. Holds the versioned queue envelope.
-- =============================================================================
CREATE TABLE IF NOT EXISTS action_queues (
    subject_id TEXT PRIMARY KEY,
    version TEXT NOT NULL,
    enabled INTEGER NOT NULL DEFAULT 1,  -- boolean
    actions JSON NOT NULL,  -- Array of serialized action records
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TRIGGER IF NOT EXISTS update_action_queues_timestamp
    AFTER UPDATE ON action_queues
    BEGIN
        UPDATE action_queues SET updated_at = CURRENT_TIMESTAMP WHERE subject_id = NEW.subject_id;
    END;
"""


class Database:
    """SQLite database connection manager with schema initialization."""

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file.
                     Use ":memory:" for in-memory database.
                     None defaults to data/queues.db
        """
        if db_path is None:
            db_path = Path("data") / "queues.db"

        self.db_path = Path(db_path) if db_path != ":memory:" else db_path
        self._connection: sqlite3.Connection | None = None

        # Ensure data directory exists
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self.db_path)
            # Return dicts instead of tuples
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def __enter__(self) -> Self:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a single query."""
        return self.connection.execute(query, params)

    def executescript(self, script: str) -> sqlite3.Cursor:
        """Execute multiple SQL statements."""
        return self.connection.executescript(script)

    def commit(self) -> None:
        """Commit the current transaction."""
        self.connection.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.connection.rollback()

    def fetch_one(self, query: str, params: tuple = ()) -> sqlite3.Row | None:
        """Execute query and fetch one result."""
        cursor = self.execute(query, params)
        return cursor.fetchone()

    @contextmanager
    def transaction(self):
        """Context manager for transactions with auto-commit/rollback."""
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise

    def init_schema(self) -> None:
        """Initialize database schema."""
        self.executescript(SCHEMA_SQL)

        # Record schema version
        self.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,)
        )
        self.commit()

    def get_schema_version(self) -> int | None:
        """Get current schema version."""
        try:
            row = self.fetch_one("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
            return row["version"] if row else None
        except sqlite3.OperationalError:
            return None

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        row = self.fetch_one(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,)
        )
        return row is not None

    def get_table_count(self, table_name: str) -> int:
        """Get row count for a table."""
        row = self.fetch_one(f"SELECT COUNT(*) as count FROM {table_name}")
        return row["count"] if row else 0


# Helper functions for JSON serialization
def to_json(obj: Any) -> str | None:
    """Serialize object to JSON string for storage."""
    if obj is None:
        return None
    return json.dumps(obj, default=str)


def from_json(json_str: str | None) -> Any:
    """Deserialize JSON string from storage."""
    if json_str is None:
        return None
    return json.loads(json_str)
