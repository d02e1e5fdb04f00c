# daylog/utils/db/database_manager.py

import logging
import sqlite3
import uuid
from typing import Any, Dict, List

from daylog.utils.db.db_helper import _resolve_db_path, get_connection

logger = logging.getLogger(__name__)

TABLES = ("category_groups", "categories", "hour_logs")


def is_initialized() -> bool:
    """Check if database exists and has tables"""
    db_path = _resolve_db_path()
    if not db_path.exists():
        return False

    try:
        with get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
            names = {row["name"] for row in cur.fetchall()}
        return all(t in names for t in TABLES)
    except sqlite3.Error:
        return False


def initialize_schema():
    """
    Create all tables and indexes.
    Uses get_connection() as a context-manager, which:
      • commits on normal exit,
      • rolls back on exception,
      • and always closes.
    """
    with get_connection() as conn:
        cursor = conn.cursor()

        # ───────────────────────────────────────────────────────────────────────
        # Core tables
        # ───────────────────────────────────────────────────────────────────────
        cursor.executescript("""
        CREATE TABLE IF NOT EXISTS category_groups (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE,
            name TEXT NOT NULL,
            color_hex TEXT NOT NULL DEFAULT '#8E8E93',
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE,
            name TEXT NOT NULL,
            icon TEXT NOT NULL DEFAULT 'circle.fill',
            sort_order INTEGER NOT NULL DEFAULT 0,
            group_id INTEGER,
            created_at TEXT,
            updated_at TEXT,
            FOREIGN KEY (group_id) REFERENCES category_groups(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS hour_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE,
            day DATE NOT NULL,
            hour INTEGER NOT NULL CHECK (hour BETWEEN 0 AND 23),
            notes TEXT NOT NULL DEFAULT '',
            rating REAL,
            category_id INTEGER,
            created_at TEXT,
            updated_at TEXT,
            UNIQUE (day, hour),
            FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
        );
        """)

        # ───────────────────────────────────────────────────────────────────────
        # Indexes
        # ───────────────────────────────────────────────────────────────────────
        cursor.executescript("""
        CREATE INDEX IF NOT EXISTS idx_categories_group_id ON categories(group_id);
        CREATE INDEX IF NOT EXISTS idx_hour_logs_day ON hour_logs(day);
        CREATE INDEX IF NOT EXISTS idx_hour_logs_category_id ON hour_logs(category_id);
        """)
    logger.debug("Schema initialized at %s", _resolve_db_path())


def add_record(table: str, data: Dict[str, Any], fields: List[str]) -> int:
    with get_connection() as conn:
        cursor = conn.cursor()
        if "uid" in fields and not data.get("uid"):
            data["uid"] = str(uuid.uuid4())
        cols = ', '.join(fields)
        ph = ', '.join('?' for _ in fields)
        vals = [data.get(f) for f in fields]
        cursor.execute(f"INSERT INTO {table} ({cols}) VALUES ({ph})", vals)
        new_id = cursor.lastrowid
        # no conn.commit() or conn.close() here, the contextmanager handles both
    return new_id


def update_record(table: str, record_id: int, updates: Dict[str, Any]) -> None:
    """
    Update a single row in `table` by its numeric primary key `id`.
    `updates` is a dict mapping column names to new values.
    """
    if not updates:
        return
    fields = [f"{col} = ?" for col in updates.keys()]
    values = list(updates.values())
    values.append(record_id)

    sql = f"UPDATE {table} SET {', '.join(fields)} WHERE id = ?"

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, values)
