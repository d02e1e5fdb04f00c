# daylog/utils/db/db_helper.py

from contextlib import contextmanager
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, List, Sequence

import daylog.config.config_manager as cf

logger = logging.getLogger(__name__)


def _resolve_db_path() -> Path:
    # Always read the latest env var at call time
    env_db = os.getenv("DAYLOG_DB_PATH", "").strip()
    if env_db:
        return Path(env_db).expanduser().resolve()
    return cf.BASE_DIR / "daylog.db"


# ───────────────────────────────────────────────────────────────────────────────
# Core Connection Context Manager
# ───────────────────────────────────────────────────────────────────────────────


@contextmanager
def get_connection():
    """
    Yields an sqlite3.Connection that:
      • has PRAGMA foreign_keys=ON
      • returns sqlite3.Row rows
      • will COMMIT on normal exit,
      • ROLLBACK on exception,
      • and ALWAYS CLOSE.
    """
    db_path = _resolve_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def safe_query(query: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
    """Run a SELECT and return all rows."""
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()


def safe_execute(query: str, params: Sequence[Any] = ()) -> int:
    """Run a write statement and return the affected row count."""
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute(query, params)
        return cur.rowcount
