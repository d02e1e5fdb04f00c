# daylog/utils/db/__init__.py

"""
Database connection, schema initialization, and repository APIs.
"""

# ─── Core connection helpers ────────────────────────────────────────────────────
from daylog.utils.db.db_helper import (
    get_connection,
    safe_execute,
    safe_query,
)

# ─── Schema management ───────────────────────────────────────────────────────────
from daylog.utils.db.database_manager import (
    is_initialized,
    initialize_schema,
    add_record,
    update_record,
)

# ─── Data models ────────────────────────────────────────────────────────────────
from daylog.utils.db import models

# ─── Repository sub-modules ─────────────────────────────────────────────────────
from daylog.utils.db import (
    category_repository,
    hour_log_repository,
)

# ─── Public API ─────────────────────────────────────────────────────────────────
__all__ = [
    # connection
    "get_connection",
    "safe_execute",
    "safe_query",
    # schema
    "is_initialized",
    "initialize_schema",
    "add_record",
    "update_record",
    # models & repositories
    "models",
    "category_repository",
    "hour_log_repository",
]
