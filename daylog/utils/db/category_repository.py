# daylog/utils/db/category_repository.py
import logging
import uuid
from typing import Any, Dict, List, Optional

from daylog.utils.db.db_helper import get_connection, safe_query
from daylog.utils.db.database_manager import add_record, update_record
from daylog.utils.db.models import (
    Category,
    CategoryGroup,
    CategoryIndex,
    category_from_row,
    get_category_fields,
    get_group_fields,
    group_from_row,
)
from daylog.utils.core_utils import now_utc
from daylog.utils.error_handler import (
    ValidationError,
    handle_db_errors,
    validate_category_data,
    validate_group_data,
)

logger = logging.getLogger(__name__)


# ─── Groups ─────────────────────────────────────────────────────────────────────


@handle_db_errors("add_group")
def add_group(data: Dict[str, Any]) -> CategoryGroup:
    data = validate_group_data(dict(data))
    if get_group_by_name(data["name"]) is not None:
        raise ValidationError(f"Group '{data['name']}' already exists")
    now_iso = now_utc().isoformat()
    data.setdefault("uid", str(uuid.uuid4()))
    data["created_at"] = now_iso
    data["updated_at"] = now_iso
    new_id = add_record("category_groups", data, get_group_fields())
    logger.info("Added group %s (id=%s)", data["name"], new_id)
    return get_group(new_id)


def get_group(group_id: int) -> Optional[CategoryGroup]:
    rows = safe_query("SELECT * FROM category_groups WHERE id = ?", (group_id,))
    return group_from_row(dict(rows[0])) if rows else None


def get_group_by_name(name: str) -> Optional[CategoryGroup]:
    rows = safe_query(
        "SELECT * FROM category_groups WHERE lower(name) = lower(?)", (name.strip(),))
    return group_from_row(dict(rows[0])) if rows else None


def get_all_groups() -> List[CategoryGroup]:
    rows = safe_query("SELECT * FROM category_groups ORDER BY sort_order ASC, id ASC")
    return [group_from_row(dict(r)) for r in rows]


@handle_db_errors("update_group")
def update_group(group_id: int, **updates) -> Optional[CategoryGroup]:
    existing = get_group(group_id)
    if existing is None:
        return None
    merged = validate_group_data({**existing.asdict(), **updates})
    clash = get_group_by_name(merged["name"])
    if clash is not None and clash.id != group_id:
        raise ValidationError(f"Group '{merged['name']}' already exists")
    changes = {k: merged[k] for k in updates if k in ("name", "color_hex", "sort_order")}
    changes["updated_at"] = now_utc().isoformat()
    update_record("category_groups", group_id, changes)
    return get_group(group_id)


@handle_db_errors("delete_group")
def delete_group(group_id: int) -> int:
    """
    Delete a group and every category it owns.
    Hour logs that pointed at those categories survive as unlogged hours.
    Returns the number of categories removed.
    """
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("SELECT id FROM categories WHERE group_id = ?", (group_id,))
        category_ids = [row["id"] for row in cur.fetchall()]
        for category_id in category_ids:
            _nullify_hour_logs(cur, category_id)
        cur.execute("DELETE FROM categories WHERE group_id = ?", (group_id,))
        cur.execute("DELETE FROM category_groups WHERE id = ?", (group_id,))
    logger.info("Deleted group id=%s with %d categories", group_id, len(category_ids))
    return len(category_ids)


# ─── Categories ─────────────────────────────────────────────────────────────────


@handle_db_errors("add_category")
def add_category(data: Dict[str, Any]) -> Category:
    data = validate_category_data(dict(data))
    if data.get("group_id") is not None and get_group(data["group_id"]) is None:
        raise ValidationError(f"Group id {data['group_id']} does not exist")
    if get_category_by_name(data["name"]) is not None:
        raise ValidationError(f"Category '{data['name']}' already exists")
    now_iso = now_utc().isoformat()
    data.setdefault("uid", str(uuid.uuid4()))
    data["created_at"] = now_iso
    data["updated_at"] = now_iso
    new_id = add_record("categories", data, get_category_fields())
    logger.info("Added category %s (id=%s)", data["name"], new_id)
    return get_category(new_id)


def get_category(category_id: int) -> Optional[Category]:
    rows = safe_query("SELECT * FROM categories WHERE id = ?", (category_id,))
    return category_from_row(dict(rows[0])) if rows else None


def get_category_by_name(name: str) -> Optional[Category]:
    rows = safe_query(
        "SELECT * FROM categories WHERE lower(name) = lower(?)", (name.strip(),))
    return category_from_row(dict(rows[0])) if rows else None


def get_all_categories(group_id: Optional[int] = None) -> List[Category]:
    if group_id is not None:
        rows = safe_query(
            "SELECT * FROM categories WHERE group_id = ? ORDER BY sort_order ASC, id ASC",
            (group_id,))
    else:
        rows = safe_query("SELECT * FROM categories ORDER BY sort_order ASC, id ASC")
    return [category_from_row(dict(r)) for r in rows]


@handle_db_errors("update_category")
def update_category(category_id: int, **updates) -> Optional[Category]:
    existing = get_category(category_id)
    if existing is None:
        return None
    merged = validate_category_data({**existing.asdict(), **updates})
    clash = get_category_by_name(merged["name"])
    if clash is not None and clash.id != category_id:
        raise ValidationError(f"Category '{merged['name']}' already exists")
    if "group_id" in updates and merged["group_id"] is not None \
            and get_group(merged["group_id"]) is None:
        raise ValidationError(f"Group id {merged['group_id']} does not exist")
    changes = {k: merged[k] for k in updates
               if k in ("name", "icon", "sort_order", "group_id")}
    changes["updated_at"] = now_utc().isoformat()
    update_record("categories", category_id, changes)
    return get_category(category_id)


@handle_db_errors("delete_category")
def delete_category(category_id: int) -> int:
    """
    Delete a category. Its hour logs are kept with the category reference cleared.
    Returns the number of hour logs that became unlogged.
    """
    with get_connection() as conn:
        cur = conn.cursor()
        orphaned = _nullify_hour_logs(cur, category_id)
        cur.execute("DELETE FROM categories WHERE id = ?", (category_id,))
    logger.info("Deleted category id=%s, %d hour logs now unlogged", category_id, orphaned)
    return orphaned


def _nullify_hour_logs(cur, category_id: int) -> int:
    cur.execute(
        "UPDATE hour_logs SET category_id = NULL, updated_at = ? WHERE category_id = ?",
        (now_utc().isoformat(), category_id))
    return cur.rowcount


def load_category_index() -> CategoryIndex:
    """Snapshot of the whole hierarchy for the reporting engine."""
    return CategoryIndex(get_all_groups(), get_all_categories())
