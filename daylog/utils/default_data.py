# daylog/utils/default_data.py

import logging
import uuid
from typing import Any, Dict, List, Tuple

from daylog.utils.core_utils import now_utc
from daylog.utils.db import get_connection, hour_log_repository, safe_query
from daylog.utils.db.models import get_category_fields, get_group_fields
from daylog.utils.error_handler import handle_db_errors, validate_category_data, validate_group_data

logger = logging.getLogger(__name__)

# (group name, color, [(category name, icon), ...]) in display order
DEFAULT_GROUPS: List[Tuple[str, str, List[Tuple[str, str]]]] = [
    ("Work", "#34C759", [
        ("Deep Work", "chevron.left.forwardslash.chevron.right"),
        ("Planning", "calendar"),
        ("Writing", "pencil.line"),
        ("Research", "magnifyingglass"),
        ("Content Creation", "video.fill"),
        ("Communications", "envelope.fill"),
        ("Marketing", "megaphone.fill"),
    ]),
    ("Health", "#FF9500", [
        ("Exercise", "figure.run"),
        ("Sleep", "moon.fill"),
        ("Meals", "fork.knife"),
        ("Walk", "figure.walk"),
        ("Meditation", "figure.mind.and.body"),
        ("Hygiene", "drop.fill"),
    ]),
    ("Growth", "#AF52DE", [
        ("Reading", "book.fill"),
        ("Learning", "graduationcap.fill"),
        ("Courses", "desktopcomputer"),
        ("Skill Practice", "hammer.fill"),
    ]),
    ("Relationship", "#FF2D55", [
        ("Partner Time", "heart.fill"),
        ("Date Night", "heart.circle.fill"),
    ]),
    ("Family", "#007AFF", [
        ("Family Time", "house.fill"),
        ("Kids", "figure.and.child.holdinghands"),
        ("Parents", "person.2.fill"),
    ]),
    ("Social", "#5AC8FA", [
        ("Friends", "person.2.fill"),
        ("Networking", "network"),
        ("Community", "person.3.fill"),
    ]),
    ("Leisure", "#FFCC00", [
        ("Entertainment", "tv.fill"),
        ("Social Media", "iphone"),
        ("Gaming", "gamecontroller.fill"),
        ("Hobbies", "paintpalette.fill"),
    ]),
    ("Personal", "#8E8E93", [
        ("Chores", "sparkles"),
        ("Errands", "cart.fill"),
        ("Travel", "car.fill"),
        ("Finances", "dollarsign.circle.fill"),
    ]),
]


def _has_groups() -> bool:
    return bool(safe_query("SELECT 1 FROM category_groups LIMIT 1"))


def _insert(cur, table: str, data: Dict[str, Any], fields: List[str]) -> int:
    cols = ", ".join(fields)
    ph = ", ".join("?" for _ in fields)
    cur.execute(f"INSERT INTO {table} ({cols}) VALUES ({ph})", [data.get(f) for f in fields])
    return cur.lastrowid


@handle_db_errors("seed_defaults")
def seed_defaults() -> int:
    """
    Insert the default groups and their categories in one transaction;
    a failure part-way rolls back every insert.
    Returns the number of categories created.
    """
    created = 0
    now_iso = now_utc().isoformat()
    with get_connection() as conn:
        cur = conn.cursor()
        for group_order, (group_name, color, categories) in enumerate(DEFAULT_GROUPS):
            group = validate_group_data({
                "name": group_name,
                "color_hex": color,
                "sort_order": group_order,
                "uid": str(uuid.uuid4()),
                "created_at": now_iso,
                "updated_at": now_iso,
            })
            group_id = _insert(cur, "category_groups", group, get_group_fields())
            for cat_order, (name, icon) in enumerate(categories):
                category = validate_category_data({
                    "name": name,
                    "icon": icon,
                    "sort_order": cat_order,
                    "group_id": group_id,
                    "uid": str(uuid.uuid4()),
                    "created_at": now_iso,
                    "updated_at": now_iso,
                })
                _insert(cur, "categories", category, get_category_fields())
                created += 1
    logger.info("Seeded %d default groups with %d categories", len(DEFAULT_GROUPS), created)
    return created


def ensure_defaults() -> bool:
    """
    Seed the default hierarchy on first launch.
    Does nothing when any group already exists; returns True if seeding ran.
    """
    if _has_groups():
        return False
    seed_defaults()
    return True


def reset_to_defaults() -> None:
    """Delete everything, then seed the defaults again."""
    hour_log_repository.delete_all_data()
    seed_defaults()
