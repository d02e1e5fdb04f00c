# daylog/utils/db/hour_log_repository.py
import logging
import uuid
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import daylog.config.config_manager as cf
from daylog.utils.db.db_helper import get_connection, safe_execute, safe_query
from daylog.utils.db.database_manager import add_record, update_record
from daylog.utils.db.models import HourLog, get_hour_log_fields, hour_log_from_row
from daylog.utils.core_utils import now_utc
from daylog.utils.error_handler import (
    ValidationError,
    handle_db_errors,
    parse_day,
    validate_hour_log_data,
)

logger = logging.getLogger(__name__)


@handle_db_errors("save_hour_log")
def save_hour_log(data: Dict[str, Any]) -> HourLog:
    """
    Create or update the log for (day, hour).
    There is at most one log per slot: saving into an occupied slot updates it,
    keeping its uid and created_at.
    """
    data = validate_hour_log_data(dict(data), cf.get_rating_bounds())
    category_id = data.get("category_id")
    if category_id is not None:
        if not safe_query("SELECT 1 FROM categories WHERE id = ?", (category_id,)):
            raise ValidationError(f"Category id {category_id} does not exist")

    now_iso = now_utc().isoformat()
    day_iso = data["day"].isoformat()
    existing = get_hour_log(data["day"], data["hour"])
    if existing is not None:
        updates = {
            "notes": data["notes"],
            "rating": data["rating"],
            "category_id": category_id,
            "updated_at": now_iso,
        }
        update_record("hour_logs", existing.id, updates)
        logger.debug("Updated hour log %s %02d:00", day_iso, data["hour"])
    else:
        record = {
            "uid": data.get("uid") or str(uuid.uuid4()),
            "day": day_iso,
            "hour": data["hour"],
            "notes": data["notes"],
            "rating": data["rating"],
            "category_id": category_id,
            "created_at": now_iso,
            "updated_at": now_iso,
        }
        add_record("hour_logs", record, get_hour_log_fields())
        logger.debug("Created hour log %s %02d:00", day_iso, data["hour"])
    return get_hour_log(data["day"], data["hour"])


@handle_db_errors("save_hour_range")
def save_hour_range(day: Any, hours: List[int], category_id: Optional[int] = None,
                    notes: Optional[str] = None, rating: Optional[float] = None) -> List[HourLog]:
    """
    Apply one category and note to several slots of a day in one transaction.
    Occupied slots are updated and keep their rating unless `rating` is given;
    empty slots get a new log.
    """
    if not hours:
        return []
    bounds = cf.get_rating_bounds()
    batch = [validate_hour_log_data(
        {"day": day, "hour": hour, "category_id": category_id, "notes": notes, "rating": rating},
        bounds) for hour in hours]
    if category_id is not None:
        if not safe_query("SELECT 1 FROM categories WHERE id = ?", (batch[0]["category_id"],)):
            raise ValidationError(f"Category id {category_id} does not exist")

    day_iso = parse_day(day).isoformat()
    now_iso = now_utc().isoformat()
    with get_connection() as conn:
        cur = conn.cursor()
        for data in batch:
            cur.execute("SELECT id, rating FROM hour_logs WHERE day = ? AND hour = ?",
                        (day_iso, data["hour"]))
            row = cur.fetchone()
            if row is not None:
                kept = data["rating"] if data["rating"] is not None else row["rating"]
                cur.execute(
                    "UPDATE hour_logs SET category_id = ?, notes = ?, rating = ?, updated_at = ? "
                    "WHERE id = ?",
                    (data["category_id"], data["notes"], kept, now_iso, row["id"]))
            else:
                cur.execute(
                    "INSERT INTO hour_logs (uid, day, hour, notes, rating, category_id, "
                    "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (str(uuid.uuid4()), day_iso, data["hour"], data["notes"], data["rating"],
                     data["category_id"], now_iso, now_iso))
    logger.debug("Saved %d hour logs on %s", len(batch), day_iso)
    return [log for log in get_logs_for_day(day_iso) if log.hour in set(hours)]


def get_hour_log(day: Any, hour: int) -> Optional[HourLog]:
    rows = safe_query(
        "SELECT * FROM hour_logs WHERE day = ? AND hour = ?",
        (parse_day(day).isoformat(), int(hour)))
    return hour_log_from_row(dict(rows[0])) if rows else None


def get_logs_for_day(day: Any) -> List[HourLog]:
    rows = safe_query(
        "SELECT * FROM hour_logs WHERE day = ? ORDER BY hour ASC",
        (parse_day(day).isoformat(),))
    return [hour_log_from_row(dict(r)) for r in rows]


def get_logs_between(start_day: Any, end_day: Any) -> List[HourLog]:
    """
    Logs with start_day <= day < end_day, ordered by (day, hour).
    """
    rows = safe_query(
        "SELECT * FROM hour_logs WHERE day >= ? AND day < ? ORDER BY day ASC, hour ASC",
        (parse_day(start_day).isoformat(), parse_day(end_day).isoformat()))
    return [hour_log_from_row(dict(r)) for r in rows]


def get_logs_in_range(first_day: date, last_day: date) -> List[HourLog]:
    """Inclusive variant used by the exporter."""
    return get_logs_between(first_day, parse_day(last_day) + timedelta(days=1))


def get_all_hour_logs() -> List[HourLog]:
    rows = safe_query("SELECT * FROM hour_logs ORDER BY day ASC, hour ASC")
    return [hour_log_from_row(dict(r)) for r in rows]


def get_last_logged_hour(day: Any) -> Optional[int]:
    rows = safe_query(
        "SELECT MAX(hour) AS last_hour FROM hour_logs WHERE day = ?",
        (parse_day(day).isoformat(),))
    if not rows or rows[0]["last_hour"] is None:
        return None
    return int(rows[0]["last_hour"])


@handle_db_errors("delete_hour_log")
def delete_hour_log(day: Any, hour: int) -> bool:
    removed = safe_execute(
        "DELETE FROM hour_logs WHERE day = ? AND hour = ?",
        (parse_day(day).isoformat(), int(hour)))
    return removed > 0


@handle_db_errors("delete_all_data")
def delete_all_data() -> None:
    """Remove every hour log, category and group."""
    with get_connection() as conn:
        cur = conn.cursor()
        cur.execute("DELETE FROM hour_logs")
        cur.execute("DELETE FROM categories")
        cur.execute("DELETE FROM category_groups")
    logger.info("All daylog data deleted")
