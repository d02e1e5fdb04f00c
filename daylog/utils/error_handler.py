# daylog/utils/error_handler.py
"""
Centralized error handling and validation for daylog.
"""
import sqlite3
import logging
import re
from datetime import date, datetime
from functools import wraps
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#?[0-9A-Fa-f]{6}$")


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


class DatabaseError(Exception):
    """Raised when database operations fail."""
    pass


def handle_db_errors(operation_name: str):
    """Decorator for consistent database error handling."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except sqlite3.IntegrityError as e:
                logger.warning(f"{operation_name} - integrity error: {e}")
                raise DatabaseError(f"{operation_name} failed: {e}") from e
            except sqlite3.OperationalError as e:
                error_msg = str(e).lower()
                if 'locked' in error_msg or 'busy' in error_msg:
                    logger.warning(f"{operation_name} - Database busy: {e}")
                else:
                    logger.error(f"{operation_name} - DB operational error: {e}")
                raise DatabaseError(f"Database operation failed: {e}") from e
            except sqlite3.Error as e:
                logger.error(f"{operation_name} - DB error: {e}")
                raise DatabaseError(f"Database error: {e}") from e
            except ValidationError as e:
                logger.warning(f"{operation_name} - Validation error: {e}")
                raise
        return wrapper
    return decorator


def sanitize_string(value: Any, max_length: int = 500) -> Optional[str]:
    """Sanitize and truncate string values."""
    if value is None:
        return None

    sanitized = str(value).strip()
    if not sanitized:
        return None

    if len(sanitized) > max_length:
        logger.warning(f"Truncating string from {len(sanitized)} to {max_length} characters")
        sanitized = sanitized[:max_length]

    return sanitized


def parse_day(value: Any) -> date:
    """Coerce a date, datetime or ISO string into a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValidationError(f"Invalid day '{value}', expected YYYY-MM-DD")
    raise ValidationError("Day is required")


def validate_hour_log_data(data: Dict[str, Any],
                           rating_bounds: Tuple[float, float] = (1.0, 10.0)) -> Dict[str, Any]:
    """
    Validate and sanitize hour log data before it is saved.
    Ratings outside rating_bounds are clamped, not rejected.
    """
    if not data:
        raise ValidationError("Hour log data cannot be empty")

    data["day"] = parse_day(data.get("day"))

    hour = data.get("hour")
    if isinstance(hour, bool):
        raise ValidationError("Hour must be a valid integer")
    try:
        hour = int(hour)
    except (ValueError, TypeError):
        raise ValidationError("Hour must be a valid integer")
    if not 0 <= hour <= 23:
        raise ValidationError("Hour must be between 0 and 23")
    data["hour"] = hour

    rating = data.get("rating")
    if rating is not None and rating != "":
        try:
            rating = float(rating)
        except (ValueError, TypeError):
            raise ValidationError("Rating must be a valid number")
        low, high = rating_bounds
        if rating < low or rating > high:
            clamped = min(max(rating, low), high)
            logger.warning(f"Rating {rating} outside {low}-{high}, clamped to {clamped}")
            rating = clamped
        data["rating"] = rating
    else:
        data["rating"] = None

    if data.get("category_id") is not None:
        try:
            data["category_id"] = int(data["category_id"])
        except (ValueError, TypeError):
            raise ValidationError("Category id must be a valid integer")

    data["notes"] = sanitize_string(data.get("notes"), max_length=1000) or ""
    return data


def validate_group_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and sanitize category group data."""
    if not data:
        raise ValidationError("Group data cannot be empty")

    name = sanitize_string(data.get("name"), max_length=100)
    if not name:
        raise ValidationError("Group name is required")
    data["name"] = name

    color = (data.get("color_hex") or "#8E8E93").strip()
    if not HEX_COLOR.match(color):
        raise ValidationError(f"Invalid color '{color}', expected #RRGGBB")
    data["color_hex"] = color if color.startswith("#") else f"#{color}"
    data["color_hex"] = data["color_hex"].upper()

    data["sort_order"] = _sort_order(data.get("sort_order"))
    return data


def validate_category_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and sanitize category data."""
    if not data:
        raise ValidationError("Category data cannot be empty")

    name = sanitize_string(data.get("name"), max_length=100)
    if not name:
        raise ValidationError("Category name is required")
    data["name"] = name
    data["icon"] = sanitize_string(data.get("icon"), max_length=64) or "circle.fill"
    data["sort_order"] = _sort_order(data.get("sort_order"))

    if data.get("group_id") is not None:
        try:
            data["group_id"] = int(data["group_id"])
        except (ValueError, TypeError):
            raise ValidationError("Group id must be a valid integer")
    return data


def _sort_order(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (ValueError, TypeError):
        raise ValidationError("Sort order must be a valid integer")
