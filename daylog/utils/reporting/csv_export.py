# daylog/utils/reporting/csv_export.py
'''
CSV export of hour logs, one row per logged hour.
'''

import csv
import logging
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import daylog.config.config_manager as cf
from daylog.utils.core_utils import now_local
from daylog.utils.db import category_repository, hour_log_repository
from daylog.utils.db.models import CategoryIndex, HourLog
from daylog.utils.error_handler import parse_day

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["date", "hour", "group", "category", "rating_or_mood", "notes"]


def _format_rating(rating: Optional[float]) -> str:
    if rating is None:
        return ""
    if float(rating).is_integer():
        return str(int(rating))
    return str(rating)


def export_rows(logs: Iterable[HourLog], index: CategoryIndex) -> List[Dict[str, str]]:
    """
    Rows in (day, hour) order with empty strings for missing values.
    """
    rows = []
    for log in sorted(logs, key=lambda l: (l.day, l.hour)):
        category = index.category(log.category_id)
        group = index.group_for_category(log.category_id)
        rows.append({
            "date": log.day.isoformat(),
            "hour": str(log.hour),
            "group": group.name if group else "",
            "category": category.name if category else "",
            "rating_or_mood": _format_rating(log.rating),
            "notes": log.notes or "",
        })
    return rows


def write_csv(logs: Iterable[HourLog], index: CategoryIndex, path: Union[str, Path]) -> int:
    """Write logs to `path`. Returns the number of data rows written."""
    path = Path(path)
    rows = export_rows(logs, index)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_COLUMNS, lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)
    logger.info(f"Exported {len(rows)} hour logs to {path}")
    return len(rows)


def default_export_dir() -> Path:
    configured = cf.get_config_value("export", "directory", "") or ""
    return Path(configured).expanduser() if configured else Path.cwd()


def export_logs(start_day: Union[str, date], end_day: Union[str, date],
                directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Export every log from start_day to end_day (both inclusive) to
    daylog_export_<today>.csv inside `directory`.
    """
    first, last = parse_day(start_day), parse_day(end_day)
    if first > last:
        first, last = last, first
    target_dir = Path(directory).expanduser() if directory else default_export_dir()
    path = target_dir / f"daylog_export_{now_local().date().isoformat()}.csv"

    logs = hour_log_repository.get_logs_in_range(first, last)
    write_csv(logs, category_repository.load_category_index(), path)
    return path


def read_csv(path: Union[str, Path]) -> List[Dict[str, str]]:
    with Path(path).open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def hours_by_category_name(rows: Iterable[Dict[str, str]]) -> Dict[str, int]:
    """Count exported rows per category name, skipping rows without one."""
    counts = Counter(row["category"] for row in rows if row.get("category"))
    return dict(counts)
