# tests/test_csv_export.py

from datetime import date

from daylog.utils.db import category_repository, hour_log_repository
from daylog.utils.reporting import csv_export
from daylog.utils.reporting.aggregator import aggregate
from daylog.utils.reporting.periods import PeriodKind, period_window


def test_export_rows_sorted_with_empty_strings(make_log, index):
    logs = [
        make_log(date(2024, 3, 5), 9, 20, rating=7.0),
        make_log(date(2024, 3, 4), 14, None, notes="nap"),
        make_log(date(2024, 3, 4), 9, 10, rating=6.5),
    ]
    rows = csv_export.export_rows(logs, index)
    assert [(r["date"], r["hour"]) for r in rows] == [
        ("2024-03-04", "9"), ("2024-03-04", "14"), ("2024-03-05", "9")]
    assert rows[0] == {
        "date": "2024-03-04", "hour": "9", "group": "Work",
        "category": "Deep Work", "rating_or_mood": "6.5", "notes": ""}
    assert rows[1]["group"] == "" and rows[1]["category"] == ""
    assert rows[1]["rating_or_mood"] == ""
    assert rows[2]["rating_or_mood"] == "7"


def test_write_csv_quotes_commas_quotes_and_newlines(tmp_path, make_log, index):
    logs = [make_log(date(2024, 3, 4), 9, 10, notes='said "hi", then\nleft')]
    path = tmp_path / "out.csv"
    assert csv_export.write_csv(logs, index, path) == 1

    text = path.read_text(encoding="utf-8")
    assert text.startswith("date,hour,group,category,rating_or_mood,notes\n")
    assert '"said ""hi"", then\nleft"' in text

    rows = csv_export.read_csv(path)
    assert rows[0]["notes"] == 'said "hi", then\nleft'


def test_round_trip_reproduces_hours_by_category(tmp_path, make_log, index):
    logs = [make_log(date(2024, 3, 4), h, 10) for h in range(8, 13)] + \
        [make_log(date(2024, 3, 5), h, 30) for h in range(19, 22)] + \
        [make_log(date(2024, 3, 6), 7, None)]
    path = tmp_path / "round.csv"
    csv_export.write_csv(logs, index, path)

    result = aggregate(logs, period_window(date(2024, 3, 4), PeriodKind.WEEK), index)
    expected = {index.category(cid).name: hours
                for cid, hours in result.hours_by_category.items()}
    assert csv_export.hours_by_category_name(csv_export.read_csv(path)) == expected


def test_export_logs_inclusive_range(tmp_path):
    group = category_repository.add_group({"name": "Work", "color_hex": "#34C759"})
    cat = category_repository.add_category({"name": "Deep Work", "group_id": group.id})
    for day in ("2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04"):
        hour_log_repository.save_hour_log({"day": day, "hour": 9, "category_id": cat.id})

    path = csv_export.export_logs("2024-03-02", "2024-03-03", tmp_path / "exports")
    assert path.parent == tmp_path / "exports"
    assert path.name.startswith("daylog_export_") and path.suffix == ".csv"
    rows = csv_export.read_csv(path)
    assert [r["date"] for r in rows] == ["2024-03-02", "2024-03-03"]
    assert rows[0]["group"] == "Work"
