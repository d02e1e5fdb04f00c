# tests/test_models.py

from dataclasses import fields as dataclass_fields
from datetime import date, datetime

import daylog.utils.db.models as m


def test_field_lists_exclude_id():
    assert m.get_hour_log_fields() == [f.name for f in dataclass_fields(m.HourLog) if f.name != "id"]
    assert "id" not in m.get_group_fields()
    assert "group_id" in m.get_category_fields()


def test_hour_log_from_row_parses_types():
    row = {
        "id": 3,
        "uid": "abc",
        "day": "2024-03-04",
        "hour": "9",
        "notes": None,
        "rating": 7,
        "category_id": 10,
        "created_at": "2024-03-04T09:15:00+00:00",
        "updated_at": None,
    }
    log = m.hour_log_from_row(row)
    assert log.day == date(2024, 3, 4)
    assert log.hour == 9
    assert log.notes == ""
    assert log.rating == 7.0
    assert isinstance(log.created_at, datetime)
    assert log.is_logged


def test_to_dict_is_json_safe():
    log = m.HourLog(id=1, day=date(2024, 3, 4), hour=9)
    data = log.to_dict()
    assert data["day"] == "2024-03-04"
    assert data["rating"] is None
    assert "HourLog(" in repr(log)
    assert log.is_logged is False


def test_group_and_category_from_row_defaults():
    group = m.group_from_row({"id": 1, "name": "Work", "color_hex": None, "sort_order": None})
    assert group.color_hex == "#8E8E93"
    assert group.sort_order == 0
    cat = m.category_from_row({"id": 2, "name": "Deep Work", "group_id": 1})
    assert cat.icon == "circle.fill"


def test_category_index_lookups():
    index = m.CategoryIndex(
        [m.CategoryGroup(id=2, name="B", sort_order=1), m.CategoryGroup(id=1, name="A", sort_order=1)],
        [m.Category(id=5, name="Loose"), m.Category(id=6, name="Dangling", group_id=42),
         m.Category(id=7, name="Inside", group_id=1)],
    )
    assert [g.id for g in index.groups] == [1, 2]
    assert index.group_for_category(7).name == "A"
    assert index.group_for_category(5) is None
    assert index.group_for_category(6) is None
    assert index.group_for_category(None) is None
    assert index.group_by_name(" b ").id == 2
    assert index.category_by_name("inside").id == 7
    assert index.category(999) is None
