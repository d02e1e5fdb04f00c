# tests/test_default_data.py

import pytest

from daylog.utils import default_data
from daylog.utils.db import category_repository, hour_log_repository
from daylog.utils.error_handler import ValidationError


def test_ensure_defaults_seeds_once():
    assert default_data.ensure_defaults() is True
    groups = category_repository.get_all_groups()
    assert [g.name for g in groups] == [name for name, _, _ in default_data.DEFAULT_GROUPS]
    expected = sum(len(cats) for _, _, cats in default_data.DEFAULT_GROUPS)
    assert len(category_repository.get_all_categories()) == expected

    assert default_data.ensure_defaults() is False
    assert len(category_repository.get_all_categories()) == expected


def test_ensure_defaults_leaves_existing_groups_alone():
    category_repository.add_group({"name": "Mine"})
    assert default_data.ensure_defaults() is False
    assert [g.name for g in category_repository.get_all_groups()] == ["Mine"]


def test_default_categories_belong_to_their_group():
    default_data.ensure_defaults()
    index = category_repository.load_category_index()
    assert index.group_for_category(index.category_by_name("Deep Work").id).name == "Work"
    assert index.group_for_category(index.category_by_name("Exercise").id).name == "Health"


def test_reset_to_defaults_wipes_data():
    default_data.ensure_defaults()
    category_repository.add_group({"name": "Extra"})
    deep = category_repository.get_category_by_name("Deep Work")
    hour_log_repository.save_hour_log({"day": "2024-03-04", "hour": 9, "category_id": deep.id})

    default_data.reset_to_defaults()
    assert hour_log_repository.get_all_hour_logs() == []
    assert category_repository.get_group_by_name("Extra") is None
    assert category_repository.get_group_by_name("Work") is not None


def test_failed_seed_leaves_nothing_behind(monkeypatch):
    original = default_data.DEFAULT_GROUPS
    broken = default_data.DEFAULT_GROUPS[:2] + [("", "#000000", [("Orphan", "circle.fill")])]
    monkeypatch.setattr(default_data, "DEFAULT_GROUPS", broken)
    with pytest.raises(ValidationError):
        default_data.ensure_defaults()
    assert category_repository.get_all_groups() == []
    assert category_repository.get_all_categories() == []

    monkeypatch.setattr(default_data, "DEFAULT_GROUPS", original)
    assert default_data.ensure_defaults() is True
    assert category_repository.get_group_by_name("Work") is not None
