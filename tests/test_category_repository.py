# tests/test_category_repository.py

import pytest

from daylog.utils.db import category_repository as repo
from daylog.utils.db import hour_log_repository
from daylog.utils.error_handler import ValidationError


@pytest.fixture
def work():
    group = repo.add_group({"name": "Work", "color_hex": "34c759", "sort_order": 0})
    deep = repo.add_category({"name": "Deep Work", "group_id": group.id, "sort_order": 0})
    email = repo.add_category({"name": "Email", "group_id": group.id, "sort_order": 1})
    return group, deep, email


def test_add_group_normalizes_color(work):
    group, _, _ = work
    assert group.id is not None
    assert group.uid
    assert group.color_hex == "#34C759"
    assert repo.get_group_by_name("work").id == group.id


def test_duplicate_names_rejected(work):
    with pytest.raises(ValidationError):
        repo.add_group({"name": "WORK"})
    with pytest.raises(ValidationError):
        repo.add_category({"name": "deep work", "group_id": work[0].id})


def test_invalid_color_rejected():
    with pytest.raises(ValidationError):
        repo.add_group({"name": "Bad", "color_hex": "green"})


def test_category_needs_existing_group():
    with pytest.raises(ValidationError):
        repo.add_category({"name": "Floating", "group_id": 999})


def test_get_all_categories_ordered(work):
    group, deep, email = work
    assert [c.name for c in repo.get_all_categories()] == ["Deep Work", "Email"]
    assert [c.id for c in repo.get_all_categories(group.id)] == [deep.id, email.id]


def test_update_group_and_category(work):
    group, deep, _ = work
    updated = repo.update_group(group.id, name="Career", color_hex="#000000")
    assert updated.name == "Career"
    assert updated.color_hex == "#000000"
    other = repo.add_group({"name": "Health"})
    moved = repo.update_category(deep.id, group_id=other.id, icon="bolt")
    assert moved.group_id == other.id
    assert moved.icon == "bolt"
    assert repo.update_category(12345, name="Nope") is None


def test_delete_category_nullifies_hour_logs(work):
    _, deep, email = work
    hour_log_repository.save_hour_log({"day": "2024-03-04", "hour": 9, "category_id": deep.id})
    hour_log_repository.save_hour_log({"day": "2024-03-04", "hour": 10, "category_id": email.id})

    assert repo.delete_category(deep.id) == 1
    assert repo.get_category(deep.id) is None
    logs = hour_log_repository.get_logs_for_day("2024-03-04")
    assert [(log.hour, log.category_id) for log in logs] == [(9, None), (10, email.id)]


def test_delete_group_cascades_to_categories(work):
    group, deep, email = work
    hour_log_repository.save_hour_log({"day": "2024-03-04", "hour": 9, "category_id": deep.id})

    assert repo.delete_group(group.id) == 2
    assert repo.get_group(group.id) is None
    assert repo.get_category(deep.id) is None
    assert repo.get_category(email.id) is None
    log = hour_log_repository.get_hour_log("2024-03-04", 9)
    assert log is not None
    assert log.category_id is None


def test_load_category_index(work):
    group, deep, _ = work
    index = repo.load_category_index()
    assert index.group_for_category(deep.id).id == group.id
    assert index.category_by_name("EMAIL").name == "Email"
    assert [c.name for c in index.categories_in_group(group.id)] == ["Deep Work", "Email"]


def test_rename_cannot_duplicate_names(work):
    group, deep, email = work
    health = repo.add_group({"name": "Health"})
    with pytest.raises(ValidationError):
        repo.update_group(health.id, name="work")
    with pytest.raises(ValidationError):
        repo.update_category(email.id, name="DEEP WORK")
    assert [g.name for g in repo.get_all_groups()] == ["Work", "Health"]

    # renaming to its own name (different case) is allowed
    assert repo.update_group(group.id, name="WORK").name == "WORK"
    assert repo.update_category(deep.id, name="deep work").name == "deep work"
