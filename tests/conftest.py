# tests/conftest.py

from datetime import date

import pytest
import typer
from rich.prompt import Confirm

import daylog.config.config_manager as cfg
from daylog.utils.db.database_manager import initialize_schema
from daylog.utils.db.models import Category, CategoryGroup, CategoryIndex, HourLog


@pytest.fixture(autouse=True)
def _stub_typer_prompts(monkeypatch):
    """
    Silence every interactive question coming from typer.confirm,
    typer.prompt, and rich.prompt.Confirm.ask so tests run headless.
    """
    monkeypatch.setattr(typer, "confirm", lambda *a, **k: False)
    monkeypatch.setattr(Confirm, "ask", lambda *a, **k: False)
    monkeypatch.setattr(typer, "prompt", lambda *a, **k: "")
    yield


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """
    Point BASE_DIR and USER_CONFIG at a temp directory so load_config()
    never touches ~/.daylog. The packaged defaults are kept.
    """
    base = tmp_path / "daylog_home"
    monkeypatch.setattr(cfg, "BASE_DIR", base)
    monkeypatch.setattr(cfg, "USER_CONFIG", base / "config.toml")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    yield base / "config.toml"


@pytest.fixture(autouse=True)
def test_db(tmp_path, monkeypatch):
    """
    Fresh SQLite file per test via DAYLOG_DB_PATH, schema created.
    """
    db_file = tmp_path / "test_daylog.db"
    monkeypatch.setenv("DAYLOG_DB_PATH", str(db_file))
    initialize_schema()
    yield db_file


# ────────────────────────────────────────────────────────────────────────────────
# In-memory hierarchy for the pure reporting tests
# ────────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def index():
    """
    Work (id 1): Deep Work (10), Email (11)
    Health (id 2): Exercise (20)
    Leisure (id 3): Gaming (30)
    """
    groups = [
        CategoryGroup(id=1, name="Work", color_hex="#34C759", sort_order=0),
        CategoryGroup(id=2, name="Health", color_hex="#FF9500", sort_order=1),
        CategoryGroup(id=3, name="Leisure", color_hex="#FFCC00", sort_order=2),
    ]
    categories = [
        Category(id=10, name="Deep Work", sort_order=0, group_id=1),
        Category(id=11, name="Email", sort_order=1, group_id=1),
        Category(id=20, name="Exercise", sort_order=0, group_id=2),
        Category(id=30, name="Gaming", sort_order=0, group_id=3),
    ]
    return CategoryIndex(groups, categories)


@pytest.fixture
def make_log():
    """Factory for HourLog objects: make_log(date(2024, 3, 5), 9, category_id=10)."""
    def _make(day: date, hour: int, category_id=None, rating=None, notes=""):
        return HourLog(day=day, hour=hour, category_id=category_id,
                       rating=rating, notes=notes)
    return _make
