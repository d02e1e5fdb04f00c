# tests/test_config_manager.py

import importlib

import pytest
import toml

import daylog.config.config_manager as cfg


@pytest.fixture
def minimal_config(monkeypatch):
    """
    Override DEFAULT_CONFIG with a small document; BASE_DIR and USER_CONFIG
    already point at a temp directory (see conftest).
    """
    minimal = {
        "logging": {"level": "DEBUG"},
        "ratings": {"min": 0, "max": 5, "moods": {"Focused": 4, "tired": "low"}},
        "insights": {"headline_group": " Career ", "week": {"headline_delta": 6}},
        "ai": {"enabled": True, "api_key": "from-file"},
    }
    monkeypatch.setattr(cfg, "DEFAULT_CONFIG", toml.dumps(minimal))
    importlib.reload(cfg)
    yield cfg.USER_CONFIG


def test_load_config_creates_file_from_packaged_defaults(isolated_config):
    assert not isolated_config.exists()
    conf = cfg.load_config()
    assert isolated_config.exists()
    assert conf["insights"]["headline_group"] == "Work"
    assert conf["insights"]["month"]["best_day_mode"] == "average"


def test_get_and_set_config_value():
    cfg.set_config_value("export", "directory", "/tmp/out")
    assert cfg.get_config_value("export", "directory") == "/tmp/out"
    assert cfg.get_config_value("export", "missing", default="xyz") == "xyz"
    assert cfg.delete_config_value("export", "directory") is True
    assert cfg.get_config_value("export", "directory") is None


def test_invalid_toml_degrades_to_empty(isolated_config):
    isolated_config.parent.mkdir(parents=True, exist_ok=True)
    isolated_config.write_text("this is [not toml", encoding="utf-8")
    assert cfg.load_config() == {}
    assert cfg.get_rating_bounds() == (1.0, 10.0)


def test_typed_getters(minimal_config):
    assert cfg.get_headline_group_name() == "Career"
    assert cfg.get_rating_bounds() == (0.0, 5.0)
    assert cfg.get_mood_ratings() == {"focused": 4.0}
    assert cfg.get_insight_thresholds("week") == {"headline_delta": 6}
    assert cfg.get_insight_thresholds("month") == {}
    assert cfg.get_insight_thresholds("year") == {}


def test_rating_bounds_swapped_when_reversed():
    cfg.set_config_value("ratings", "min", 9)
    cfg.set_config_value("ratings", "max", 2)
    assert cfg.get_rating_bounds() == (2.0, 9.0)


def test_ai_settings_env_key_wins(minimal_config, monkeypatch):
    settings = cfg.get_ai_settings()
    assert settings["api_key"] == "from-file"
    assert settings["model"] == "gpt-4o-mini"
    assert settings["timeout"] == 30

    monkeypatch.setenv("OPENAI_API_KEY", "from-env")
    assert cfg.get_ai_settings()["api_key"] == "from-env"
