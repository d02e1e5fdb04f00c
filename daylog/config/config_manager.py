# daylog/config/config_manager.py
'''
config_manager.py - Configuration management for daylog
'''
from importlib.resources import files
import logging
import os
from pathlib import Path
from typing import Any, Dict, Tuple
import toml

logger = logging.getLogger(__name__)

PERIOD_SECTIONS = ("day", "week", "month")

if "BASE_DIR" not in globals():
    _xdg = os.getenv("XDG_CONFIG_HOME")
    BASE_DIR = Path(_xdg) / "daylog" if _xdg else Path.home() / ".daylog"

if "USER_CONFIG" not in globals():
    USER_CONFIG = BASE_DIR / "config.toml"

if "DEFAULT_CONFIG" not in globals():
    # the shipped defaults, read from the package resources
    DEFAULT_CONFIG = files("daylog.config") \
        .joinpath("config.toml") \
        .read_text(encoding="utf-8")


def load_config() -> dict:
    """
    Load the user configuration from USER_CONFIG file.
    - If the config directory or file does not exist, create them with defaults.
    - Returns a dict parsed from TOML; on error, logs and returns empty dict.
    """
    try:
        BASE_DIR.mkdir(parents=True, exist_ok=True)
        if not USER_CONFIG.exists():
            try:
                USER_CONFIG.write_text(DEFAULT_CONFIG, encoding="utf-8")
            except OSError as e:
                logger.error(
                    f"Failed to write default config to {USER_CONFIG}: {e}", exc_info=True)
        try:
            text = USER_CONFIG.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(
                f"Failed to read config file {USER_CONFIG}: {e}", exc_info=True)
            return {}
        try:
            return toml.loads(text)
        except toml.TomlDecodeError as e:
            logger.error(
                f"Failed to parse TOML from {USER_CONFIG}: {e}", exc_info=True)
            return {}
    except OSError as e:
        logger.error(f"Unexpected error in load_config: {e}", exc_info=True)
        return {}


def save_config(doc: dict) -> bool:
    """
    Save the given config dict to USER_CONFIG in TOML format.
    - On error, logs and returns False; otherwise returns True.
    """
    try:
        BASE_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(
            f"Failed to ensure config directory {BASE_DIR}: {e}", exc_info=True)
    try:
        toml_str = toml.dumps(doc)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize config to TOML: {e}", exc_info=True)
        return False
    try:
        USER_CONFIG.write_text(toml_str, encoding="utf-8")
        return True
    except OSError as e:
        logger.error(
            f"Failed to write config to {USER_CONFIG}: {e}", exc_info=True)
        return False


def get_config_value(section: str, key: str, default=None) -> Any:
    """
    Return value for [section][key] in config, or default if missing.
    """
    sec = load_config().get(section, {})
    if not isinstance(sec, dict):
        return default
    return sec.get(key, default)


def set_config_value(section: str, key: str, value: Any) -> bool:
    """
    Set config[section][key] = value and persist.
    Returns True if saved successfully, False otherwise.
    """
    config = load_config()
    sec = config.get(section, {}) or {}
    sec[key] = value
    config[section] = sec
    success = save_config(config)
    if not success:
        logger.error(f"Failed to save config after setting [{section}][{key}]")
    return success


def delete_config_value(section: str, key: str) -> bool:
    """
    Delete key from config[section] if present, persist changes.
    Returns True if deleted (or section/key missing and treated as no-op), False on write error.
    """
    config = load_config()
    sec = config.get(section, {}) or {}
    if key not in sec:
        logger.warning(
            f"delete_config_value: '{key}' not found in section [{section}]. No action taken.")
        return True
    del sec[key]
    config[section] = sec
    return save_config(config)


def get_config_section(section: str) -> Dict[str, Any]:
    """
    Return the dict for [section] from config.
    On error or missing, returns empty dict.
    """
    sec = load_config().get(section, {})
    if isinstance(sec, dict):
        return sec
    logger.warning(f"get_config_section: section [{section}] is not a dict.")
    return {}


def get_insight_thresholds(kind: str) -> Dict[str, Any]:
    """
    Return the [insights.<kind>] overrides for a period kind ("day", "week", "month").
    Missing keys fall back to the built-in thresholds of the insight engine.
    """
    if kind not in PERIOD_SECTIONS:
        logger.warning(f"Unknown period kind '{kind}' for insight thresholds")
        return {}
    sec = get_config_section("insights").get(kind, {})
    return dict(sec) if isinstance(sec, dict) else {}


def get_headline_group_name() -> str:
    """
    Name of the category group whose hours are the headline metric, or "" when disabled.
    """
    value = get_config_section("insights").get("headline_group", "")
    return str(value).strip() if value else ""


def get_rating_bounds() -> Tuple[float, float]:
    """
    Return the (min, max) rating range used to clamp ratings on save.
    """
    sec = get_config_section("ratings")
    try:
        low = float(sec.get("min", 1))
        high = float(sec.get("max", 10))
    except (TypeError, ValueError):
        logger.warning("Invalid [ratings] bounds in config, using 1-10")
        return 1.0, 10.0
    if low > high:
        logger.warning("[ratings] min is greater than max, swapping")
        low, high = high, low
    return low, high


def get_mood_ratings() -> Dict[str, float]:
    """
    Return the mood -> rating table from [ratings.moods].
    """
    moods = get_config_section("ratings").get("moods", {}) or {}
    result: Dict[str, float] = {}
    for name, value in moods.items():
        try:
            result[name.lower()] = float(value)
        except (TypeError, ValueError):
            logger.warning(
                f"Mood rating for '{name}' is not a number: {value}. Skipping.")
    return result


def get_ai_settings() -> Dict[str, Any]:
    """
    Return the [ai] section; OPENAI_API_KEY in the environment wins over the stored key.
    """
    settings = dict(get_config_section("ai"))
    env_key = os.getenv("OPENAI_API_KEY", "").strip()
    if env_key:
        settings["api_key"] = env_key
    settings.setdefault("model", "gpt-4o-mini")
    settings.setdefault("base_url", "https://api.openai.com/v1")
    settings.setdefault("timeout", 30)
    return settings
