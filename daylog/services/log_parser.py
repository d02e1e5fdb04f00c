# daylog/services/log_parser.py
'''
Natural-language hour logging.
Sends free text ("deep work 9 to 12, lunch, then emails") to an
OpenAI-compatible chat completion endpoint and turns the JSON reply into
hour entries that can be saved with the hour log repository.
'''

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

import daylog.config.config_manager as cf
from daylog.utils.core_utils import now_local
from daylog.utils.db import category_repository, hour_log_repository
from daylog.utils.db.models import HourLog
from daylog.utils.error_handler import parse_day

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 6
RECENT_LOG_COUNT = 5
MOODS = ("focused", "energetic", "calm", "tired", "stressed", "happy")


class LogParseError(Exception):
    """Raised when the language model request or its reply cannot be used."""


@dataclass
class ParsedLogEntry:
    hour: int
    category_name: str
    notes: str = ""
    rating: Optional[float] = None
    mood: str = ""


@dataclass
class TimeContext:
    day: date
    current_hour: int
    last_logged_hour: Optional[int] = None
    # (hour, category name, notes)
    recent_logs: List[Tuple[int, str, str]] = field(default_factory=list)

    @property
    def start_hour(self) -> int:
        if self.last_logged_hour is None:
            return DEFAULT_START_HOUR
        return (self.last_logged_hour + 1) % 24


def build_time_context(day: Any = None, current_hour: Optional[int] = None) -> TimeContext:
    """
    Time context for `day` (default today): last logged hour and the most
    recent logs, read from the database.
    """
    now = now_local()
    day = parse_day(day) if day is not None else now.date()
    if current_hour is None:
        current_hour = now.hour if day == now.date() else 23
    logs = hour_log_repository.get_logs_for_day(day)
    index = category_repository.load_category_index()
    recent = []
    for log in logs[-RECENT_LOG_COUNT:]:
        category = index.category(log.category_id)
        recent.append((log.hour, category.name if category else "Unlogged", log.notes))
    return TimeContext(
        day=day,
        current_hour=current_hour,
        last_logged_hour=hour_log_repository.get_last_logged_hour(day),
        recent_logs=recent,
    )


def category_choices() -> List[Tuple[str, str]]:
    """(category name, group name) pairs for every category."""
    index = category_repository.load_category_index()
    choices = []
    for category in index.categories:
        group = index.group(category.group_id)
        choices.append((category.name, group.name if group else "Ungrouped"))
    return choices


class LogParser:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 base_url: str = "https://api.openai.com/v1", timeout: float = 30):
        self.api_key = api_key or ""
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "LogParser":
        settings = cf.get_ai_settings()
        return cls(
            api_key=settings.get("api_key", ""),
            model=settings["model"],
            base_url=settings["base_url"],
            timeout=float(settings["timeout"]),
        )

    def build_system_prompt(self, categories: Sequence[Tuple[str, str]],
                            context: TimeContext) -> str:
        category_list = ", ".join(f"{name} ({group})" for name, group in categories)
        if context.recent_logs:
            recent = "Recent activity:\n" + "\n".join(
                f"{hour}:00 - {name}: {notes}" for hour, name, notes in context.recent_logs)
        else:
            recent = "No recent activity logged."
        start, end = context.start_hour, context.current_hour
        return (
            "You are a time-logging assistant. Parse the user's description of their day "
            "into structured hour-by-hour log entries.\n\n"
            "## Context\n"
            f"Date: {context.day.strftime('%A, %B')} {context.day.day}, {context.day.year}\n"
            f"Current time: {end}:00\n"
            f"Hours to log: {start}:00 to {end}:00\n\n"
            f"{recent}\n\n"
            "## Available categories (use these exact names only)\n"
            f"{category_list}\n\n"
            "## Available moods (use these exact values only)\n"
            f"{', '.join(MOODS)}\n\n"
            "## Rules\n"
            "1. Each entry is one hour block (hour 9 means 9:00-10:00).\n"
            f"2. Only create entries for hours between {start}:00 and {end}:00.\n"
            "3. A range such as \"9 to 12\" becomes entries for hours 9, 10 and 11.\n"
            "4. Infer the mood from the activity description.\n"
            "5. Keep notes under 50 characters.\n\n"
            "## Output format\n"
            'Respond with a JSON object: {"entries": [{"hour": 9, "category": "Deep Work", '
            '"notes": "Worked on project", "mood": "focused"}]}'
        )

    def parse(self, free_text: str, categories: Sequence[Tuple[str, str]],
              time_context: TimeContext) -> List[ParsedLogEntry]:
        """
        Ask the model to split `free_text` into hour entries.
        Raises LogParseError on any transport, API or format failure.
        """
        if not self.api_key:
            raise LogParseError("No API key configured. Set [ai] api_key or OPENAI_API_KEY.")
        if not (free_text or "").strip():
            raise LogParseError("Nothing to parse.")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.build_system_prompt(categories, time_context)},
                {"role": "user", "content": free_text},
            ],
            "temperature": 0.3,
            "response_format": {"type": "json_object"},
        }
        try:
            resp = requests.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Log parser request failed: {e}", exc_info=True)
            raise LogParseError(f"Request failed: {e}") from e

        if resp.status_code != 200:
            body = (resp.text or "").strip()
            logger.warning(f"Log parser got HTTP {resp.status_code}: {body[:200]}")
            if body:
                raise LogParseError(f"API error: {body}")
            raise LogParseError(f"HTTP error: {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LogParseError("No content in response.") from e
        if not content:
            raise LogParseError("No content in response.")

        entries = self.parse_content(content)
        logger.info(f"Parsed {len(entries)} hour entries from free text")
        return entries

    def parse_content(self, content: str) -> List[ParsedLogEntry]:
        """Decode the model's JSON reply into entries."""
        try:
            data = json.loads(content)
        except (TypeError, ValueError) as e:
            raise LogParseError("Failed to parse response.") from e

        raw = None
        if isinstance(data, dict):
            for key in ("entries", "logs", "data"):
                if isinstance(data.get(key), list):
                    raw = data[key]
                    break
        elif isinstance(data, list):
            raw = data
        if raw is None:
            raise LogParseError("Failed to parse response.")

        moods = cf.get_mood_ratings()
        entries = []
        for item in raw:
            entry = _entry_from_dict(item, moods)
            if entry is not None:
                entries.append(entry)
        return entries


def _entry_from_dict(item: Any, moods: Dict[str, float]) -> Optional[ParsedLogEntry]:
    if not isinstance(item, dict):
        return None
    try:
        hour = int(item.get("hour"))
    except (TypeError, ValueError):
        logger.debug(f"Dropping parsed entry without a valid hour: {item}")
        return None
    if not 0 <= hour <= 23:
        logger.debug(f"Dropping parsed entry with hour {hour}")
        return None

    mood = str(item.get("mood") or "").strip().lower()
    notes = str(item.get("notes") or "").strip()
    extra = str(item.get("extra_details") or "").strip()
    if extra:
        notes = f"{notes} ({extra})" if notes else extra
    return ParsedLogEntry(
        hour=hour,
        category_name=str(item.get("category") or "").strip(),
        notes=notes,
        rating=moods.get(mood),
        mood=mood,
    )


def apply_parsed_entries(entries: Sequence[ParsedLogEntry], day: Any) -> List[HourLog]:
    """
    Save parsed entries for `day`. Category names match case-insensitively;
    an unknown name is saved as an unlogged hour with the name kept in the notes.
    """
    day = parse_day(day)
    index = category_repository.load_category_index()
    saved = []
    for entry in entries:
        category = index.category_by_name(entry.category_name)
        notes = entry.notes
        if category is None and entry.category_name:
            logger.warning(f"Unknown category '{entry.category_name}' for {day} {entry.hour}:00")
            notes = f"{entry.category_name}: {notes}" if notes else entry.category_name
        saved.append(hour_log_repository.save_hour_log({
            "day": day,
            "hour": entry.hour,
            "category_id": category.id if category else None,
            "rating": entry.rating,
            "notes": notes,
        }))
    return saved
