# tests/test_log_parser.py

import json
from datetime import date

import pytest
import requests

from daylog.services import log_parser
from daylog.services.log_parser import (
    LogParseError,
    LogParser,
    ParsedLogEntry,
    TimeContext,
    apply_parsed_entries,
    build_time_context,
)
from daylog.utils import default_data
from daylog.utils.db import category_repository, hour_log_repository

CATEGORIES = [("Deep Work", "Work"), ("Exercise", "Health")]
CONTEXT = TimeContext(day=date(2024, 3, 4), current_hour=12, last_logged_hour=8)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def chat_reply(content):
    return FakeResponse(payload={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def captured(monkeypatch):
    """Replace requests.post; the test sets captured['response']."""
    calls = {"response": None, "requests": []}

    def fake_post(url, json=None, headers=None, timeout=None):
        calls["requests"].append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return calls["response"]

    monkeypatch.setattr(log_parser.requests, "post", fake_post)
    return calls


def make_parser():
    return LogParser(api_key="sk-test", model="test-model",
                     base_url="https://llm.example/v1/", timeout=5)


def test_parse_wrapped_entries_and_maps_moods(captured):
    captured["response"] = chat_reply(json.dumps({"entries": [
        {"hour": 9, "category": "Deep Work", "notes": "parser", "mood": "Focused"},
        {"hour": 10, "category": "Exercise", "notes": "run", "mood": "tired",
         "extra_details": "5k"},
        {"hour": 30, "category": "Deep Work", "notes": "bogus"},
    ]}))
    entries = make_parser().parse("deep work at 9, ran at 10", CATEGORIES, CONTEXT)

    assert entries == [
        ParsedLogEntry(hour=9, category_name="Deep Work", notes="parser", rating=8.0, mood="focused"),
        ParsedLogEntry(hour=10, category_name="Exercise", notes="run (5k)", rating=3.0, mood="tired"),
    ]
    sent = captured["requests"][0]
    assert sent["url"] == "https://llm.example/v1/chat/completions"
    assert sent["headers"]["Authorization"] == "Bearer sk-test"
    assert sent["timeout"] == 5
    assert sent["json"]["model"] == "test-model"
    assert sent["json"]["response_format"] == {"type": "json_object"}
    system = sent["json"]["messages"][0]["content"]
    assert "Deep Work (Work), Exercise (Health)" in system
    assert "Hours to log: 9:00 to 12:00" in system


@pytest.mark.parametrize("content", [
    json.dumps({"logs": [{"hour": 7, "category": "Exercise"}]}),
    json.dumps({"data": [{"hour": 7, "category": "Exercise"}]}),
    json.dumps([{"hour": 7, "category": "Exercise"}]),
])
def test_parse_accepts_alternate_shapes(captured, content):
    captured["response"] = chat_reply(content)
    entries = make_parser().parse("gym at 7", CATEGORIES, CONTEXT)
    assert [(e.hour, e.category_name, e.rating) for e in entries] == [(7, "Exercise", None)]


@pytest.mark.parametrize("response, message", [
    (FakeResponse(status_code=401, text='{"error": "bad key"}'), "API error"),
    (FakeResponse(status_code=500, text=""), "HTTP error: 500"),
    (FakeResponse(payload={"choices": []}), "No content"),
    (FakeResponse(payload={"choices": [{"message": {"content": ""}}]}), "No content"),
])
def test_parse_failures_raise(captured, response, message):
    captured["response"] = response
    with pytest.raises(LogParseError, match=message):
        make_parser().parse("anything", CATEGORIES, CONTEXT)


def test_invalid_json_content_raises(captured):
    captured["response"] = chat_reply("not json at all")
    with pytest.raises(LogParseError, match="Failed to parse"):
        make_parser().parse("anything", CATEGORIES, CONTEXT)
    captured["response"] = chat_reply(json.dumps({"something": "else"}))
    with pytest.raises(LogParseError, match="Failed to parse"):
        make_parser().parse("anything", CATEGORIES, CONTEXT)


def test_transport_error_raises(monkeypatch):
    def broken(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(log_parser.requests, "post", broken)
    with pytest.raises(LogParseError, match="Request failed"):
        make_parser().parse("anything", CATEGORIES, CONTEXT)


def test_missing_api_key_raises_before_request(captured):
    with pytest.raises(LogParseError, match="API key"):
        LogParser(api_key="").parse("anything", CATEGORIES, CONTEXT)
    assert captured["requests"] == []


def test_start_hour_defaults_to_six():
    assert TimeContext(day=date(2024, 3, 4), current_hour=10).start_hour == 6
    assert TimeContext(day=date(2024, 3, 4), current_hour=10, last_logged_hour=23).start_hour == 0


def test_build_time_context_reads_today_logs():
    default_data.ensure_defaults()
    deep = category_repository.get_category_by_name("Deep Work")
    hour_log_repository.save_hour_log({"day": "2024-03-04", "hour": 9, "category_id": deep.id,
                                       "notes": "parser"})
    context = build_time_context("2024-03-04")
    assert context.current_hour == 23
    assert context.last_logged_hour == 9
    assert context.recent_logs == [(9, "Deep Work", "parser")]


def test_apply_parsed_entries_resolves_names_case_insensitively():
    default_data.ensure_defaults()
    saved = apply_parsed_entries([
        ParsedLogEntry(hour=9, category_name="deep work", notes="parser", rating=8.0),
        ParsedLogEntry(hour=10, category_name="Basket Weaving", notes="relaxing"),
    ], "2024-03-04")

    assert len(saved) == 2
    deep = category_repository.get_category_by_name("Deep Work")
    assert saved[0].category_id == deep.id
    assert saved[0].rating == 8.0
    assert saved[1].category_id is None
    assert saved[1].notes == "Basket Weaving: relaxing"
