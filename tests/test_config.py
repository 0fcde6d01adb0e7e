import logging

from cardreco.core.config import Settings
from cardreco.core.logging import resolve_level


def test_default_hybrid_slots_feed_history_twice():
    s = Settings(_env_file=None)
    assert [(slot.strategy, slot.weight) for slot in s.hybrid_slots] == [
        ("history", 0.2), ("collaborative", 0.3), ("history", 0.3), ("popular", 0.2),
    ]
    assert s.chat_max_cards == 8
    assert s.collaborative_neighbors == 5


def test_hybrid_slots_from_environment(monkeypatch):
    monkeypatch.setenv("hybrid_slots", '[{"strategy": "content", "weight": 0.5}, {"strategy": "popular", "weight": 0.5}]')
    s = Settings(_env_file=None)
    assert [slot.strategy for slot in s.hybrid_slots] == ["content", "popular"]


def test_llm_enabled_follows_key():
    assert not Settings(_env_file=None, OPENAI_API_KEY="").llm_enabled
    assert Settings(_env_file=None, OPENAI_API_KEY="sk-test").llm_enabled


def test_resolve_level():
    assert resolve_level("", debug=True) == logging.DEBUG
    assert resolve_level(None) == logging.INFO
    assert resolve_level("warning") == logging.WARNING
    assert resolve_level("10") == logging.DEBUG
    assert resolve_level("chatty") == logging.INFO
