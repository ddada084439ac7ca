"""Tests for environment configuration and the composition root."""

import pytest

from asl_study import config
from asl_study.adapters.local_store import LocalStudyStore
from asl_study.composition import create_answer_evaluator, create_study_store
from asl_study.domain.value_objects.match_strictness import MatchStrictness


def test_defaults(monkeypatch):
    for name in (
        "STORE_BACKEND",
        "ANSWER_MATCH_MODE",
        "CARD_LOAD_TIMEOUT_SECONDS",
        "STARRED_LOAD_TIMEOUT_SECONDS",
        "QUIZ_TIMEOUT_MINUTES",
        "SEED_SAMPLE_DATA",
    ):
        monkeypatch.delenv(name, raising=False)

    assert config.get_store_backend() == "supabase"
    assert config.get_answer_match_mode() is MatchStrictness.FUZZY
    assert config.get_card_load_timeout() == 8.0
    assert config.get_starred_load_timeout() == 3.0
    assert config.get_quiz_timeout_minutes() == 30
    assert not config.should_seed_sample_data()


def test_overrides(monkeypatch):
    monkeypatch.setenv("ANSWER_MATCH_MODE", "EXACT")
    monkeypatch.setenv("CARD_LOAD_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("SEED_SAMPLE_DATA", "True")

    assert config.get_answer_match_mode() is MatchStrictness.EXACT
    assert config.get_card_load_timeout() == 2.5
    assert config.should_seed_sample_data()


def test_fractional_quiz_timeout_is_kept(monkeypatch):
    monkeypatch.setenv("QUIZ_TIMEOUT_MINUTES", "0.5")

    assert config.get_quiz_timeout_minutes() == 0.5


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_invalid_timeout(monkeypatch, value):
    monkeypatch.setenv("CARD_LOAD_TIMEOUT_SECONDS", value)

    with pytest.raises(ValueError, match="CARD_LOAD_TIMEOUT_SECONDS"):
        config.get_card_load_timeout()


def test_cors_origins(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

    assert config.get_cors_origins() == ["https://a.example", "https://b.example"]


def test_local_backend(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "local")

    assert isinstance(create_study_store(), LocalStudyStore)


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "sqlite")

    with pytest.raises(ValueError, match="STORE_BACKEND"):
        create_study_store()


def test_supabase_backend_needs_credentials(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "supabase")
    monkeypatch.setenv("SUPABASE_URL", "")
    monkeypatch.setenv("SUPABASE_KEY", "")

    with pytest.raises(ValueError, match="SUPABASE_URL"):
        create_study_store()


def test_evaluator_uses_configured_mode(monkeypatch):
    monkeypatch.setenv("ANSWER_MATCH_MODE", "exact")

    assert create_answer_evaluator().strictness is MatchStrictness.EXACT
