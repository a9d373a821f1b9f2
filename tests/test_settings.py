"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from tldrbot.settings import (
    DEFAULT_MESSAGE_LIMIT,
    FetchFailurePolicy,
    Settings,
    build_system_prompt,
    load_settings,
)

_VARS = (
    "TLDR_TEXT_API",
    "TLDR_MODEL",
    "TLDR_MAX_OUTPUT_TOKENS",
    "TLDR_MESSAGE_LIMIT",
    "TLDR_TIMEZONE",
    "TLDR_FETCH_FAILURE_POLICY",
    "TLDR_COMMAND_PREFIX",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert load_settings() == Settings()


def test_overrides(monkeypatch):
    monkeypatch.setenv("TLDR_TEXT_API", "Anthropic")
    monkeypatch.setenv("TLDR_MODEL", "claude-sonnet-4-5")
    monkeypatch.setenv("TLDR_MAX_OUTPUT_TOKENS", "400")
    monkeypatch.setenv("TLDR_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("TLDR_FETCH_FAILURE_POLICY", "PROPAGATE")
    monkeypatch.setenv("TLDR_COMMAND_PREFIX", "?")

    settings = load_settings()

    assert settings.text_api == "anthropic"
    assert settings.model == "claude-sonnet-4-5"
    assert settings.max_output_tokens == 400
    assert settings.timezone == "Europe/Berlin"
    assert settings.fetch_failure_policy is FetchFailurePolicy.PROPAGATE
    assert settings.command_prefix == "?"


@pytest.mark.parametrize("value", ["", "abc", "0", "-5"])
def test_bad_numbers_fall_back(monkeypatch, value):
    monkeypatch.setenv("TLDR_MESSAGE_LIMIT", value)
    assert load_settings().message_limit == DEFAULT_MESSAGE_LIMIT


def test_unknown_policy_is_fail_soft(monkeypatch):
    monkeypatch.setenv("TLDR_FETCH_FAILURE_POLICY", "explode")
    assert load_settings().fetch_failure_policy is FetchFailurePolicy.FAIL_SOFT


def test_system_prompt_mentions_sentence_budget():
    prompt = build_system_prompt(4)
    assert "at most 4 short sentences" in prompt
    assert "no bullet points" in prompt
