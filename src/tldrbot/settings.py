"""Centralized settings for the TLDR bot.

Stable texts (the summary prompt) live here in source control. Tunables are
read from the environment with defaults. Secrets (Discord token, API keys)
must remain in .env and are never read here.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass


# --------------------- Summary prompt ---------------------

# Upper bound on sentences in a summary; an operator constant, not a command option.
SUMMARY_MAX_SENTENCES: int = 5

_SYSTEM_PROMPT_TEMPLATE: str = (
    "You are a helpful assistant that creates TLDR summaries of Discord conversations.\n"
    "Summarize the conversation in at most {max_sentences} short sentences, capturing "
    "the key points. Keep it as short as possible while keeping the important parts.\n"
    "Use plain sentences, no bullet points or lists.\n"
    "When mentioning participants, always refer to them by the exact name shown in "
    "square brackets so they can be turned into mentions.\n"
    "Only use what is present in the messages. Do not invent decisions, facts or "
    "participants.\n"
    "End with one sentence stating what in the conversation is relevant to the "
    "person who requested the summary, or that nothing is."
)


def build_system_prompt(max_sentences: int = SUMMARY_MAX_SENTENCES) -> str:
    """Return the fixed summary instruction for ``max_sentences``."""
    return _SYSTEM_PROMPT_TEMPLATE.format(max_sentences=max_sentences)


# --------------------- Runtime tunables ---------------------


class FetchFailurePolicy(str, enum.Enum):
    """What to do when listing channel messages fails."""

    FAIL_SOFT = "fail_soft"
    PROPAGATE = "propagate"


DEFAULT_TEXT_API = "openai"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_OUTPUT_TOKENS = 1000
DEFAULT_MESSAGE_LIMIT = 1000
DEFAULT_TIMEZONE = "UTC"
DEFAULT_COMMAND_PREFIX = "!"


def _int_from_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if raw.isdigit() and int(raw) > 0:
        return int(raw)
    return default


def _policy_from_env(name: str) -> FetchFailurePolicy:
    raw = (os.getenv(name) or "").strip().lower()
    try:
        return FetchFailurePolicy(raw)
    except ValueError:
        return FetchFailurePolicy.FAIL_SOFT


@dataclass(frozen=True, slots=True)
class Settings:
    text_api: str = DEFAULT_TEXT_API
    model: str = DEFAULT_MODEL
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    message_limit: int = DEFAULT_MESSAGE_LIMIT
    timezone: str = DEFAULT_TIMEZONE
    fetch_failure_policy: FetchFailurePolicy = FetchFailurePolicy.FAIL_SOFT
    command_prefix: str = DEFAULT_COMMAND_PREFIX


def load_settings() -> Settings:
    """Build :class:`Settings` from ``TLDR_*`` environment variables.

    Unset, empty or malformed values fall back to the defaults.
    """
    return Settings(
        text_api=(os.getenv("TLDR_TEXT_API") or DEFAULT_TEXT_API).strip().lower(),
        model=(os.getenv("TLDR_MODEL") or DEFAULT_MODEL).strip(),
        max_output_tokens=_int_from_env("TLDR_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS),
        message_limit=_int_from_env("TLDR_MESSAGE_LIMIT", DEFAULT_MESSAGE_LIMIT),
        timezone=(os.getenv("TLDR_TIMEZONE") or DEFAULT_TIMEZONE).strip(),
        fetch_failure_policy=_policy_from_env("TLDR_FETCH_FAILURE_POLICY"),
        command_prefix=os.getenv("TLDR_COMMAND_PREFIX") or DEFAULT_COMMAND_PREFIX,
    )
