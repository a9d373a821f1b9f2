"""Summary generation logic."""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol, Sequence

from tldrbot.errors import CompletionError, EmptyTranscriptError
from tldrbot.gateway import ResolvedUser
from tldrbot.settings import DEFAULT_MAX_OUTPUT_TOKENS, SUMMARY_MAX_SENTENCES, build_system_prompt
from tldrbot.utils.discord_utils import mention_token

from .enrichment import EnrichedMessage

_LOG = logging.getLogger(__name__)


class LLMProtocol(Protocol):
    """Protocol for LLM interface."""

    async def generate(
        self, prompt: str | Sequence[dict[str, Any]], *, max_tokens: int | None = None
    ) -> str:
        """Generate text from a prompt."""
        ...


def render_transcript(messages: Sequence[EnrichedMessage]) -> str:
    """Render one ``[name]: text`` line per message, in order."""
    return "\n".join(f"[{msg.display_name}]: {msg.text}" for msg in messages)


def build_user_prompt(transcript: str, requesting_user: ResolvedUser) -> str:
    return (
        f"The user {requesting_user.display_name} has requested a summary of the following "
        f"Discord conversation: <CHANNEL MESSAGES>\n\n{transcript}\n\n</CHANNEL MESSAGES>"
    )


def insert_mentions(summary: str, messages: Sequence[EnrichedMessage]) -> str:
    """Replace whole-word author names in *summary* with mention tokens.

    Matching is case-insensitive. When two authors share a display name the
    later one in *messages* wins.
    """
    mentions: dict[str, str] = {}
    for msg in messages:
        if msg.display_name:
            mentions[msg.display_name] = msg.author_id

    formatted = summary
    for name, author_id in mentions.items():
        pattern = re.compile(rf"(?<!\w){re.escape(name)}(?!\w)", re.IGNORECASE)
        formatted = pattern.sub(mention_token(author_id), formatted)
    return formatted


class SummaryComposer:
    """Builds the summary prompt, calls the LLM and inserts mentions."""

    def __init__(
        self,
        llm: LLMProtocol,
        *,
        max_sentences: int = SUMMARY_MAX_SENTENCES,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ) -> None:
        """
        Initialize composer.

        Args:
            llm: Completion backend implementing ``generate()``
            max_sentences: Sentence budget stated in the system prompt
            max_output_tokens: Output ceiling passed to the backend
        """
        self.llm = llm
        self.max_sentences = max_sentences
        self.max_output_tokens = max_output_tokens
        self.system_prompt = build_system_prompt(max_sentences)

    async def compose(
        self,
        messages: Sequence[EnrichedMessage],
        requesting_user: ResolvedUser,
    ) -> str:
        """
        Summarize *messages* for *requesting_user*.

        Returns:
            Summary text with author names replaced by mentions

        Raises:
            EmptyTranscriptError: if *messages* is empty; the LLM is not called
            CompletionError: if the LLM call fails or returns nothing
        """
        if not messages:
            raise EmptyTranscriptError("Cannot summarize an empty conversation")

        prompt = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": build_user_prompt(render_transcript(messages), requesting_user)},
        ]
        try:
            raw = await self.llm.generate(prompt, max_tokens=self.max_output_tokens)
        except Exception as exc:  # noqa: BLE001
            _LOG.exception("Summary generation failed")
            raise CompletionError("Summary generation failed") from exc

        if not isinstance(raw, str) or not raw.strip():
            raise CompletionError("Completion returned no text")

        return insert_mentions(raw.strip(), messages)
