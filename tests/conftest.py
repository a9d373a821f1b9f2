"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from tldrbot.errors import GatewayError
from tldrbot.gateway import RawMessage, ResolvedUser


class FakeGateway:
    """In-memory :class:`MessagingGateway` with optional per-user lookup delays."""

    def __init__(
        self,
        users: dict[str, str] | None = None,
        messages: list[RawMessage] | None = None,
        *,
        delays: dict[str, float] | None = None,
        fail_listing: bool = False,
    ) -> None:
        self.users = users or {}
        self.messages = messages or []
        self.delays = delays or {}
        self.fail_listing = fail_listing
        self.list_calls: list[tuple[str, int, int]] = []
        self.before_ids: list[str | None] = []
        self.resolve_order: list[str] = []
        self.resolve_channels: list[str | None] = []

    async def resolve_user(self, user_id: str, *, channel_id: str | None = None) -> ResolvedUser | None:
        self.resolve_channels.append(channel_id)
        await asyncio.sleep(self.delays.get(user_id, 0))
        self.resolve_order.append(user_id)
        name = self.users.get(user_id)
        if name is None:
            return None
        return ResolvedUser(id=user_id, display_name=name)

    async def list_messages(
        self, channel_id: str, since_epoch_seconds: int, limit: int, *, before_message_id: str | None = None
    ) -> list[RawMessage]:
        self.list_calls.append((channel_id, since_epoch_seconds, limit))
        self.before_ids.append(before_message_id)
        if self.fail_listing:
            raise GatewayError("boom")
        return list(self.messages)


class DummyLLM:
    """Records prompts and returns a canned reply."""

    def __init__(self, reply: str = "Summary.") -> None:
        self.reply = reply
        self.calls: list[dict] = []

    async def generate(self, prompt, *, max_tokens=None) -> str:
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens})
        return self.reply


def raw(author_id: str | None, text: str, minute: int = 0) -> RawMessage:
    return RawMessage(
        author_id=author_id,
        text=text,
        sent_at=datetime(2024, 3, 20, 14, minute, tzinfo=timezone.utc),
    )


@pytest.fixture
def fake_gateway():
    return FakeGateway(
        users={"U1": "Alice", "U2": "Bob", "U3": "Carol", "REQ": "Requester"},
        messages=[
            raw("U1", "Shipping the release tomorrow", 1),
            raw("U2", "I will write the changelog", 2),
            raw("U3", "Sounds good", 3),
        ],
    )


@pytest.fixture
def dummy_llm():
    return DummyLLM()


@pytest.fixture
def mock_discord_ctx():
    """Create a mock Discord command context."""
    ctx = MagicMock()
    ctx.author = MagicMock()
    ctx.author.id = 111222333
    ctx.author.name = "TestUser"
    ctx.channel = MagicMock()
    ctx.channel.id = 123456789
    ctx.message = MagicMock()
    ctx.message.id = 555000111
    ctx.message.reference = None
    ctx.message.add_reaction = AsyncMock()
    ctx.message.remove_reaction = AsyncMock()
    ctx.send = AsyncMock()
    ctx.reply = AsyncMock()
    return ctx
