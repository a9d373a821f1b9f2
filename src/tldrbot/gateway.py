"""Messaging gateway: the bot's read access to the chat platform.

The pipeline only talks to :class:`MessagingGateway`; :class:`DiscordGateway`
implements it on top of a ``discord.Client``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

import discord

from tldrbot.errors import GatewayError
from tldrbot.utils.discord_utils import get_display_name

__all__ = ["DiscordGateway", "MessagingGateway", "RawMessage", "ResolvedUser"]

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawMessage:
    author_id: str | None
    text: str
    sent_at: datetime


@dataclass(frozen=True, slots=True)
class ResolvedUser:
    id: str
    display_name: str


class MessagingGateway(Protocol):
    """Read-only view of a chat platform."""

    async def resolve_user(self, user_id: str, *, channel_id: str | None = None) -> ResolvedUser | None:
        """Return the user's id and display name, or ``None`` if unknown.

        With *channel_id*, the name is the one shown in that channel's server.
        """
        ...

    async def list_messages(
        self,
        channel_id: str,
        since_epoch_seconds: int,
        limit: int,
        *,
        before_message_id: str | None = None,
    ) -> list[RawMessage]:
        """Return up to *limit* messages sent at or after the given second, oldest first.

        Messages from *before_message_id* onwards are left out. Raises
        :class:`GatewayError` when the platform call fails.
        """
        ...


class DiscordGateway:
    """:class:`MessagingGateway` backed by a connected ``discord.Client``.

    Messages posted by bots (including this one) come back without an author.
    """

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def _resolve_member(self, channel_id: str, user_id: int) -> discord.Member | None:
        if not str(channel_id).isdigit():
            return None
        guild = getattr(self.client.get_channel(int(channel_id)), "guild", None)
        if guild is None:
            return None
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException as exc:
            _LOG.debug("No member %s in guild %s: %s", user_id, guild.id, exc)
            return None

    async def resolve_user(self, user_id: str, *, channel_id: str | None = None) -> ResolvedUser | None:
        if not str(user_id).isdigit():
            return None
        user = None
        if channel_id is not None:
            user = await self._resolve_member(channel_id, int(user_id))
        if user is None:
            user = self.client.get_user(int(user_id))
        if user is None:
            try:
                user = await self.client.fetch_user(int(user_id))
            except discord.HTTPException as exc:
                _LOG.warning("Failed to fetch user %s: %s", user_id, exc)
                return None
        return ResolvedUser(id=str(user.id), display_name=get_display_name(user))

    async def _resolve_channel(self, channel_id: int):
        channel = self.client.get_channel(channel_id)
        if channel is not None:
            return channel
        return await self.client.fetch_channel(channel_id)

    async def list_messages(
        self,
        channel_id: str,
        since_epoch_seconds: int,
        limit: int,
        *,
        before_message_id: str | None = None,
    ) -> list[RawMessage]:
        # history(after=...) is exclusive; step back 1 ms so the boundary second is kept.
        after = datetime.fromtimestamp(since_epoch_seconds, tz=timezone.utc) - timedelta(milliseconds=1)
        try:
            before = discord.Object(id=int(before_message_id)) if before_message_id else None
            channel = await self._resolve_channel(int(channel_id))
            if not hasattr(channel, "history"):
                raise GatewayError(f"Channel {channel_id} has no message history")
            messages: list[RawMessage] = []
            async for item in channel.history(limit=limit, after=after, before=before, oldest_first=True):
                author = getattr(item, "author", None)
                if author is None or getattr(author, "bot", False):
                    author_id = None
                else:
                    author_id = str(author.id)
                messages.append(
                    RawMessage(
                        author_id=author_id,
                        text=item.content or "",
                        sent_at=item.created_at,
                    )
                )
        except (discord.HTTPException, discord.InvalidData, ValueError) as exc:
            raise GatewayError(f"Failed to list messages in channel {channel_id}") from exc
        return messages
