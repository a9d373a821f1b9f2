"""Fetching channel messages and attributing them to their authors."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from tldrbot.errors import GatewayError
from tldrbot.gateway import MessagingGateway, RawMessage
from tldrbot.settings import DEFAULT_MESSAGE_LIMIT, FetchFailurePolicy
from tldrbot.time_reference import ResolvedInstant

__all__ = ["EmptyResult", "EnrichedMessage", "MessageEnricher"]

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnrichedMessage:
    display_name: str
    author_id: str
    text: str
    sent_at: datetime


@dataclass(frozen=True, slots=True)
class EmptyResult:
    """The channel had no messages at all since ``since``."""

    since: ResolvedInstant


class MessageEnricher:
    """Turns a channel's recent messages into attributed messages.

    Messages without an author, or whose author cannot be resolved, are
    dropped. Survivors keep their arrival order.
    """

    def __init__(
        self,
        gateway: MessagingGateway,
        *,
        limit: int = DEFAULT_MESSAGE_LIMIT,
        fetch_policy: FetchFailurePolicy = FetchFailurePolicy.FAIL_SOFT,
    ) -> None:
        self.gateway = gateway
        self.limit = limit
        self.fetch_policy = fetch_policy

    async def _fetch(
        self, channel_id: str, since: ResolvedInstant, before_message_id: str | None
    ) -> list[RawMessage]:
        try:
            return list(
                await self.gateway.list_messages(
                    channel_id, since.epoch_seconds, self.limit, before_message_id=before_message_id
                )
            )
        except GatewayError:
            if self.fetch_policy is FetchFailurePolicy.PROPAGATE:
                raise
            _LOG.warning(
                "Listing messages in channel %s failed; treating as empty", channel_id, exc_info=True
            )
            return []

    async def enrich(
        self,
        channel_id: str,
        since: ResolvedInstant,
        *,
        before_message_id: str | None = None,
    ) -> list[EnrichedMessage] | EmptyResult:
        """Return attributed messages since *since*, or :class:`EmptyResult`.

        An empty list means messages existed but none could be attributed.
        *before_message_id* (the triggering message) and anything after it is
        left out.
        """
        raw = await self._fetch(channel_id, since, before_message_id)
        if not raw:
            return EmptyResult(since=since)

        slots: list[EnrichedMessage | None] = [None] * len(raw)

        async def _attribute(index: int, message: RawMessage) -> None:
            if not message.author_id:
                return
            try:
                user = await self.gateway.resolve_user(message.author_id, channel_id=channel_id)
            except GatewayError:
                _LOG.warning("Could not resolve author %s", message.author_id, exc_info=True)
                return
            if user is None:
                return
            slots[index] = EnrichedMessage(
                display_name=user.display_name,
                author_id=user.id,
                text=message.text,
                sent_at=message.sent_at,
            )

        await asyncio.gather(*(_attribute(i, m) for i, m in enumerate(raw)))

        enriched = [m for m in slots if m is not None]
        _LOG.info(
            "Channel %s since %s: %d raw, %d attributed",
            channel_id,
            since.display,
            len(raw),
            len(enriched),
        )
        return enriched
