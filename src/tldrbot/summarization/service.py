"""Runs one TLDR request: requesting user -> messages -> summary."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tldrbot.errors import NoMessagesError, UserResolutionError
from tldrbot.gateway import MessagingGateway
from tldrbot.time_reference import ResolvedInstant

from .enrichment import EmptyResult, MessageEnricher
from .summarizer import SummaryComposer

__all__ = ["TldrReport", "TldrService"]

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TldrReport:
    header: str
    summary: str
    message_count: int
    since: ResolvedInstant

    @property
    def footer(self) -> str:
        noun = "message" if self.message_count == 1 else "messages"
        return f"Summarized {self.message_count} {noun} since {self.since.display}"


class TldrService:
    """Shared by every trigger; differs per trigger only in ``since`` and ``header``."""

    def __init__(
        self,
        gateway: MessagingGateway,
        enricher: MessageEnricher,
        composer: SummaryComposer,
    ) -> None:
        self.gateway = gateway
        self.enricher = enricher
        self.composer = composer

    async def summarize(
        self,
        channel_id: str,
        user_id: str,
        since: ResolvedInstant,
        *,
        header: str,
        before_message_id: str | None = None,
    ) -> TldrReport:
        """Summarize *channel_id* since *since* on behalf of *user_id*.

        *before_message_id* is the command message, which is not summarized.

        Raises:
            UserResolutionError: the requesting user is unknown
            NoMessagesError: nothing attributable was posted since *since*
            CompletionError: the summary could not be generated
        """
        requesting_user = await self.gateway.resolve_user(user_id, channel_id=channel_id)
        if requesting_user is None:
            raise UserResolutionError(user_id)

        result = await self.enricher.enrich(channel_id, since, before_message_id=before_message_id)
        if isinstance(result, EmptyResult) or not result:
            raise NoMessagesError(since)

        summary = await self.composer.compose(result, requesting_user)
        _LOG.info("Summarized %d messages in channel %s for user %s", len(result), channel_id, user_id)
        return TldrReport(header=header, summary=summary, message_count=len(result), since=since)
