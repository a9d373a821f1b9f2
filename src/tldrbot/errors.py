"""Exceptions raised by the TLDR pipeline stages.

Stages raise these; only the Discord cog turns them into user-facing text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tldrbot.time_reference import ResolvedInstant


class TldrError(Exception):
    """Base class for every per-request failure."""


class ParseError(TldrError):
    """A time expression matched none of the accepted forms.

    ``str(error)`` is the help text listing the accepted forms.
    """


class UserResolutionError(TldrError):
    """The user who triggered the command could not be resolved."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Could not resolve requesting user {user_id}")
        self.user_id = user_id


class NoMessagesError(TldrError):
    """Nothing attributable was posted in the channel since ``since``."""

    def __init__(self, since: ResolvedInstant) -> None:
        super().__init__(f"No messages since {since.display}")
        self.since = since


class GatewayError(TldrError):
    """The messaging platform call failed at the transport level."""


class CompletionError(TldrError):
    """The completion backend failed or returned nothing usable."""


class EmptyTranscriptError(TldrError):
    """A summary was requested for zero messages."""
