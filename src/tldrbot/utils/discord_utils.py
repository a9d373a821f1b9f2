"""Discord utility functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import discord


def get_display_name(user: discord.User | discord.Member) -> str:
    """Get user's display name with proper fallback hierarchy.

    Priority: server nickname > global display name > username

    Args:
        user: Discord user or member object

    Returns:
        The display name to use for this user
    """
    if getattr(user, "nick", None):
        return user.nick

    if getattr(user, "global_name", None):
        return user.global_name

    return user.name


def mention_token(user_id: str | int) -> str:
    """Return the markup Discord renders as an @-mention of *user_id*."""
    return f"<@{user_id}>"
