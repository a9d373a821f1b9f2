"""Discord cog that summarizes a channel since a point in time.

Two triggers share one pipeline:

- ``!tldr <time>`` parses the time expression (``2 hours ago``, ``20.03.2024``).
- ``!tldr`` sent as a reply, or the "Summarize from here" message context
  menu, starts from the referenced message's timestamp.
"""
from __future__ import annotations

import logging
from datetime import tzinfo

import discord
from discord import app_commands
from discord.ext import commands

from tldrbot.errors import NoMessagesError, ParseError, UserResolutionError
from tldrbot.gateway import DiscordGateway
from tldrbot.settings import Settings, load_settings
from tldrbot.summarization import MessageEnricher, SummaryComposer, TldrReport, TldrService
from tldrbot.text_generators import get_text_generator
from tldrbot.time_reference import ResolvedInstant, get_timezone, resolve, resolve_from_timestamp

__all__ = ["TldrCog", "build_service"]

_log = logging.getLogger(__name__)

THINKING_EMOJI = "\N{THINKING FACE}"
EMBED_DESCRIPTION_LIMIT = 4096

USER_LOOKUP_FAILED = "Error fetching user info. Please try again later."
REQUEST_FAILED = "Error processing the request. Please try again later."
NO_MESSAGES = "No messages found since {display}."


def build_service(bot: commands.Bot, settings: Settings) -> TldrService:
    """Wire the Discord gateway and configured LLM into a :class:`TldrService`."""
    gateway = DiscordGateway(bot)
    enricher = MessageEnricher(
        gateway,
        limit=settings.message_limit,
        fetch_policy=settings.fetch_failure_policy,
    )
    composer = SummaryComposer(
        get_text_generator(settings.text_api, settings.model),
        max_output_tokens=settings.max_output_tokens,
    )
    return TldrService(gateway, enricher, composer)


def _render_report(report: TldrReport) -> discord.Embed:
    embed = discord.Embed(title=report.header, description=report.summary[:EMBED_DESCRIPTION_LIMIT])
    embed.set_footer(text=report.footer)
    return embed


class TldrCog(commands.Cog):
    """Summarize recent channel history with an LLM."""

    def __init__(self, bot: commands.Bot, service: TldrService, *, tz: tzinfo) -> None:
        self.bot = bot
        self.service = service
        self.tz = tz
        self.ctx_menu = app_commands.ContextMenu(
            name="Summarize from here",
            callback=self.summarize_from_here,
        )
        self.bot.tree.add_command(self.ctx_menu)

    async def cog_unload(self) -> None:
        self.bot.tree.remove_command(self.ctx_menu.name, type=self.ctx_menu.type)

    # ------------------------------------------------------------------ helpers

    async def _add_reaction(self, message: discord.Message, emoji: str) -> None:
        try:
            await message.add_reaction(emoji)
        except (discord.HTTPException, AttributeError):
            pass

    async def _remove_reaction(self, message: discord.Message, emoji: str) -> None:
        me = getattr(self.bot, "user", None)
        if me is None:
            return
        try:
            await message.remove_reaction(emoji, me)
        except (discord.HTTPException, AttributeError):
            pass

    async def _referenced_message(self, message: discord.Message) -> discord.Message | None:
        ref = getattr(message, "reference", None)
        if ref is None or ref.message_id is None:
            return None
        if isinstance(ref.resolved, discord.Message):
            return ref.resolved
        try:
            return await message.channel.fetch_message(ref.message_id)
        except discord.HTTPException:
            _log.warning("Could not fetch referenced message %s", ref.message_id)
            return None

    def _anchor_instant(self, anchor: discord.Message) -> ResolvedInstant:
        return resolve_from_timestamp(anchor.created_at.timestamp(), tz=self.tz)

    async def _build_reply(
        self,
        channel_id: int,
        user_id: int,
        since: ResolvedInstant,
        header: str,
        before_message_id: int | None = None,
    ) -> discord.Embed | str:
        """Run the pipeline and turn its outcome into what gets posted."""
        try:
            report = await self.service.summarize(
                str(channel_id),
                str(user_id),
                since,
                header=header,
                before_message_id=str(before_message_id) if before_message_id is not None else None,
            )
        except UserResolutionError:
            return USER_LOOKUP_FAILED
        except NoMessagesError as exc:
            return NO_MESSAGES.format(display=exc.since.display)
        except Exception:  # noqa: BLE001
            _log.exception("TLDR request failed in channel %s", channel_id)
            return REQUEST_FAILED
        return _render_report(report)

    @staticmethod
    async def _send(ctx: commands.Context, reply: discord.Embed | str) -> None:
        if isinstance(reply, discord.Embed):
            await ctx.send(embed=reply)
        else:
            await ctx.send(reply)

    # ------------------------------------------------------------------ triggers

    @commands.command(name="tldr")
    async def tldr(self, ctx: commands.Context, *, when: str = "") -> None:
        """Summarize this channel since a time (`2 hours ago`, `20.03.2024 14:30`) or the replied-to message."""
        anchor = None
        if not when.strip():
            anchor = await self._referenced_message(ctx.message)

        if anchor is not None:
            since = self._anchor_instant(anchor)
            header = f"TLDR Summary from message at {since.display}"
        else:
            try:
                since = resolve(when, tz=self.tz)
            except ParseError as exc:
                await ctx.send(str(exc))
                return
            header = f"TLDR Summary since {since.display}"

        await self._add_reaction(ctx.message, THINKING_EMOJI)
        try:
            reply = await self._build_reply(
                ctx.channel.id, ctx.author.id, since, header, before_message_id=ctx.message.id
            )
        finally:
            await self._remove_reaction(ctx.message, THINKING_EMOJI)
        await self._send(ctx, reply)

    async def summarize_from_here(self, interaction: discord.Interaction, message: discord.Message) -> None:
        """Context-menu trigger: summarize everything since *message*."""
        await interaction.response.defer(thinking=True)
        since = self._anchor_instant(message)
        reply = await self._build_reply(
            message.channel.id,
            interaction.user.id,
            since,
            f"TLDR Summary from message at {since.display}",
        )
        if isinstance(reply, discord.Embed):
            await interaction.followup.send(embed=reply)
        else:
            await interaction.followup.send(reply)


async def setup(bot: commands.Bot) -> None:
    settings = load_settings()
    await bot.add_cog(TldrCog(bot, build_service(bot, settings), tz=get_timezone(settings.timezone)))
