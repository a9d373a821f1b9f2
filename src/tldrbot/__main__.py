"""Entry point: ``python -m tldrbot``."""

import asyncio
import logging
import os

import discord
from discord.ext import commands
from dotenv import load_dotenv

from tldrbot.settings import load_settings

load_dotenv()

token = os.getenv("DISCORD_TOKEN")
logger = logging.getLogger("tldrbot")
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

intents = discord.Intents.default()
intents.message_content = True


class TldrBot(commands.Bot):
    async def setup_hook(self) -> None:
        await self.load_extension("tldrbot.cogs.general")
        await self.load_extension("tldrbot.cogs.tldr")
        # Registers the "Summarize from here" context menu with Discord.
        synced = await self.tree.sync()
        logger.info("Synced %d application commands", len(synced))


bot = TldrBot(
    command_prefix=commands.when_mentioned_or(load_settings().command_prefix),
    intents=intents,
    case_insensitive=True,
    help_command=None,
)


@bot.event
async def on_ready():
    logger.info("Bot is ready. Logged in as %s (ID: %s)", bot.user, bot.user.id)
    logger.info("Loaded cogs: %s", list(bot.cogs.keys()))


async def main():
    if not token:
        raise SystemExit("DISCORD_TOKEN is not set")
    async with bot:
        logger.info("starting bot")
        await bot.start(token)


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
