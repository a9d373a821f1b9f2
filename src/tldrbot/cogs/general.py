from discord.ext import commands

MAX_HELP_LEN = 1900  # keep a little margin below Discord 2000 limit


class General(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command()
    async def ping(self, ctx: commands.Context):
        """Responds with Pong!"""
        await ctx.send("Pong!")

    @commands.command(name="help")
    async def help_cmd(self, ctx: commands.Context):
        """Show available commands (<=2000 chars)."""
        prefix = ctx.prefix or "!"
        text = (
            "**TLDR Bot Help**\n"
            "Summaries of what you missed in a channel.\n\n"
            "Summarize since a time\n"
            f"- `{prefix}tldr 2 hours ago` (also `minutes` and `days`).\n"
            f"- `{prefix}tldr 20.03.2024 14:30` or `{prefix}tldr 20.03.2024`.\n"
            f"- `{prefix}tldr 2024-03-20 14:30` or `{prefix}tldr 2024-03-20`.\n\n"
            "Summarize from a message\n"
            f"- Reply to a message with `{prefix}tldr`.\n"
            "- Or right-click a message > Apps > **Summarize from here**.\n\n"
            "Other\n"
            f"- `{prefix}ping` returns `Pong!`.\n"
        )
        await ctx.send(text[:MAX_HELP_LEN])


async def setup(bot: commands.Bot):
    await bot.add_cog(General(bot))
