"""
Info slash command for Kozeki.
"""

import time

import discord
from discord.ext import commands

import kozeki
from kozeki.configuration.app_configuration import app_config
from kozeki.ui.action_embed import create_bot_info_embed
from kozeki.util.discord_utils import format_uptime, is_already_acknowledged
from kozeki.util.logger import get_logger

logger = get_logger("info_commands")


def build_help_lines(keywords: dict[str, str]) -> list[str]:
    """Return the static command list shown by ``/info``."""
    return [
        f"`{keywords['mute']} @user [duration] [reason]`: timeout a member (default 10m)",
        f"`{keywords['unmute']} @user`: remove a timeout",
        f"`{keywords['ban']} @user [reason]`: ban a member",
        f"`{keywords['unban']} @user|id`: lift a ban",
        f"`{keywords['info']} @user`: account age and moderation history",
        "Durations: `30s`, `10m`, `2h`, `1d`, `1w`",
    ]


class InfoCog(commands.Cog):
    """Cog for the ``/info`` command."""

    def __init__(self, bot: discord.Bot, started_at: float | None = None):
        self.bot = bot
        self.started_at = kozeki.PROCESS_STARTED_AT if started_at is None else started_at

    def uptime(self) -> str:
        """Time since the process started, as ``Xd Yh Zm Ws``."""
        return format_uptime(time.monotonic() - self.started_at)

    @commands.slash_command(name="info", description="Show the bot version, uptime and commands")
    async def info(self, application_context: discord.ApplicationContext) -> None:
        """Show the bot version, uptime and command list."""
        embed = create_bot_info_embed(
            kozeki.__version__,
            self.uptime(),
            build_help_lines(app_config.command_keywords),
        )
        try:
            await application_context.respond(embed=embed)
        except Exception as exc:
            if not is_already_acknowledged(exc):
                raise
            logger.debug("Interaction already acknowledged; sending /info as a followup")
            try:
                await application_context.followup.send(embed=embed)
            except Exception as followup_exc:
                logger.error(f"Error sending /info followup: {followup_exc}")


def setup(bot: discord.Bot) -> None:
    """Register the info cog with the bot."""
    bot.add_cog(InfoCog(bot))
