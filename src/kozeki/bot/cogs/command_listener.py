"""Message listener Cog for Kozeki's chat commands.

Every guild message from a human passes the moderator permission gate first;
messages from anyone else are ignored before the text is even looked at.
Recognized keywords are then parsed and handed to the dispatch table in
:mod:`kozeki.moderation.moderation_actions`.
"""

from __future__ import annotations

import discord
from discord.ext import commands

from kozeki.configuration.app_configuration import AppConfig, app_config
from kozeki.datatypes.action_datatypes import ActionOutcome
from kozeki.datatypes.command_datatypes import CommandContext
from kozeki.moderation import moderation_actions
from kozeki.moderation.command_parser import build_keyword_table, parse_command
from kozeki.moderation.mod_log import ModLogSink
from kozeki.util import discord_utils
from kozeki.util.logger import get_logger

logger = get_logger("command_listener_cog")


class CommandListenerCog(commands.Cog):
    """Cog that turns chat messages into moderation commands."""

    def __init__(self, discord_bot_instance, mod_log: ModLogSink, config: AppConfig = app_config):
        """
        Initialize the command listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        mod_log:
            Sink that receives a record for every successful action.
        config:
            Application configuration providing keywords and moderation settings.
        """
        self.bot = discord_bot_instance
        self.mod_log = mod_log
        self.config = config
        self.keyword_table = build_keyword_table(config.command_keywords)
        logger.info("Command listener cog loaded")

    async def handle_message(self, message: discord.Message) -> ActionOutcome:
        """
        Run one message through the gate, the parser and the dispatch table.

        Parameters
        ----------
        message:
            The Discord message that was created.

        Returns
        -------
        ActionOutcome
            ``IGNORED`` for DMs, bots, non-moderators and ordinary chatter;
            otherwise the handler's outcome.
        """
        guild = message.guild
        if guild is None or discord_utils.is_ignored_author(message.author):
            return ActionOutcome.IGNORED

        if not discord_utils.has_moderation_permissions(message.author):
            return ActionOutcome.IGNORED

        settings = self.config.moderation
        invocation = parse_command(
            message.content,
            self.keyword_table,
            default_duration=settings.default_duration,
            default_reason=settings.default_reason,
        )
        if invocation is None:
            return ActionOutcome.IGNORED

        logger.debug(f"{message.author} issued '{invocation.keyword}' in {guild.name}")

        context = CommandContext(
            message=message,
            guild=guild,
            bot_member=guild.me,
            mod_log=self.mod_log,
            settings=settings,
        )
        outcome = await moderation_actions.dispatch(context, invocation)
        logger.debug(f"'{invocation.keyword}' from {message.author} finished as {outcome}")
        return outcome

    @commands.Cog.listener(name='on_message')
    async def on_message(self, message: discord.Message):
        """Handle new messages that may carry a moderation command."""
        await self.handle_message(message)


def setup(discord_bot_instance, mod_log: ModLogSink):
    """
    Register the CommandListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    mod_log:
        Mod-log sink shared by every command handler.
    """
    discord_bot_instance.add_cog(CommandListenerCog(discord_bot_instance, mod_log))
