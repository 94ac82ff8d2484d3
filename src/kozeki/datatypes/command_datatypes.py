"""
Per-invocation context handed to every moderation command handler.

The cog builds one CommandContext per message and passes it explicitly, so
handlers never reach for a global client and can be exercised with mocks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import discord

from kozeki.configuration.moderation_settings import ModerationSettings
from kozeki.datatypes.action_datatypes import ActionType, ModLogRecord


@dataclass(slots=True)
class CommandContext:
    """Everything a handler needs to act on one command message.

    Attributes:
        message: The message that carried the command.
        guild: Guild the command was issued in.
        bot_member: The bot's own member object in that guild.
        mod_log: Sink receiving a record for every successful action.
        settings: Moderation settings in effect for this invocation.
    """

    message: discord.Message
    guild: discord.Guild
    bot_member: discord.Member
    mod_log: Any
    settings: ModerationSettings = field(default_factory=ModerationSettings)

    @property
    def moderator(self) -> discord.Member:
        """The member who issued the command."""
        return self.message.author  # type: ignore[return-value]

    async def reply(self, content: str | None = None, **kwargs: Any) -> discord.Message:
        """Send a message to the channel the command came from."""
        return await self.message.channel.send(content, **kwargs)

    async def log_action(
        self,
        action: ActionType,
        target_id: int,
        target_mention: str,
        reason: str,
        duration: str | None = None,
    ) -> None:
        """Post a mod-log record for an action that already succeeded."""
        record = ModLogRecord(
            action=action,
            moderator_mention=self.moderator.mention,
            target_id=target_id,
            target_mention=target_mention,
            reason=reason,
            duration=duration,
        )
        await self.mod_log.post(self.guild, record)
