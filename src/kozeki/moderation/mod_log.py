"""
Best-effort mod-log channel sink.

``ModLogSink.post`` describes a completed moderation action in the configured
channel. It is called after the user-facing acknowledgement has been sent and
never raises: a missing channel, a channel from another guild, or a failed
send is logged to the console and otherwise ignored.
"""

from __future__ import annotations

import logging
from typing import Any

import discord

from kozeki.datatypes.action_datatypes import ModLogRecord
from kozeki.ui.action_embed import create_mod_log_embed
from kozeki.util.logger import get_logger

logger = get_logger("mod_log")


class ModLogSink:
    """Posts mod-log embeds to a single channel.

    Parameters
    ----------
    bot:
        Client used to look the channel up (``get_channel`` / ``fetch_channel``).
    channel_id:
        Snowflake of the mod-log channel, or None to disable posting.
    log:
        Logger receiving failures; defaults to this module's logger.
    """

    def __init__(self, bot: Any, channel_id: int | None, log: logging.Logger | None = None) -> None:
        self.bot = bot
        self.channel_id = channel_id
        self.logger = log or logger

    async def resolve_channel(self, guild: discord.Guild) -> Any | None:
        """Return the mod-log channel if it exists and belongs to ``guild``."""
        if self.channel_id is None:
            self.logger.warning("[MOD LOG] No mod-log channel configured; skipping post.")
            return None

        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            channel = await self.bot.fetch_channel(self.channel_id)

        channel_guild = getattr(channel, "guild", None)
        if channel_guild is None or channel_guild.id != guild.id:
            self.logger.warning(
                "[MOD LOG] Channel %s does not belong to guild %s; skipping post.",
                self.channel_id,
                guild.id,
            )
            return None
        return channel

    async def post(self, guild: discord.Guild, record: ModLogRecord) -> bool:
        """Send ``record`` to the mod-log channel.

        Returns
        -------
        bool
            True if the embed was sent, False if it was skipped or failed.
        """
        try:
            channel = await self.resolve_channel(guild)
            if channel is None:
                return False
            await channel.send(embed=create_mod_log_embed(record))
            self.logger.debug("[MOD LOG] Posted %s for user %s", record.action.value, record.target_id)
            return True
        except Exception as exc:
            self.logger.error("[MOD LOG] Failed to post %s log for user %s: %s", record.action.value, record.target_id, exc)
            return False
