"""
discord_utils.py
================

Low-level Discord utility functions for Kozeki.

This module provides stateless helpers for Discord-specific checks and
formatting: the moderator permission gate, the bot's own capability and role
hierarchy checks, mention parsing, member resolution, and human-readable
durations. Nothing here performs a moderation action or keeps state.
"""

from __future__ import annotations

import datetime
import re
from typing import Any, Union

import discord

# Matches inside a token so trailing punctuation ("<@123>,") is tolerated
USER_MENTION_PATTERN = re.compile(r"<@!?(\d+)>")

# Discord error code for "Interaction has already been acknowledged"
INTERACTION_ALREADY_ACKNOWLEDGED = 40060


def is_ignored_author(author: Union[discord.User, discord.Member]) -> bool:
    """
    Check if a message author should be ignored by command handlers (bots and webhooks).

    Args:
        author (discord.User | discord.Member): The author to check.

    Returns:
        bool: True if the author is a bot account, False otherwise.
    """
    return bool(getattr(author, "bot", False))


def has_moderation_permissions(member: Any) -> bool:
    """
    Check if a member may issue moderation commands.

    The gate admits members holding either the "moderate members" or the
    "administrator" permission. Anything without guild permissions (a plain
    user in DMs, a partial object) is refused.

    Args:
        member (discord.Member): The member to evaluate.

    Returns:
        bool: True if the member is allowed to moderate, False otherwise.
    """
    perms = getattr(member, "guild_permissions", None)
    if perms is None:
        return False
    return bool(getattr(perms, "moderate_members", False) or getattr(perms, "administrator", False))


def bot_has_permission(bot_member: Any, permission_name: str) -> bool:
    """
    Check whether the bot's own member object holds a guild-level permission.

    Args:
        bot_member (discord.Member): The bot's member object (``guild.me``).
        permission_name (str): Permission attribute name, e.g. ``"ban_members"``.

    Returns:
        bool: True if the permission is granted, False otherwise.
    """
    perms = getattr(bot_member, "guild_permissions", None)
    return bool(perms is not None and getattr(perms, permission_name, False))


def outranks(bot_member: Any, target: Any) -> bool:
    """
    Return True when the bot's highest role sits strictly above the target's.

    Equal positions do not count: Discord refuses to let a member moderate a
    peer with the same top role.
    """
    return bot_member.top_role.position > target.top_role.position


def parse_user_mention(token: str) -> int | None:
    """
    Extract the user id from a token holding a ``<@id>`` or ``<@!id>`` mention.

    Surrounding punctuation such as ``"<@123>,"`` is ignored. Role mentions
    (``<@&id>``) and anything else return None.
    """
    match = USER_MENTION_PATTERN.search(token)
    return int(match.group(1)) if match else None


def resolve_member(message: discord.Message, user_id: int) -> Any | None:
    """
    Find the member a command targets.

    The message's own mentions are checked first since Discord already
    resolved them for this event; the guild member cache is the fallback.

    Args:
        message (discord.Message): The command message.
        user_id (int): Snowflake of the target.

    Returns:
        discord.Member | None: The member, or None if they are not in the guild.
    """
    for mentioned in getattr(message, "mentions", None) or []:
        if getattr(mentioned, "id", None) == user_id and hasattr(mentioned, "guild_permissions"):
            return mentioned

    guild = message.guild
    if guild is None:
        return None
    return guild.get_member(user_id)


def resolve_user(message: discord.Message, user_id: int) -> Any | None:
    """Return a member or plain user mentioned in ``message`` with ``user_id``."""
    member = resolve_member(message, user_id)
    if member is not None:
        return member
    for mentioned in getattr(message, "mentions", None) or []:
        if getattr(mentioned, "id", None) == user_id:
            return mentioned
    return None


def days_since(moment: datetime.datetime | None, now: datetime.datetime | None = None) -> int | None:
    """
    Return the number of whole days between ``moment`` and ``now`` (UTC).

    Naive datetimes are treated as UTC. Returns None when ``moment`` is None.
    """
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return max((now - moment).days, 0)


def format_uptime(total_seconds: float) -> str:
    """
    Convert a number of seconds into ``"Xd Yh Zm Ws"``.

    Args:
        total_seconds (float): Elapsed seconds; fractions are dropped.

    Returns:
        str: Human-readable uptime string.
    """
    seconds = max(int(total_seconds), 0)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{days}d {hours}h {minutes}m {seconds}s"


def is_already_acknowledged(error: Exception) -> bool:
    """Return True if ``error`` means the interaction already has a response."""
    if isinstance(error, discord.InteractionResponded):
        return True
    return isinstance(error, discord.HTTPException) and error.code == INTERACTION_ALREADY_ACKNOWLEDGED
