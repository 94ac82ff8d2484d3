"""
Embed creation utilities for moderation notifications.

This module builds the embeds Kozeki posts: mod-log records, the ``ki`` user
info report, and the ``/info`` bot summary.
"""

from __future__ import annotations

import datetime
from typing import Mapping, Sequence

import discord

from kozeki.datatypes.action_datatypes import ActionType, AuditHistoryEntry, ModLogRecord

# Discord rejects embed field values longer than this
FIELD_VALUE_LIMIT = 1024

ACTION_EMOJIS = {
    ActionType.MUTE: "🔇",
    ActionType.UNMUTE: "🔓",
    ActionType.BAN: "🔨",
    ActionType.UNBAN: "🎊",
    ActionType.INFO: "🔍",
}

ACTION_COLORS = {
    ActionType.MUTE: discord.Color.orange(),
    ActionType.UNMUTE: discord.Color.green(),
    ActionType.BAN: discord.Color.red(),
    ActionType.UNBAN: discord.Color.green(),
    ActionType.INFO: discord.Color.blue(),
}

DEFAULT_COLOR = discord.Color.from_rgb(255, 105, 180)

ACTION_TITLES = {
    ActionType.MUTE: "Member Muted",
    ActionType.UNMUTE: "Member Unmuted",
    ActionType.BAN: "Member Banned",
    ActionType.UNBAN: "Member Unbanned",
    ActionType.INFO: "User Info Lookup",
}


def truncate_field_value(value: str, limit: int = FIELD_VALUE_LIMIT) -> str:
    """Cut ``value`` to ``limit`` characters, ending with an ellipsis when shortened."""
    if len(value) <= limit:
        return value
    return value[: limit - 1] + "…"


def create_mod_log_embed(record: ModLogRecord) -> discord.Embed:
    """
    Create the mod-log embed for an action that was just taken.

    Args:
        record: The action to describe.

    Returns:
        discord.Embed: Color and emoji coded summary with Moderator, User,
        Reason and (for mutes) Duration fields, footed with the target's id.
    """
    emoji = ACTION_EMOJIS.get(record.action, "⚙️")
    color = ACTION_COLORS.get(record.action, DEFAULT_COLOR)
    title = ACTION_TITLES.get(record.action, record.action.value.capitalize())

    embed = discord.Embed(
        title=f"{emoji} {title}",
        color=color,
        timestamp=record.created_at,
    )
    embed.add_field(name="Moderator", value=record.moderator_mention, inline=True)
    embed.add_field(name="User", value=record.target_mention, inline=True)
    embed.add_field(name="Reason", value=truncate_field_value(record.reason), inline=False)
    if record.duration:
        embed.add_field(name="Duration", value=record.duration, inline=True)
    embed.set_footer(text=f"User ID: {record.target_id}")
    return embed


def format_history_line(entry: AuditHistoryEntry) -> str:
    """Render one audit entry as ``<relative time> • <actor> • <detail>``."""
    return f"{discord.utils.format_dt(entry.created_at, 'R')} • {entry.actor_mention} • {entry.detail}"


def join_history_lines(entries: Sequence[AuditHistoryEntry], limit: int = FIELD_VALUE_LIMIT) -> str:
    """
    Join history lines into one field value that fits Discord's limit.

    Lines are kept in the given order (newest first). When they do not all
    fit, the tail is replaced with ``"…and N more"``.
    """
    if not entries:
        return "None"

    lines: list[str] = []
    used = 0
    for index, entry in enumerate(entries):
        line = format_history_line(entry)
        remaining = len(entries) - index - 1
        tail = f"\n…and {remaining} more" if remaining else ""
        projected = used + len(line) + (1 if lines else 0)
        if projected + len(tail) > limit:
            lines.append(f"…and {len(entries) - index} more")
            break
        lines.append(line)
        used = projected
    return "\n".join(lines)


def create_user_info_embed(
    user: discord.abc.User,
    *,
    account_age_days: int | None,
    join_age_days: int | None,
    suspicious: bool,
    history: Mapping[str, Sequence[AuditHistoryEntry]],
) -> discord.Embed:
    """
    Create the ``ki`` report embed.

    Args:
        user: The member or user looked up.
        account_age_days: Days since the account was created.
        join_age_days: Days since the member joined, None if not a member.
        suspicious: Whether the account is younger than the configured threshold.
        history: Field title to filtered audit entries, rendered in order.
    """
    embed = discord.Embed(
        title=f"🔍 User Info: {user}",
        color=discord.Color.red() if suspicious else discord.Color.blue(),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name="User", value=f"{user.mention} (`{user.id}`)", inline=False)

    created_at = getattr(user, "created_at", None)
    if created_at is not None and account_age_days is not None:
        embed.add_field(
            name="Account Created",
            value=f"{discord.utils.format_dt(created_at, 'D')} ({account_age_days} days ago)",
            inline=True,
        )

    joined_at = getattr(user, "joined_at", None)
    if joined_at is not None and join_age_days is not None:
        joined_value = f"{discord.utils.format_dt(joined_at, 'D')} ({join_age_days} days ago)"
    else:
        joined_value = "Not a member"
    embed.add_field(name="Joined Server", value=joined_value, inline=True)

    embed.add_field(
        name="Suspicious",
        value="⚠️ Yes, account is very new" if suspicious else "✅ No",
        inline=False,
    )

    for title, entries in history.items():
        embed.add_field(name=f"{title} ({len(entries)})", value=join_history_lines(entries), inline=False)

    embed.set_footer(text=f"User ID: {user.id}")
    return embed


def create_bot_info_embed(version: str, uptime: str, help_lines: Sequence[str]) -> discord.Embed:
    """Create the ``/info`` embed with version, uptime and the command list."""
    embed = discord.Embed(
        title="ℹ️ Kozeki",
        description="Moderation assistant for this server.",
        color=discord.Color.blue(),
    )
    embed.add_field(name="Version", value=version, inline=True)
    embed.add_field(name="Uptime", value=uptime, inline=True)
    embed.add_field(name="Commands", value="\n".join(help_lines), inline=False)
    return embed
