"""
User info lookup built from the guild audit log.

The ``ki @user`` command reports account age, join age, a "suspicious" flag
for very new accounts, and the user's ban, unban and timeout history. The
history is read fresh from Discord on every lookup: one page per event type,
filtered to the target. Older entries beyond that page are not shown.
"""

from __future__ import annotations

import datetime
from typing import Any, Callable, Iterable

import discord

from kozeki.datatypes.action_datatypes import ActionOutcome, ActionType, AuditHistoryEntry, CommandInvocation
from kozeki.datatypes.command_datatypes import CommandContext
from kozeki.ui.action_embed import create_user_info_embed
from kozeki.util.discord_utils import bot_has_permission, days_since, resolve_user
from kozeki.util.logger import get_logger

logger = get_logger("audit_report")

TIMEOUT_CHANGE_KEY = "communication_disabled_until"
INFO_REASON = "User info lookup"
LOOKUP_FAILED_MESSAGE = "Failed to look up user. Make sure I have the correct permissions."


def entry_target_id(entry: Any) -> int | None:
    """Return the id of the user an audit log entry is about, if any."""
    return getattr(getattr(entry, "target", None), "id", None)


def has_timeout_change(entry: Any) -> bool:
    """Return True if a member update entry touched the member's timeout.

    Nickname, role and other member edits share the same audit event type,
    so only entries whose change set carries the timeout field qualify.
    """
    changes = getattr(entry, "changes", None)
    if changes is None:
        return False
    return hasattr(changes.before, TIMEOUT_CHANGE_KEY) or hasattr(changes.after, TIMEOUT_CHANGE_KEY)


def _actor_mention(entry: Any) -> str:
    actor = getattr(entry, "user", None)
    return actor.mention if actor is not None else "Unknown"


def _ban_detail(entry: Any) -> str:
    return entry.reason or "No reason provided"


def _unban_detail(entry: Any) -> str:
    return entry.reason or "Unbanned"


def _timeout_detail(entry: Any) -> str:
    until = getattr(entry.changes.after, TIMEOUT_CHANGE_KEY, None)
    detail = f"Timed out until {discord.utils.format_dt(until, 'f')}" if until else "Timeout removed"
    if entry.reason:
        detail = f"{detail} ({entry.reason})"
    return detail


def filter_entries(
    entries: Iterable[Any],
    target_id: int,
    describe: Callable[[Any], str] = _ban_detail,
    *,
    timeouts_only: bool = False,
) -> list[AuditHistoryEntry]:
    """Keep the entries about ``target_id`` and convert them for rendering.

    Args:
        entries: Raw audit log entries, newest first as Discord returns them.
        target_id: Snowflake of the looked-up user.
        describe: Renders the detail text of one entry.
        timeouts_only: Keep only member updates that changed the timeout.

    Returns:
        list[AuditHistoryEntry]: Matching entries in their original order.
    """
    return [
        AuditHistoryEntry(
            actor_mention=_actor_mention(entry),
            target_id=target_id,
            created_at=entry.created_at,
            detail=describe(entry),
        )
        for entry in entries
        if entry_target_id(entry) == target_id and (not timeouts_only or has_timeout_change(entry))
    ]


async def fetch_audit_entries(guild: discord.Guild, action: discord.AuditLogAction, limit: int) -> list[Any]:
    """Read a single page of audit log entries of one type."""
    return [entry async for entry in guild.audit_logs(limit=limit, action=action)]


async def fetch_moderation_history(guild: discord.Guild, target_id: int, limit: int) -> dict[str, list[AuditHistoryEntry]]:
    """Return the user's bans, unbans and timeouts keyed by report field title."""
    bans = await fetch_audit_entries(guild, discord.AuditLogAction.ban, limit)
    unbans = await fetch_audit_entries(guild, discord.AuditLogAction.unban, limit)
    member_updates = await fetch_audit_entries(guild, discord.AuditLogAction.member_update, limit)

    return {
        "Bans": filter_entries(bans, target_id),
        "Unbans": filter_entries(unbans, target_id, _unban_detail),
        "Timeouts": filter_entries(member_updates, target_id, _timeout_detail, timeouts_only=True),
    }


async def _report_failure(context: CommandContext, placeholder: discord.Message | None) -> None:
    """Replace the loading message with the failure text, or send it fresh."""
    try:
        if placeholder is not None:
            await placeholder.edit(content=LOOKUP_FAILED_MESSAGE, embed=None)
        else:
            await context.reply(LOOKUP_FAILED_MESSAGE)
    except Exception as exc:
        logger.error("Failed to report lookup failure: %s", exc)


async def handle_info(context: CommandContext, invocation: CommandInvocation) -> ActionOutcome:
    """Report on a user: ``ki @user``."""
    if invocation.target_id is None:
        return ActionOutcome.NO_TARGET
    user = resolve_user(context.message, invocation.target_id)
    if user is None:
        return ActionOutcome.NO_TARGET

    if not bot_has_permission(context.bot_member, "view_audit_log"):
        try:
            await context.reply("I don't have permission to view the audit log.")
        except Exception as exc:
            logger.error("Failed to send reply: %s", exc)
        return ActionOutcome.DENIED_BOT_CAPABILITY

    placeholder: discord.Message | None = None
    try:
        placeholder = await context.reply(f"🔍 Looking up {user.mention}...")
        history = await fetch_moderation_history(context.guild, user.id, context.settings.audit_log_limit)
    except Exception as exc:
        logger.error("Error fetching audit log for user %s: %s", user.id, exc)
        await _report_failure(context, placeholder)
        return ActionOutcome.API_FAILURE

    now = datetime.datetime.now(datetime.timezone.utc)
    account_age = days_since(getattr(user, "created_at", None), now)
    join_age = days_since(getattr(user, "joined_at", None), now)
    suspicious = account_age is not None and account_age < context.settings.suspicious_account_days

    embed = create_user_info_embed(
        user,
        account_age_days=account_age,
        join_age_days=join_age,
        suspicious=suspicious,
        history=history,
    )

    try:
        await placeholder.edit(content=None, embed=embed)
    except Exception as exc:
        logger.error("Error sending info report for user %s: %s", user.id, exc)
        await _report_failure(context, None)
        return ActionOutcome.API_FAILURE

    logger.info(
        "%s looked up %s (bans=%d, unbans=%d, timeouts=%d)",
        context.moderator,
        user,
        len(history["Bans"]),
        len(history["Unbans"]),
        len(history["Timeouts"]),
    )
    await context.log_action(ActionType.INFO, user.id, user.mention, INFO_REASON)
    return ActionOutcome.SUCCEEDED
