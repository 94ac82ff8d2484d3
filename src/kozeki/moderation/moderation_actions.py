"""
Moderation action handlers and the keyword dispatch table.

Each handler receives an explicit :class:`CommandContext` and a parsed
:class:`CommandInvocation`, performs one Discord call, acknowledges it in the
command channel and, on success, posts a mod-log record. Every handler
returns an :class:`ActionOutcome`; none of them raise.

Outcomes
- ``NO_TARGET``: nothing resolved, nothing is said.
- ``DENIED_BOT_CAPABILITY``: the bot lacks the permission, the user is told.
- ``DENIED_HIERARCHY``: mute only, the target's top role is not below the bot's.
- ``API_FAILURE``: Discord rejected the call, the user gets a generic message.
- ``SUCCEEDED``: acknowledgement sent, then the mod-log post.
"""

from __future__ import annotations

import datetime
from typing import Awaitable, Callable, Mapping

import discord

from kozeki.datatypes.action_datatypes import ActionOutcome, ActionType, CommandInvocation
from kozeki.datatypes.command_datatypes import CommandContext
from kozeki.moderation.audit_report import handle_info
from kozeki.moderation.command_parser import parse_duration
from kozeki.util.discord_utils import bot_has_permission, outranks, resolve_member
from kozeki.util.logger import get_logger

logger = get_logger("moderation_actions")

CommandHandler = Callable[[CommandContext, CommandInvocation], Awaitable[ActionOutcome]]

UNBAN_REASON = "User unbanned"
UNMUTE_REASON = "Timeout removed"

HIERARCHY_DENIED_MESSAGE = "I cannot moderate this user because they have a role equal to or higher than mine."


async def _safe_reply(context: CommandContext, content: str) -> None:
    """Send a reply, logging instead of raising if the channel rejects it."""
    try:
        await context.reply(content)
    except Exception as exc:
        logger.error("Failed to send reply in channel %s: %s", getattr(context.message.channel, "id", "?"), exc)


async def handle_mute(context: CommandContext, invocation: CommandInvocation) -> ActionOutcome:
    """Time a member out: ``km @user [duration] [reason]``."""
    if invocation.target_id is None:
        return ActionOutcome.NO_TARGET
    target = resolve_member(context.message, invocation.target_id)
    if target is None:
        return ActionOutcome.NO_TARGET

    if not bot_has_permission(context.bot_member, "moderate_members"):
        await _safe_reply(context, "I don't have permission to timeout members.")
        return ActionOutcome.DENIED_BOT_CAPABILITY

    if not outranks(context.bot_member, target):
        await _safe_reply(context, HIERARCHY_DENIED_MESSAGE)
        return ActionOutcome.DENIED_HIERARCHY

    duration = invocation.duration or context.settings.default_duration
    reason = invocation.reason or context.settings.default_reason
    duration_ms = parse_duration(duration)

    try:
        await target.timeout_for(datetime.timedelta(milliseconds=duration_ms), reason=reason)
    except Exception as exc:
        logger.error("Error muting user %s: %s", target.id, exc)
        await _safe_reply(context, "Failed to mute user. Make sure I have the correct permissions.")
        return ActionOutcome.API_FAILURE

    logger.info("%s muted %s for %s (%s)", context.moderator, target, duration, reason)
    await _safe_reply(context, f"🔇 Done! Muted {target.mention} for {duration}. Reason: {reason}")
    await context.log_action(ActionType.MUTE, target.id, target.mention, reason, duration=duration)
    return ActionOutcome.SUCCEEDED


async def handle_unmute(context: CommandContext, invocation: CommandInvocation) -> ActionOutcome:
    """Clear a member's timeout: ``kum @user``.

    No hierarchy check is made, and clearing a timeout that is not set is
    accepted by Discord as a no-op.
    """
    if invocation.target_id is None:
        return ActionOutcome.NO_TARGET
    target = resolve_member(context.message, invocation.target_id)
    if target is None:
        return ActionOutcome.NO_TARGET

    if not bot_has_permission(context.bot_member, "moderate_members"):
        await _safe_reply(context, "I don't have permission to remove timeouts.")
        return ActionOutcome.DENIED_BOT_CAPABILITY

    try:
        await target.remove_timeout(reason=UNMUTE_REASON)
    except Exception as exc:
        logger.error("Error unmuting user %s: %s", target.id, exc)
        await _safe_reply(context, "Failed to unmute user. Make sure I have the correct permissions.")
        return ActionOutcome.API_FAILURE

    logger.info("%s unmuted %s", context.moderator, target)
    await _safe_reply(context, f"🔓 Done! Unmuted {target.mention}")
    await context.log_action(ActionType.UNMUTE, target.id, target.mention, UNMUTE_REASON)
    return ActionOutcome.SUCCEEDED


async def handle_ban(context: CommandContext, invocation: CommandInvocation) -> ActionOutcome:
    """Ban a member: ``kb @user [reason]``.

    Role hierarchy is left to Discord; a refused ban is an API failure.
    """
    if invocation.target_id is None:
        return ActionOutcome.NO_TARGET
    target = resolve_member(context.message, invocation.target_id)
    if target is None:
        return ActionOutcome.NO_TARGET

    if not bot_has_permission(context.bot_member, "ban_members"):
        await _safe_reply(context, "I don't have permission to ban members.")
        return ActionOutcome.DENIED_BOT_CAPABILITY

    reason = invocation.reason or context.settings.default_reason

    try:
        await context.guild.ban(target, reason=reason)
    except Exception as exc:
        logger.error("Error banning user %s: %s", target.id, exc)
        await _safe_reply(context, "Failed to ban user. Make sure I have the correct permissions.")
        return ActionOutcome.API_FAILURE

    logger.info("%s banned %s (%s)", context.moderator, target, reason)
    await _safe_reply(context, f"🔨 Done! Banned {target.mention}. Reason: {reason}")
    await context.log_action(ActionType.BAN, target.id, target.mention, reason)
    return ActionOutcome.SUCCEEDED


async def handle_unban(context: CommandContext, invocation: CommandInvocation) -> ActionOutcome:
    """Lift a ban by id: ``kub @user`` or ``kub <id>``."""
    user_id = invocation.target_id
    if user_id is None:
        return ActionOutcome.NO_TARGET

    if not bot_has_permission(context.bot_member, "ban_members"):
        await _safe_reply(context, "I don't have permission to unban members.")
        return ActionOutcome.DENIED_BOT_CAPABILITY

    try:
        await context.guild.unban(discord.Object(id=user_id), reason=UNBAN_REASON)
    except Exception as exc:
        logger.error("Error unbanning user %s: %s", user_id, exc)
        await _safe_reply(
            context,
            "Failed to unban user. The user may not be banned or I don't have the correct permissions.",
        )
        return ActionOutcome.API_FAILURE

    mention = f"<@{user_id}>"
    logger.info("%s unbanned %s", context.moderator, user_id)
    await _safe_reply(context, f"🎊 Done! Unbanned {mention}")
    await context.log_action(ActionType.UNBAN, user_id, mention, UNBAN_REASON)
    return ActionOutcome.SUCCEEDED


COMMAND_HANDLERS: Mapping[ActionType, CommandHandler] = {
    ActionType.MUTE: handle_mute,
    ActionType.UNMUTE: handle_unmute,
    ActionType.BAN: handle_ban,
    ActionType.UNBAN: handle_unban,
    ActionType.INFO: handle_info,
}


async def dispatch(
    context: CommandContext,
    invocation: CommandInvocation | None,
    handlers: Mapping[ActionType, CommandHandler] = COMMAND_HANDLERS,
) -> ActionOutcome:
    """Run the handler registered for ``invocation``.

    A None invocation or an action with no handler is ignored silently.
    Unexpected handler errors are logged and reported as API failures so
    nothing escapes the event.
    """
    if invocation is None:
        return ActionOutcome.IGNORED

    handler = handlers.get(invocation.action)
    if handler is None:
        return ActionOutcome.IGNORED

    try:
        return await handler(context, invocation)
    except Exception as exc:
        logger.exception("Unhandled error while running %s: %s", invocation.action.value, exc)
        return ActionOutcome.API_FAILURE
