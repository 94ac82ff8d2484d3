"""
Action types and data structures for moderation commands.

This module defines the ActionType and ActionOutcome enums together with the
small frozen dataclasses that travel through one command invocation. None of
them outlive the event that created them.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum


class ActionType(Enum):
    """Enumeration of supported moderation commands."""

    MUTE = "mute"
    UNMUTE = "unmute"
    BAN = "ban"
    UNBAN = "unban"
    INFO = "info"

    def __str__(self) -> str:
        return self.value


class ActionOutcome(Enum):
    """Terminal state of a single command invocation."""

    SUCCEEDED = "succeeded"
    DENIED_BOT_CAPABILITY = "denied-bot-capability"
    DENIED_HIERARCHY = "denied-hierarchy"
    NO_TARGET = "no-target"
    API_FAILURE = "api-failure"
    IGNORED = "ignored"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """One parsed chat command.

    Attributes:
        action: Command the keyword maps to.
        keyword: Lower-cased keyword exactly as typed.
        target_id: Snowflake of the target user, or None when nothing resolved.
        duration: Duration token for mutes (e.g. ``"10m"``), None otherwise.
        reason: Free-text reason for mutes and bans, None otherwise.
    """

    action: ActionType
    keyword: str
    target_id: int | None = None
    duration: str | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class AuditHistoryEntry:
    """A single audit log entry filtered for the info report."""

    actor_mention: str
    target_id: int
    created_at: datetime.datetime
    detail: str


@dataclass(frozen=True, slots=True)
class ModLogRecord:
    """Outbound notification describing an action that was just taken.

    Attributes:
        action: Action kind, selects the embed color and emoji.
        moderator_mention: Mention of the member who issued the command.
        target_id: Snowflake of the affected user (shown in the footer).
        target_mention: Mention of the affected user.
        reason: Reason recorded for the action.
        duration: Duration token for mutes, None otherwise.
        created_at: When the action completed (UTC).
    """

    action: ActionType
    moderator_mention: str
    target_id: int
    target_mention: str
    reason: str
    duration: str | None = None
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
