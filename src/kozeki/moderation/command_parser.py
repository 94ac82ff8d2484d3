"""
command_parser.py
=================

Pure parsing helpers for Kozeki's chat commands.

``parse_command`` turns a raw message into a :class:`CommandInvocation` and
``parse_duration`` turns a short duration token such as ``"10m"`` into
milliseconds. Neither function touches Discord; the cogs feed them the
message text and act on the result.
"""

from __future__ import annotations

import re
from typing import Mapping

from kozeki.configuration.app_configuration import DEFAULT_COMMAND_KEYWORDS
from kozeki.configuration.moderation_settings import DEFAULT_DURATION_TOKEN, DEFAULT_REASON, DURATION_TOKEN_PATTERN
from kozeki.datatypes.action_datatypes import ActionType, CommandInvocation
from kozeki.util.discord_utils import parse_user_mention

DEFAULT_DURATION_MS = 10 * 60 * 1000

UNIT_FACTORS_MS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
}

DIGITS_PATTERN = re.compile(r"\d+")


def parse_duration(token: str | None) -> int:
    """
    Convert a ``<integer><unit>`` token into milliseconds.

    Args:
        token (str | None): Token such as ``"30s"``, ``"10m"`` or ``"2w"``.

    Returns:
        int: Duration in milliseconds. Missing, empty or unparseable tokens
        yield the ten minute default. No upper bound is applied here.
    """
    if not token:
        return DEFAULT_DURATION_MS

    factor = UNIT_FACTORS_MS.get(token[-1])
    if factor is None:
        return DEFAULT_DURATION_MS

    try:
        value = int(token[:-1])
    except ValueError:
        return DEFAULT_DURATION_MS

    return value * factor


def is_duration_token(token: str) -> bool:
    """Return True if ``token`` is a digits-plus-single-unit duration."""
    return bool(DURATION_TOKEN_PATTERN.match(token))


def build_keyword_table(keywords: Mapping[str, str] | None = None) -> dict[str, ActionType]:
    """Map each chat keyword to its ActionType.

    Args:
        keywords: Action name to keyword mapping, as returned by
            ``AppConfig.command_keywords``. Defaults to the built-in keywords.
    """
    keywords = keywords or DEFAULT_COMMAND_KEYWORDS
    return {keyword.lower(): ActionType(action_name) for action_name, keyword in keywords.items()}


DEFAULT_KEYWORD_TABLE = build_keyword_table()


def _find_mention(tokens: list[str]) -> tuple[int | None, int]:
    """Return the first user mention in ``tokens`` and its index (or ``(None, -1)``)."""
    for index, token in enumerate(tokens):
        user_id = parse_user_mention(token)
        if user_id is not None:
            return user_id, index
    return None, -1


def _extract_unban_target(tokens: list[str]) -> int | None:
    """Resolve the unban target: a mention, else digits embedded in the first argument."""
    user_id, _ = _find_mention(tokens)
    if user_id is not None:
        return user_id
    if not tokens:
        return None
    match = DIGITS_PATTERN.search(tokens[0])
    return int(match.group(0)) if match else None


def parse_command(
    content: str,
    keyword_table: Mapping[str, ActionType] | None = None,
    *,
    default_duration: str = DEFAULT_DURATION_TOKEN,
    default_reason: str = DEFAULT_REASON,
) -> CommandInvocation | None:
    """
    Parse a raw message into a command invocation.

    Args:
        content (str): Raw message text.
        keyword_table (Mapping[str, ActionType] | None): Keyword lookup, see
            :func:`build_keyword_table`.
        default_duration (str): Duration token used when a mute gives none.
        default_reason (str): Reason used when a mute or ban gives none.

    Returns:
        CommandInvocation | None: None when the first word is not a command
        keyword. A recognized command without a resolvable target comes back
        with ``target_id=None``.
    """
    tokens = content.split()
    if not tokens:
        return None

    keyword = tokens[0].lower()
    action = (keyword_table or DEFAULT_KEYWORD_TABLE).get(keyword)
    if action is None:
        return None

    arguments = tokens[1:]

    if action is ActionType.UNBAN:
        return CommandInvocation(action=action, keyword=keyword, target_id=_extract_unban_target(arguments))

    target_id, target_index = _find_mention(arguments)
    if target_id is None:
        return CommandInvocation(action=action, keyword=keyword)

    rest = arguments[target_index + 1:]

    if action is ActionType.MUTE:
        if rest and is_duration_token(rest[0]):
            duration, rest = rest[0], rest[1:]
        else:
            duration = default_duration
        return CommandInvocation(
            action=action,
            keyword=keyword,
            target_id=target_id,
            duration=duration,
            reason=" ".join(rest) or default_reason,
        )

    if action is ActionType.BAN:
        return CommandInvocation(
            action=action,
            keyword=keyword,
            target_id=target_id,
            reason=" ".join(rest) or default_reason,
        )

    return CommandInvocation(action=action, keyword=keyword, target_id=target_id)
