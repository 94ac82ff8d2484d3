"""
Pytest configuration and fixtures for Kozeki tests.
"""

import datetime
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from kozeki.configuration.moderation_settings import ModerationSettings  # noqa: E402
from kozeki.datatypes.command_datatypes import CommandContext  # noqa: E402

NOW = datetime.datetime.now(datetime.timezone.utc)


def make_permissions(**granted):
    names = ("moderate_members", "administrator", "ban_members", "kick_members", "view_audit_log")
    return SimpleNamespace(**{name: granted.get(name, False) for name in names})


def make_member(member_id, *, position=1, bot=False, created_days_ago=400, joined_days_ago=100, **granted):
    """Build a stand-in for discord.Member with async moderation methods."""
    return SimpleNamespace(
        id=member_id,
        mention=f"<@{member_id}>",
        name=f"user{member_id}",
        bot=bot,
        top_role=SimpleNamespace(position=position),
        guild_permissions=make_permissions(**granted),
        created_at=NOW - datetime.timedelta(days=created_days_ago),
        joined_at=NOW - datetime.timedelta(days=joined_days_ago) if joined_days_ago is not None else None,
        timeout_for=AsyncMock(),
        remove_timeout=AsyncMock(),
    )


def make_guild(bot_member, members=(), audit_entries=None, guild_id=1):
    """Build a stand-in for discord.Guild.

    ``audit_entries`` maps an AuditLogAction to the entries its page returns.
    """
    by_id = {member.id: member for member in members}
    audit_entries = audit_entries or {}
    audit_calls = []

    def audit_logs(*, limit=100, action=None):
        audit_calls.append((action, limit))

        async def pages():
            for entry in audit_entries.get(action, []):
                yield entry

        return pages()

    return SimpleNamespace(
        id=guild_id,
        name="Test Guild",
        me=bot_member,
        ban=AsyncMock(),
        unban=AsyncMock(),
        get_member=by_id.get,
        audit_logs=audit_logs,
        audit_calls=audit_calls,
    )


def make_message(content, author, guild, mentions=()):
    sent = []

    async def send(content=None, **kwargs):
        reply = SimpleNamespace(content=content, kwargs=kwargs, edit=AsyncMock())
        sent.append(reply)
        return reply

    channel = SimpleNamespace(id=55, send=AsyncMock(side_effect=send), sent=sent)
    return SimpleNamespace(
        content=content,
        author=author,
        guild=guild,
        channel=channel,
        mentions=list(mentions),
    )


@pytest.fixture
def moderator():
    return make_member(10, position=5, moderate_members=True)


@pytest.fixture
def bot_member():
    return make_member(
        999,
        position=10,
        bot=True,
        moderate_members=True,
        ban_members=True,
        view_audit_log=True,
    )


@pytest.fixture
def target():
    return make_member(123, position=2)


@pytest.fixture
def mod_log():
    return SimpleNamespace(post=AsyncMock(return_value=True))


@pytest.fixture
def build_context(mod_log):
    def factory(message, settings=None):
        return CommandContext(
            message=message,
            guild=message.guild,
            bot_member=message.guild.me,
            mod_log=mod_log,
            settings=settings or ModerationSettings(),
        )

    return factory
