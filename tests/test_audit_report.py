import datetime
from types import SimpleNamespace

import discord
import pytest

from conftest import NOW, make_guild, make_member, make_message
from kozeki.configuration.moderation_settings import ModerationSettings
from kozeki.datatypes.action_datatypes import ActionOutcome, ActionType, CommandInvocation
from kozeki.moderation import audit_report


def entry(target_id, *, actor_id=10, reason=None, before=None, after=None, hours_ago=1):
    return SimpleNamespace(
        target=SimpleNamespace(id=target_id),
        user=SimpleNamespace(mention=f"<@{actor_id}>"),
        reason=reason,
        created_at=NOW - datetime.timedelta(hours=hours_ago),
        changes=SimpleNamespace(before=before or SimpleNamespace(), after=after or SimpleNamespace()),
    )


def timeout_entry(target_id, until, **kwargs):
    return entry(
        target_id,
        before=SimpleNamespace(communication_disabled_until=None),
        after=SimpleNamespace(communication_disabled_until=until),
        **kwargs,
    )


def info(target_id=123):
    return CommandInvocation(ActionType.INFO, "ki", target_id)


def test_has_timeout_change_distinguishes_timeouts_from_other_updates():
    assert audit_report.has_timeout_change(timeout_entry(1, NOW)) is True
    assert audit_report.has_timeout_change(timeout_entry(1, None)) is True
    nick_change = entry(1, before=SimpleNamespace(nick="a"), after=SimpleNamespace(nick="b"))
    assert audit_report.has_timeout_change(nick_change) is False
    assert audit_report.has_timeout_change(SimpleNamespace(changes=None)) is False


def test_filter_entries_keeps_only_target_in_original_order():
    entries = [
        entry(123, reason="newest", hours_ago=1),
        entry(999, reason="someone else", hours_ago=2),
        entry(123, reason=None, hours_ago=3),
        SimpleNamespace(target=None, user=None, reason=None, created_at=NOW, changes=None),
    ]

    history = audit_report.filter_entries(entries, 123)

    assert [item.detail for item in history] == ["newest", "No reason provided"]
    assert all(item.target_id == 123 for item in history)
    assert history[0].actor_mention == "<@10>"


def test_filter_entries_timeouts_only():
    until = NOW + datetime.timedelta(hours=1)
    entries = [
        timeout_entry(123, until, reason="spam"),
        entry(123, before=SimpleNamespace(nick="a"), after=SimpleNamespace(nick="b")),
        timeout_entry(123, None),
    ]

    history = audit_report.filter_entries(entries, 123, audit_report._timeout_detail, timeouts_only=True)

    assert len(history) == 2
    assert history[0].detail.startswith("Timed out until")
    assert history[0].detail.endswith("(spam)")
    assert history[1].detail == "Timeout removed"


@pytest.mark.asyncio
async def test_fetch_moderation_history_reads_one_page_per_event_type(bot_member):
    until = NOW + datetime.timedelta(minutes=10)
    guild = make_guild(
        bot_member,
        audit_entries={
            discord.AuditLogAction.ban: [entry(123, reason="raid"), entry(5)],
            discord.AuditLogAction.unban: [entry(123)],
            discord.AuditLogAction.member_update: [
                timeout_entry(123, until),
                entry(123, before=SimpleNamespace(roles=[]), after=SimpleNamespace(roles=[1])),
            ],
        },
    )

    history = await audit_report.fetch_moderation_history(guild, 123, 100)

    assert [item.detail for item in history["Bans"]] == ["raid"]
    assert [item.detail for item in history["Unbans"]] == ["Unbanned"]
    assert len(history["Timeouts"]) == 1
    assert guild.audit_calls == [
        (discord.AuditLogAction.ban, 100),
        (discord.AuditLogAction.unban, 100),
        (discord.AuditLogAction.member_update, 100),
    ]


@pytest.mark.asyncio
async def test_info_edits_placeholder_with_report_and_logs(build_context, mod_log, moderator, bot_member):
    target = make_member(123, created_days_ago=5, joined_days_ago=2)
    guild = make_guild(bot_member, [target], audit_entries={discord.AuditLogAction.ban: [entry(123, reason="raid")]})
    message = make_message("ki <@123>", moderator, guild, [target])

    outcome = await audit_report.handle_info(build_context(message), info())

    assert outcome is ActionOutcome.SUCCEEDED
    placeholder = message.channel.sent[0]
    assert placeholder.content.startswith("🔍 Looking up <@123>")
    placeholder.edit.assert_awaited_once()
    embed = placeholder.edit.await_args.kwargs["embed"]
    fields = {field.name: field.value for field in embed.fields}
    assert fields["Suspicious"].startswith("⚠️ Yes")
    assert "(5 days ago)" in fields["Account Created"]
    assert "(2 days ago)" in fields["Joined Server"]
    assert "raid" in fields["Bans (1)"]
    assert fields["Unbans (0)"] == "None"
    assert fields["Timeouts (0)"] == "None"
    assert mod_log.post.await_args.args[1].action is ActionType.INFO


@pytest.mark.asyncio
async def test_info_account_at_threshold_is_not_suspicious(build_context, moderator, bot_member):
    target = make_member(123, created_days_ago=30)
    guild = make_guild(bot_member, [target])
    message = make_message("ki <@123>", moderator, guild, [target])

    await audit_report.handle_info(build_context(message), info())

    embed = message.channel.sent[0].edit.await_args.kwargs["embed"]
    fields = {field.name: field.value for field in embed.fields}
    assert fields["Suspicious"] == "✅ No"


@pytest.mark.asyncio
async def test_info_threshold_comes_from_settings(build_context, moderator, bot_member):
    target = make_member(123, created_days_ago=45)
    guild = make_guild(bot_member, [target])
    message = make_message("ki <@123>", moderator, guild, [target])

    await audit_report.handle_info(
        build_context(message, ModerationSettings({"suspicious_account_days": 60})), info()
    )

    embed = message.channel.sent[0].edit.await_args.kwargs["embed"]
    assert {field.name: field.value for field in embed.fields}["Suspicious"].startswith("⚠️")


@pytest.mark.asyncio
async def test_info_for_user_who_left_shows_not_a_member(build_context, moderator, bot_member):
    former_member = SimpleNamespace(id=321, mention="<@321>", created_at=NOW - datetime.timedelta(days=900))
    guild = make_guild(bot_member, [])
    message = make_message("ki <@321>", moderator, guild, [former_member])

    outcome = await audit_report.handle_info(build_context(message), info(321))

    assert outcome is ActionOutcome.SUCCEEDED
    embed = message.channel.sent[0].edit.await_args.kwargs["embed"]
    assert {field.name: field.value for field in embed.fields}["Joined Server"] == "Not a member"


@pytest.mark.asyncio
async def test_info_requires_view_audit_log(build_context, mod_log, moderator, target):
    bot_member = make_member(999, position=10, moderate_members=True, ban_members=True)
    guild = make_guild(bot_member, [target])
    message = make_message("ki <@123>", moderator, guild, [target])

    outcome = await audit_report.handle_info(build_context(message), info())

    assert outcome is ActionOutcome.DENIED_BOT_CAPABILITY
    assert message.channel.sent[0].content == "I don't have permission to view the audit log."
    assert guild.audit_calls == []
    mod_log.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_info_audit_failure_replaces_placeholder(build_context, mod_log, moderator, bot_member, target):
    guild = make_guild(bot_member, [target])

    def broken_audit_logs(**kwargs):
        raise RuntimeError("Missing Access")

    guild.audit_logs = broken_audit_logs
    message = make_message("ki <@123>", moderator, guild, [target])

    outcome = await audit_report.handle_info(build_context(message), info())

    assert outcome is ActionOutcome.API_FAILURE
    message.channel.sent[0].edit.assert_awaited_once_with(content=audit_report.LOOKUP_FAILED_MESSAGE, embed=None)
    mod_log.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_info_without_target_is_silent(build_context, moderator, bot_member):
    guild = make_guild(bot_member, [])
    message = make_message("ki", moderator, guild)

    outcome = await audit_report.handle_info(build_context(message), info(None))

    assert outcome is ActionOutcome.NO_TARGET
    message.channel.send.assert_not_awaited()
