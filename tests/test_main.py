import os
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from kozeki import main


@pytest.fixture(autouse=True)
def _restore_env(monkeypatch):
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def test_resolve_base_dir_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("KOZEKI_HOME", str(tmp_path))

    assert main.resolve_base_dir() == tmp_path.resolve()


def test_resolve_base_dir_source(monkeypatch):
    monkeypatch.delenv("KOZEKI_HOME", raising=False)
    monkeypatch.setattr(sys, "frozen", False, raising=False)
    monkeypatch.setattr(sys, "compiled", False, raising=False)

    assert main.resolve_base_dir() == main.Path(main.__file__).resolve().parents[2]


def test_load_environment_returns_token(monkeypatch):
    monkeypatch.setattr(main, "load_dotenv", lambda **kwargs: False)
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "abc")

    assert main.load_environment() == "abc"


def test_load_environment_exits_without_token(monkeypatch):
    monkeypatch.setattr(main, "load_dotenv", lambda **kwargs: False)
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        main.load_environment()

    assert exc_info.value.code == 1


@pytest.mark.parametrize("raw,expected", [("123456", 123456), (" 42 ", 42), ("", None), ("#mod-log", None)])
def test_read_mod_log_channel_id(monkeypatch, raw, expected):
    monkeypatch.setenv("MOD_LOG_CHANNEL_ID", raw)

    assert main.read_mod_log_channel_id() == expected


def test_build_intents_enables_required_flags():
    intents = main.build_intents()

    assert intents.message_content
    assert intents.guilds
    assert intents.messages
    assert intents.members
    assert intents.bans


def test_load_cogs_registers_every_cog():
    added = []
    fake_bot = SimpleNamespace(add_cog=added.append)

    main.load_cogs(fake_bot, SimpleNamespace(post=AsyncMock()))

    assert sorted(type(cog).__name__ for cog in added) == [
        "CommandListenerCog",
        "EventsListenerCog",
        "InfoCog",
    ]


@pytest.mark.asyncio
async def test_shutdown_runtime_closes_open_bot():
    bot = SimpleNamespace(is_closed=lambda: False, close=AsyncMock())

    await main.shutdown_runtime(bot)

    bot.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_shutdown_runtime_skips_closed_bot():
    bot = SimpleNamespace(is_closed=lambda: True, close=AsyncMock())

    await main.shutdown_runtime(bot)

    bot.close.assert_not_awaited()


@pytest.mark.asyncio
async def test_async_main_reports_login_failure(monkeypatch):
    bot = SimpleNamespace(is_closed=lambda: False, close=AsyncMock())
    monkeypatch.setattr(main, "load_environment", lambda: "token")
    monkeypatch.setattr(main, "read_mod_log_channel_id", lambda: None)
    monkeypatch.setattr(main, "create_bot", lambda channel_id: bot)
    monkeypatch.setattr(main, "start_bot", AsyncMock(side_effect=discord.LoginFailure("bad token")))

    assert await main.async_main() == 1
    bot.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_main_returns_zero_after_clean_run(monkeypatch):
    bot = SimpleNamespace(is_closed=lambda: True, close=AsyncMock())
    start = AsyncMock()
    monkeypatch.setattr(main, "load_environment", lambda: "token")
    monkeypatch.setattr(main, "read_mod_log_channel_id", lambda: 77)
    monkeypatch.setattr(main, "create_bot", lambda channel_id: bot)
    monkeypatch.setattr(main, "start_bot", start)

    assert await main.async_main() == 0
    start.assert_awaited_once_with(bot, "token")


@pytest.mark.asyncio
async def test_async_main_fails_when_bot_cannot_be_created(monkeypatch):
    monkeypatch.setattr(main, "load_environment", lambda: "token")
    monkeypatch.setattr(main, "read_mod_log_channel_id", lambda: None)

    def broken(channel_id):
        raise RuntimeError("no intents")

    monkeypatch.setattr(main, "create_bot", broken)

    assert await main.async_main() == 1
