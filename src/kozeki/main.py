"""
Kozeki Discord Moderation Assistant
===================================

A Discord bot that lets server moderators time out, un-timeout, ban, unban and
look up users with short chat commands, posting each action to a mod-log
channel.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. KOZEKI_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("KOZEKI_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from kozeki.moderation.mod_log import ModLogSink
from kozeki.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def read_mod_log_channel_id() -> int | None:
    """Return the mod-log channel id from ``MOD_LOG_CHANNEL_ID``, or None.

    A missing or non-numeric value only disables mod-log posts.
    """
    raw_value = os.getenv("MOD_LOG_CHANNEL_ID", "").strip()
    if not raw_value:
        logger.warning("'MOD_LOG_CHANNEL_ID' not set; moderation actions will not be logged to a channel.")
        return None
    try:
        return int(raw_value)
    except ValueError:
        logger.warning("'MOD_LOG_CHANNEL_ID' is not a numeric id (%r); mod-log posts are disabled.", raw_value)
        return None


def build_intents() -> discord.Intents:
    """Construct the Discord intents required for Kozeki runtime features.

    Returns
    -------
    discord.Intents
        Intents enabling guild, member, message content and ban events.
    """
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    intents.bans = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, mod_log: ModLogSink) -> None:
    """Register all operational cogs with the provided Discord bot instance.

    Parameters
    ----------
    discord_bot_instance:
        Py-Cord bot object that should receive the Kozeki cogs.
    mod_log:
        Mod-log sink shared by the command handlers.
    """
    from kozeki.bot.cogs import command_listener, events_listener, info_cmds

    events_listener.setup(discord_bot_instance)
    command_listener.setup(discord_bot_instance, mod_log)
    info_cmds.setup(discord_bot_instance)

    logger.info("All cogs loaded successfully.")


def create_bot(mod_log_channel_id: int | None = None) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, ModLogSink(bot, mod_log_channel_id))
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and handle lifecycle logging around the connection.

    Parameters
    ----------
    bot:
        Discord client to start.
    token:
        Authentication token used to connect to Discord.
    """
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None) -> None:
    """Close the Discord connection if it is still open."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the bot and run it until disconnect, returning an exit code."""
    token = load_environment()
    mod_log_channel_id = read_mod_log_channel_id()

    try:
        bot = create_bot(mod_log_channel_id)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process code."""
    logger.info("Starting Kozeki…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
