"""
Guildguard
==========

A Discord bot that protects guilds from nuke attempts, spam, unsafe links and
banned vocabulary, and keeps a simple XP leveling system.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. GUILDGUARD_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("GUILDGUARD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from guildguard.engine import GuildSafetyEngine
from guildguard.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

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


def build_intents() -> discord.Intents:
    """Construct the intents the engine needs.

    Message content feeds automod, members and bans feed the anti-nuke
    detector and timeouts.
    """
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    intents.bans = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, engine: GuildSafetyEngine) -> None:
    """Register all operational cogs, sharing one engine between them."""
    from guildguard.cog.commands import settings_cmds
    from guildguard.cog.listener import events_listener, message_listener

    events_listener.setup(discord_bot_instance, engine)
    message_listener.setup(discord_bot_instance, engine)
    settings_cmds.setup(discord_bot_instance, engine)

    logger.info("All cogs loaded successfully.")


def create_bot(engine: GuildSafetyEngine) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, engine)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and log around the connection."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, engine: GuildSafetyEngine) -> None:
    """Gracefully stop the Discord bot and the engine."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    try:
        await engine.shutdown()
    except Exception as exc:
        logger.exception("Error during engine shutdown: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the engine and the bot, returning an exit code."""
    token = load_environment()

    engine = GuildSafetyEngine.from_config()
    try:
        logger.info("Initializing database and loading guild configuration...")
        await engine.start()
    except Exception as exc:
        logger.critical("Failed to initialize the safety engine: %s", exc)
        return 1

    try:
        bot = create_bot(engine)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await shutdown_runtime(None, engine)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, engine)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting Guildguard…")
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
    sys.exit(main())
