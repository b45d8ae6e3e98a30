"""
Construction and lifecycle of the guild safety engine.

Every stateful service is built exactly once per process here and handed to
the cogs by reference, so all event handlers share the same configuration
store, event windows and spam counters.
"""

from __future__ import annotations

from typing import Optional

from guildguard.antinuke.detector import AntiNukeDetector
from guildguard.antinuke.event_window import EventWindow
from guildguard.antinuke.safe_mode import SafeModeController
from guildguard.automod.pipeline import AutomodPipeline
from guildguard.automod.spam_tracker import SpamTracker
from guildguard.configuration.app_configuration import AppConfig, app_config
from guildguard.database.database import Database
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.leveling.level_repository import LevelRepository
from guildguard.leveling.leveling_service import LevelingService
from guildguard.services.modlog import ModerationLogSink
from guildguard.settings.config_store import ConfigStore
from guildguard.util.discord_gateway import DiscordGateway, PlatformGateway
from guildguard.util.logger import get_logger

logger = get_logger("engine")


class GuildSafetyEngine:
    """
    Owns the engine's services.

    Args:
        config: Application configuration; the process-wide one by default
        gateway: Discord operations; the py-cord gateway by default
        database: SQLite coordinator; None keeps everything in memory
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        gateway: Optional[PlatformGateway] = None,
        database: Optional[Database] = None,
    ):
        self.config = config or app_config
        self.gateway = gateway or DiscordGateway()
        self.database = database

        self.config_store = ConfigStore(database)
        self.modlog = ModerationLogSink(self.config_store, self.gateway, database)
        self.safe_mode = SafeModeController(
            self.config_store,
            self.gateway,
            modlog=self.modlog,
            slowmode_seconds=self.config.safe_mode_slowmode_seconds,
        )
        self.detector = AntiNukeDetector(
            self.safe_mode,
            window=EventWindow(self.config.antinuke_window_ms),
            thresholds=self.config.antinuke_thresholds,
        )
        self.automod = AutomodPipeline(
            self.config_store,
            self.gateway,
            spam_tracker=SpamTracker(),
            modlog=self.modlog,
            safe_domains=self.config.safe_domains,
            spam_timeout_ms=self.config.spam_timeout_ms,
            warning_ttl_seconds=self.config.transient_warning_seconds,
        )
        self.leveling = LevelingService(
            LevelRepository(database) if database is not None else None,
            cooldown_seconds=self.config.xp_cooldown_seconds,
        )

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "GuildSafetyEngine":
        """Build an engine persisting to the configured database path."""
        config = config or app_config
        return cls(config=config, database=Database(config.database_path))

    async def start(self) -> None:
        """Open the database and load stored guild configuration."""
        await self.config_store.async_init()
        logger.info("[ENGINE] Guild safety engine started")

    async def forget_guild(self, guild_id: GuildID) -> None:
        """Drop all configuration, stored rows and in-memory state held for a guild."""
        guild_id = GuildID(guild_id)
        await self.config_store.drop(guild_id)
        self.detector.window.clear(guild_id)
        self.automod.spam_tracker.clear_guild(guild_id)
        self.leveling.forget_guild(guild_id)
        if self.database is not None and self.database.initialized:
            await self.database.delete_guild_data(guild_id)
        logger.info("[ENGINE] Cleaned state for departed guild %s", guild_id)

    async def shutdown(self) -> None:
        await self.config_store.shutdown()
        logger.info("[ENGINE] Shutdown complete")
