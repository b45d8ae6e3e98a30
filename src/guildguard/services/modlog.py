"""
Moderation log sink.

Posts an embed for every action the engine takes to the guild's configured
mod-log channel and, when given an :class:`ActionData`, appends a row to the
``moderation_actions`` audit table. Logging is best effort and never raises
into the caller.
"""

from __future__ import annotations

from typing import Optional

import discord

from guildguard import constants
from guildguard.database.database import Database
from guildguard.datatypes.action_datatypes import ActionData
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.settings.config_store import ConfigStore
from guildguard.util.discord_gateway import PlatformGateway
from guildguard.util.logger import get_logger

logger = get_logger("modlog")


class ModerationLogSink:
    """Delivers action reports to a guild's mod-log channel."""

    def __init__(self, config_store: ConfigStore, gateway: PlatformGateway, database: Optional[Database] = None):
        self._config_store = config_store
        self._gateway = gateway
        self._database = database

    async def log(self, guild: discord.Guild, embed: discord.Embed, *, action: Optional[ActionData] = None) -> bool:
        """
        Report an action.

        If the guild has no mod-log channel nothing is posted. If the
        configured channel no longer resolves to a text channel the setting is
        cleared.

        Returns:
            True if the embed was posted.
        """
        guild_id = GuildID.from_object(guild)

        if action is not None and self._database is not None and self._database.initialized:
            await self._database.log_moderation_action(action)

        try:
            channel_id = (await self._config_store.get(guild_id)).mod_log_channel
            if channel_id is None:
                return False

            channel = self._gateway.resolve_text_channel(guild, channel_id)
            if channel is None:
                logger.info(
                    "[MODLOG] Mod-log channel %s in guild %s is gone; clearing setting",
                    channel_id, guild_id,
                )
                await self._config_store.set_mod_log_channel(guild_id, None)
                return False

            embed.colour = constants.EMBED_COLOR_MOD
            return await self._gateway.send_embed(channel, embed)
        except Exception:
            logger.exception("[MODLOG] Failed to log moderation action for guild %s", guild_id)
            return False
