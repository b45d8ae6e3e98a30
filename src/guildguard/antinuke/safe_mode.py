"""
Safe-mode state machine.

A guild is either in Normal mode or in SafeMode; the state is the
``nukemode`` flag of its configuration. Entering SafeMode strips destructive
permissions from every editable non-administrator role and puts editable text
channels in slow-mode. Leaving SafeMode only clears the flag; stripped
permissions must be restored by the guild's administrators.
"""

from __future__ import annotations

from typing import Optional

import discord

from guildguard import constants
from guildguard.datatypes.action_datatypes import ActionData, ActionType
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.settings.config_store import ConfigStore
from guildguard.ui import embeds
from guildguard.util.discord_gateway import DESTRUCTIVE_CAPABILITIES, PlatformGateway, role_has_administrator
from guildguard.util.logger import get_logger

logger = get_logger("safe_mode")


class SafeModeController:
    """
    Drives the Normal/SafeMode transitions of each guild.

    Args:
        config_store: Holder of the ``nukemode`` flag
        gateway: Discord operations used for the lockdown sweep
        modlog: Optional sink that receives a report of each transition
        slowmode_seconds: Slow-mode applied to channels on activation
    """

    def __init__(
        self,
        config_store: ConfigStore,
        gateway: PlatformGateway,
        modlog=None,
        slowmode_seconds: int = constants.SAFE_MODE_SLOWMODE_SECONDS,
    ):
        self._config_store = config_store
        self._gateway = gateway
        self._modlog = modlog
        self.slowmode_seconds = slowmode_seconds

    def is_active(self, guild_id: GuildID) -> bool:
        return self._config_store.peek(guild_id).nukemode

    async def activate(self, guild: discord.Guild, reason: Optional[str] = None) -> bool:
        """
        Enter SafeMode and run the lockdown sweep.

        Returns:
            False if the guild was already in SafeMode, True otherwise.
        """
        guild_id = GuildID.from_object(guild)

        # The flag flips before the first suspension point, so a concurrent
        # activation sees SafeMode and returns immediately
        if not await self._config_store.set_nukemode(guild_id, True):
            logger.debug("[SAFE MODE] Guild %s already in safe mode", guild_id)
            return False

        roles_locked = 0
        for role in self._gateway.list_editable_roles(guild):
            if role_has_administrator(role):
                continue
            if await self._gateway.strip_permissions(role, DESTRUCTIVE_CAPABILITIES):
                roles_locked += 1

        logger.warning("[SAFE MODE] Activated safe mode for guild %s, roles locked: %d", guild_id, roles_locked)

        channels_throttled = 0
        for channel in self._gateway.list_editable_text_channels(guild):
            if await self._gateway.set_channel_slowmode(channel, self.slowmode_seconds):
                channels_throttled += 1

        await self._report(
            guild,
            embeds.safe_mode_embed(
                True,
                roles_locked=roles_locked,
                channels_throttled=channels_throttled,
                reason=reason or "Safe mode activated",
            ),
            ActionData(guild_id, ActionType.SAFE_MODE_ON, reason or "Safe mode activated"),
        )
        return True

    async def deactivate(self, guild: discord.Guild, reason: Optional[str] = None) -> bool:
        """
        Leave SafeMode. Permissions stripped on activation are not restored.

        Returns:
            False if the guild was not in SafeMode, True otherwise.
        """
        guild_id = GuildID.from_object(guild)
        if not await self._config_store.set_nukemode(guild_id, False):
            logger.debug("[SAFE MODE] Guild %s is not in safe mode", guild_id)
            return False

        logger.info("[SAFE MODE] Deactivated safe mode for guild %s", guild_id)

        await self._report(
            guild,
            embeds.safe_mode_embed(False, reason=reason or "Safe mode deactivated"),
            ActionData(guild_id, ActionType.SAFE_MODE_OFF, reason or "Safe mode deactivated"),
        )
        return True

    async def _report(self, guild: discord.Guild, embed: discord.Embed, action: ActionData) -> None:
        if self._modlog is not None:
            await self._modlog.log(guild, embed, action=action)
