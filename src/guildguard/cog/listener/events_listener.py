"""Event listener Cog for Guildguard.

Handles bot lifecycle events (on_ready, on_guild_join, on_guild_remove) and
feeds destructive guild events (channel deletions, role deletions, bans) to
the anti-nuke detector.
"""

import discord
from discord.ext import commands

from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.datatypes.event_datatypes import DestructiveEventKind
from guildguard.engine import GuildSafetyEngine
from guildguard.util.logger import get_logger

logger = get_logger("events_listener")


class EventsListenerCog(commands.Cog):
    """Handles lifecycle and destructive guild events."""

    def __init__(self, bot: discord.Bot, engine: GuildSafetyEngine) -> None:
        self.bot = bot
        self.engine = engine
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self) -> None:
        if not self.bot.user:
            logger.warning("[EVENTS LISTENER] Bot partially connected, user info not yet available.")
            return

        await self.bot.change_presence(
            status=discord.Status.online,
            activity=discord.Activity(type=discord.ActivityType.watching, name="for nukes and spam"),
        )
        logger.info("Bot connected as %s (ID: %s) in %d guilds", self.bot.user, self.bot.user.id, len(self.bot.guilds))

    @commands.Cog.listener(name="on_guild_join")
    async def on_guild_join(self, guild: discord.Guild) -> None:
        """Create and persist the default configuration for a new guild."""
        config = await self.engine.config_store.get(GuildID(guild.id))
        logger.info(
            "[EVENTS LISTENER] Initialized config for guild '%s' (ID: %s), prefix %s",
            guild.name, guild.id, config.prefix,
        )

    @commands.Cog.listener(name="on_guild_remove")
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        """Forget everything about a guild the bot has left."""
        logger.debug("[EVENTS LISTENER] Bot removed from guild: %s (ID: %s)", guild.name, guild.id)
        try:
            await self.engine.forget_guild(GuildID(guild.id))
        except Exception:
            logger.exception("[EVENTS LISTENER] Failed to clean up guild %s", guild.id)

    # ------------------------------------------------------------------
    # Destructive events
    # ------------------------------------------------------------------

    @commands.Cog.listener(name="on_guild_channel_delete")
    async def on_guild_channel_delete(self, channel: discord.abc.GuildChannel) -> None:
        await self._record(channel.guild, DestructiveEventKind.CHANNEL_DELETE)

    @commands.Cog.listener(name="on_guild_role_delete")
    async def on_guild_role_delete(self, role: discord.Role) -> None:
        await self._record(role.guild, DestructiveEventKind.ROLE_DELETE)

    @commands.Cog.listener(name="on_member_ban")
    async def on_member_ban(self, guild: discord.Guild, user: discord.User | discord.Member) -> None:
        await self._record(guild, DestructiveEventKind.BAN)

    async def _record(self, guild: discord.Guild | None, kind: DestructiveEventKind) -> None:
        if guild is None:
            return
        try:
            await self.engine.detector.on_destructive_event(guild, kind)
        except Exception:
            logger.exception("[EVENTS LISTENER] Anti-nuke check failed for %s in guild %s", kind, guild.id)


def setup(bot: discord.Bot, engine: GuildSafetyEngine) -> None:
    """Register the EventsListenerCog with the bot."""
    bot.add_cog(EventsListenerCog(bot, engine))
