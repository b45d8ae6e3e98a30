"""Message listener Cog for Guildguard.

Runs every guild message through the automod pipeline, then grants leveling
XP for messages that were allowed.
"""

import discord
from discord.ext import commands

from guildguard.datatypes.discord_datatypes import GuildID, UserID
from guildguard.engine import GuildSafetyEngine
from guildguard.ui import embeds
from guildguard.util.logger import get_logger

logger = get_logger("message_listener_cog")


class MessageListenerCog(commands.Cog):
    """Thin event listener that forwards messages to automod and leveling."""

    def __init__(self, bot: discord.Bot, engine: GuildSafetyEngine) -> None:
        self.bot = bot
        self.engine = engine
        logger.info("[MESSAGE LISTENER] Message listener cog loaded")

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or message.guild is None:
            return

        try:
            decision = await self.engine.automod.on_message(message)
            if decision.allowed:
                await self._award_xp(message)
        except Exception:
            logger.exception("[MESSAGE LISTENER] Failed to process message %s", message.id)

    async def _award_xp(self, message: discord.Message) -> None:
        guild_id = GuildID.from_object(message.guild)
        config = await self.engine.config_store.get(guild_id)
        if not config.leveling_enabled:
            return

        result = await self.engine.leveling.award(guild_id, UserID.from_object(message.author))
        if result is not None:
            await self.engine.gateway.send_embed(
                message.channel, embeds.level_up_embed(message.author.mention, result.level)
            )


def setup(bot: discord.Bot, engine: GuildSafetyEngine) -> None:
    """Register the MessageListenerCog with the bot."""
    bot.add_cog(MessageListenerCog(bot, engine))
