"""
Settings cog: guild-scoped safety configuration.

Every command maps onto a ConfigStore writer or a safe-mode transition:
- /antilink, /antispam set|toggle, /wordfilter add|remove|list|toggle
- /modlog set|clear|history, /prefix, /leveling
- /nukemode on|off|status (Administrator only)
- /xp, /leaderboard (anyone)

Configuration changes require the Manage Server permission. Replies are
ephemeral so configuration does not leak into public channels.
"""

import discord
from discord import Option
from discord.ext import commands

from guildguard import constants
from guildguard.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from guildguard.engine import GuildSafetyEngine
from guildguard.leveling.progression import total_xp, xp_for_level
from guildguard.ui import embeds
from guildguard.util.logger import get_logger

logger = get_logger("settings_commands")


def _on_off(enabled: bool) -> str:
    return "enabled" if enabled else "disabled"


class GuildSettingsCog(commands.Cog):
    """Safety settings for a guild."""

    antispam = discord.SlashCommandGroup("antispam", "Configure the anti-spam filter")
    wordfilter = discord.SlashCommandGroup("wordfilter", "Manage the banned words list")
    nukemode = discord.SlashCommandGroup("nukemode", "Control emergency safe mode")
    modlog = discord.SlashCommandGroup("modlog", "Configure the moderation log channel")

    def __init__(self, discord_bot_instance: discord.Bot, engine: GuildSafetyEngine):
        self.discord_bot_instance = discord_bot_instance
        self.engine = engine
        logger.info("[GUILD SETTINGS CMDS] Settings cog loaded")

    @property
    def store(self):
        return self.engine.config_store

    # ------------------------------------------------------------------
    # Permission helpers
    # ------------------------------------------------------------------

    async def _ensure_guild_context(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False
        return True

    async def _check_permissions(self, ctx: discord.ApplicationContext, *, admin: bool = False) -> bool:
        if not await self._ensure_guild_context(ctx):
            return False

        member = ctx.user
        if not isinstance(member, discord.Member):
            allowed = False
        elif admin:
            allowed = member.guild_permissions.administrator
        else:
            allowed = member.guild_permissions.manage_guild

        if not allowed:
            needed = "Administrator" if admin else "Manage Server"
            await ctx.respond(embed=embeds.error_embed("Permission Denied", f"You need {needed} permission."), ephemeral=True)
        return allowed

    # ------------------------------------------------------------------
    # Automod
    # ------------------------------------------------------------------

    @commands.slash_command(name="antilink", description="Block links outside the approved domains")
    async def antilink(self, ctx: discord.ApplicationContext, enabled: Option(bool, "Turn link blocking on or off")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        await self.store.set_antilink(GuildID(ctx.guild_id), enabled)
        await ctx.respond(embed=embeds.success_embed("🔗 Anti-Link", f"Link blocking {_on_off(enabled)}."), ephemeral=True)

    @antispam.command(name="set", description="Set how many messages are allowed within a window")
    async def antispam_set(
        self,
        ctx: discord.ApplicationContext,
        max_messages: Option(int, "Messages allowed inside the window", min_value=1),  # type: ignore
        seconds: Option(int, "Window length in seconds", min_value=1),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return
        await self.store.configure_antispam(GuildID(ctx.guild_id), max_messages, seconds * 1000)
        await ctx.respond(
            embed=embeds.success_embed(
                "🚫 Anti-Spam Updated",
                f"Members sending more than **{max_messages}** messages in **{seconds}s** are timed out.",
            ),
            ephemeral=True,
        )

    @antispam.command(name="toggle", description="Turn the anti-spam filter on or off")
    async def antispam_toggle(self, ctx: discord.ApplicationContext, enabled: Option(bool, "Enable anti-spam")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        await self.store.set_antispam_enabled(GuildID(ctx.guild_id), enabled)
        await ctx.respond(embed=embeds.success_embed("🚫 Anti-Spam", f"Anti-spam {_on_off(enabled)}."), ephemeral=True)

    @wordfilter.command(name="add", description="Add a banned word")
    async def wordfilter_add(self, ctx: discord.ApplicationContext, word: Option(str, "Word or phrase to block")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        if await self.store.add_banned_word(GuildID(ctx.guild_id), word):
            await ctx.respond(embed=embeds.success_embed("🗣️ Word Filter", f"Added `{word.strip().lower()}`."), ephemeral=True)
        else:
            await ctx.respond(embed=embeds.warn_embed("🗣️ Word Filter", "That word is empty or already listed."), ephemeral=True)

    @wordfilter.command(name="remove", description="Remove a banned word")
    async def wordfilter_remove(self, ctx: discord.ApplicationContext, word: Option(str, "Word or phrase to unblock")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        if await self.store.remove_banned_word(GuildID(ctx.guild_id), word):
            await ctx.respond(embed=embeds.success_embed("🗣️ Word Filter", f"Removed `{word.strip().lower()}`."), ephemeral=True)
        else:
            await ctx.respond(embed=embeds.warn_embed("🗣️ Word Filter", "That word is not on the list."), ephemeral=True)

    @wordfilter.command(name="list", description="Show the banned words list")
    async def wordfilter_list(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx):
            return
        wordfilter = (await self.store.get(GuildID(ctx.guild_id))).automod.wordfilter
        words = ", ".join(f"`{w}`" for w in wordfilter.banned_words) or "None"
        await ctx.respond(
            embed=embeds.info_embed(f"🗣️ Word Filter ({_on_off(wordfilter.enabled)})", words[:4000]),
            ephemeral=True,
        )

    @wordfilter.command(name="toggle", description="Turn the word filter on or off")
    async def wordfilter_toggle(self, ctx: discord.ApplicationContext, enabled: Option(bool, "Enable the word filter")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        await self.store.set_wordfilter_enabled(GuildID(ctx.guild_id), enabled)
        await ctx.respond(embed=embeds.success_embed("🗣️ Word Filter", f"Word filter {_on_off(enabled)}."), ephemeral=True)

    # ------------------------------------------------------------------
    # Safe mode
    # ------------------------------------------------------------------

    @nukemode.command(name="on", description="Activate emergency safe mode")
    async def nukemode_on(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx, admin=True):
            return
        await ctx.defer(ephemeral=True)
        activated = await self.engine.safe_mode.activate(ctx.guild, reason=f"Manually activated by {ctx.user}")
        if activated:
            embed = embeds.success_embed(
                "🚨 Nuke Mode Activated",
                "Emergency Safe Mode manually activated. Potentially dangerous permissions have been removed from non-admin roles.",
            )
        else:
            embed = embeds.warn_embed("Nuke Mode", "Nuke Mode is already active.")
        await ctx.send_followup(embed=embed, ephemeral=True)

    @nukemode.command(name="off", description="Deactivate emergency safe mode")
    async def nukemode_off(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx, admin=True):
            return
        deactivated = await self.engine.safe_mode.deactivate(ctx.guild, reason=f"Manually deactivated by {ctx.user}")
        if deactivated:
            embed = embeds.success_embed(
                "✅ Nuke Mode Deactivated",
                "Emergency Safe Mode deactivated. Remember to manually restore any roles if permissions were stripped.",
            )
        else:
            embed = embeds.warn_embed("Nuke Mode", "Nuke Mode is already inactive.")
        await ctx.respond(embed=embed, ephemeral=True)

    @nukemode.command(name="status", description="Show whether safe mode is active")
    async def nukemode_status(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx, admin=True):
            return
        status = "⚠️ ACTIVE" if self.engine.safe_mode.is_active(GuildID(ctx.guild_id)) else "❌ OFF"
        await ctx.respond(
            embed=embeds.info_embed("⚠️ Nuke Mode Status", f"Current Emergency Safe Mode status is: **{status}**."),
            ephemeral=True,
        )

    # ------------------------------------------------------------------
    # General
    # ------------------------------------------------------------------

    @modlog.command(name="set", description="Log moderation actions to a channel")
    async def modlog_set(self, ctx: discord.ApplicationContext, channel: Option(discord.TextChannel, "Log channel")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        await self.store.set_mod_log_channel(GuildID(ctx.guild_id), ChannelID.from_object(channel))
        await ctx.respond(
            embed=embeds.success_embed("✅ Mod Log Channel Set", f"Moderation actions will now be logged in {channel.mention}."),
            ephemeral=True,
        )

    @modlog.command(name="clear", description="Stop logging moderation actions")
    async def modlog_clear(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx):
            return
        await self.store.set_mod_log_channel(GuildID(ctx.guild_id), None)
        await ctx.respond(
            embed=embeds.warn_embed("🚫 Mod Log Channel Disabled", "Moderation logging has been disabled for this guild."),
            ephemeral=True,
        )

    @modlog.command(name="history", description="Show the most recent moderation actions")
    async def modlog_history(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx):
            return
        database = self.engine.database
        rows = []
        if database is not None and database.initialized:
            rows = await database.get_recent_actions(GuildID(ctx.guild_id), limit=constants.MOD_HISTORY_LIMIT)

        if not rows:
            await ctx.respond(embed=embeds.info_embed("📜 Moderation History", "No actions recorded yet."), ephemeral=True)
            return
        await ctx.respond(embed=embeds.mod_history_embed(rows), ephemeral=True)

    @commands.slash_command(name="prefix", description="View or change the server prefix")
    async def prefix(
        self,
        ctx: discord.ApplicationContext,
        new_prefix: Option(str, f"New prefix (max {constants.MAX_PREFIX_LENGTH} characters)", required=False),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return
        guild_id = GuildID(ctx.guild_id)
        if not new_prefix:
            current = (await self.store.get(guild_id)).prefix
            await ctx.respond(embed=embeds.info_embed("⚙️ Current Prefix", f"The current prefix is: `{current}`."), ephemeral=True)
            return

        try:
            await self.store.set_prefix(guild_id, new_prefix)
        except ValueError:
            await ctx.respond(
                embed=embeds.error_embed("Error", f"Prefix too long. Max {constants.MAX_PREFIX_LENGTH} characters."),
                ephemeral=True,
            )
            return
        await ctx.respond(embed=embeds.success_embed("✅ Prefix Updated", f"New prefix set to: `{new_prefix}`"), ephemeral=True)

    @commands.slash_command(name="leveling", description="Turn the leveling system on or off")
    async def leveling(self, ctx: discord.ApplicationContext, enabled: Option(bool, "Enable leveling")):  # type: ignore
        if not await self._check_permissions(ctx):
            return
        await self.store.set_leveling_enabled(GuildID(ctx.guild_id), enabled)
        await ctx.respond(embed=embeds.success_embed("📈 Leveling", f"Leveling system {_on_off(enabled)}."), ephemeral=True)

    @commands.slash_command(name="xp", description="Check XP and level status")
    async def xp(self, ctx: discord.ApplicationContext, user: Option(discord.Member, "Member to check", required=False)):  # type: ignore
        if not await self._ensure_guild_context(ctx):
            return
        guild_id = GuildID(ctx.guild_id)
        if not (await self.store.get(guild_id)).leveling_enabled:
            await ctx.respond(embed=embeds.info_embed("Leveling System", "Leveling is currently disabled on this server."), ephemeral=True)
            return

        target = user or ctx.user
        state = await self.engine.leveling.get(guild_id, UserID.from_object(target))
        await ctx.respond(embed=embeds.level_status_embed(target.display_name, state.level, state.xp, xp_for_level(state.level)))

    @commands.slash_command(name="leaderboard", description="Show the members with the most XP")
    async def leaderboard(self, ctx: discord.ApplicationContext):
        if not await self._ensure_guild_context(ctx):
            return
        guild_id = GuildID(ctx.guild_id)
        if not (await self.store.get(guild_id)).leveling_enabled:
            await ctx.respond(embed=embeds.info_embed("Leveling System", "Leveling is currently disabled on this server."), ephemeral=True)
            return

        ranked = await self.engine.leveling.leaderboard(guild_id)
        if not ranked:
            await ctx.respond(embed=embeds.info_embed("Leaderboard", "No user data recorded yet."))
            return
        entries = [(user_id.to_int(), state.level, total_xp(state.level, state.xp)) for user_id, state in ranked]
        await ctx.respond(embed=embeds.leaderboard_embed(entries))

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    async def cog_command_error(self, ctx: discord.ApplicationContext, error: Exception) -> None:
        logger.exception("[GUILD SETTINGS CMDS] Command %s failed", getattr(ctx.command, "qualified_name", "?"), exc_info=error)
        try:
            await ctx.respond(
                embed=embeds.error_embed("Command Error", "An unexpected error occurred while running this command."),
                ephemeral=True,
            )
        except discord.HTTPException:
            logger.debug("[GUILD SETTINGS CMDS] Could not send error notice")


def setup(discord_bot_instance: discord.Bot, engine: GuildSafetyEngine) -> None:
    discord_bot_instance.add_cog(GuildSettingsCog(discord_bot_instance, engine))
