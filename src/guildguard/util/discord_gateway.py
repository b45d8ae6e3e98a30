"""
discord_gateway.py
==================

Outbound Discord operations used by the safety engine.

Engine components talk to Discord only through :class:`PlatformGateway`, so
they can be exercised against fakes. :class:`DiscordGateway` is the py-cord
implementation. Every call that touches the API suppresses recoverable
Discord errors, logs them, and reports failure as ``False``.
"""

from __future__ import annotations

import datetime
from typing import Iterable, List, Optional, Protocol, Union

import discord

from guildguard.util.logger import get_logger

logger = get_logger("discord_gateway")

# Permissions removed from roles while a guild is in safe mode
DESTRUCTIVE_CAPABILITIES = ("manage_channels", "manage_roles", "ban_members", "kick_members")

Messageable = Union[discord.TextChannel, discord.Thread]


class PlatformGateway(Protocol):
    """The narrow set of Discord operations the engine performs."""

    def list_editable_roles(self, guild: discord.Guild) -> List[discord.Role]: ...

    def list_editable_text_channels(self, guild: discord.Guild) -> List[discord.TextChannel]: ...

    def resolve_text_channel(self, guild: discord.Guild, channel_id: int) -> Optional[Messageable]: ...

    async def strip_permissions(self, role: discord.Role, capabilities: Iterable[str]) -> bool: ...

    async def set_channel_slowmode(self, channel: discord.TextChannel, seconds: int) -> bool: ...

    async def delete_message(self, message: discord.Message) -> bool: ...

    async def send_embed(self, channel: Messageable, embed: discord.Embed) -> bool: ...

    async def post_transient(self, channel: Messageable, embed: discord.Embed, ttl_seconds: float) -> bool: ...

    async def timeout_member(self, member: discord.Member, duration_ms: int, reason: str) -> bool: ...

    def has_standing_over(self, member: discord.Member) -> bool: ...

    def is_timed_out(self, member: discord.Member) -> bool: ...


def role_has_administrator(role: discord.Role) -> bool:
    return bool(role.permissions.administrator)


class DiscordGateway:
    """py-cord implementation of :class:`PlatformGateway`."""

    # ---------- Queries ----------

    def list_editable_roles(self, guild: discord.Guild) -> List[discord.Role]:
        """
        Roles the bot may edit: it holds Manage Roles, the role sits below the
        bot's top role, and the role is not managed by an integration.
        """
        me = guild.me
        if me is None or not me.guild_permissions.manage_roles:
            return []
        return [role for role in guild.roles if not role.managed and role < me.top_role]

    def list_editable_text_channels(self, guild: discord.Guild) -> List[discord.TextChannel]:
        """Text channels the bot can see and has Manage Channels in."""
        me = guild.me
        if me is None:
            return []

        channels = []
        for channel in guild.text_channels:
            permissions = channel.permissions_for(me)
            if permissions.view_channel and permissions.manage_channels:
                channels.append(channel)
        return channels

    def resolve_text_channel(self, guild: discord.Guild, channel_id: int) -> Optional[Messageable]:
        """Look up a channel by ID, returning None unless it can hold messages."""
        channel = guild.get_channel_or_thread(channel_id)
        if isinstance(channel, (discord.TextChannel, discord.Thread)):
            return channel
        return None

    def has_standing_over(self, member: discord.Member) -> bool:
        """
        Whether the bot can moderate ``member``: it holds Moderate Members, the
        member is neither the owner nor an administrator, and the bot's top
        role is above the member's.
        """
        guild = member.guild
        me = guild.me
        if me is None or member.id == guild.owner_id:
            return False
        if not me.guild_permissions.moderate_members:
            return False
        if member.guild_permissions.administrator:
            return False
        return me.top_role > member.top_role

    def is_timed_out(self, member: discord.Member) -> bool:
        return bool(member.timed_out)

    # ---------- Actions ----------

    async def strip_permissions(self, role: discord.Role, capabilities: Iterable[str]) -> bool:
        """Remove the named permission flags from a role, leaving the rest untouched."""
        permissions = discord.Permissions(role.permissions.value)
        permissions.update(**{name: False for name in capabilities})
        try:
            await role.edit(permissions=permissions, reason="Safe mode: removing destructive permissions")
            return True
        except discord.Forbidden:
            logger.warning("[DISCORD GATEWAY] No permission to edit role %s in guild %s", role.id, role.guild.id)
        except discord.NotFound:
            logger.debug("[DISCORD GATEWAY] Role %s vanished before it could be edited", role.id)
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to edit role %s: %s", role.id, exc)
        return False

    async def set_channel_slowmode(self, channel: discord.TextChannel, seconds: int) -> bool:
        try:
            await channel.edit(slowmode_delay=seconds, reason="Safe mode: throttling messages")
            return True
        except discord.Forbidden:
            logger.warning("[DISCORD GATEWAY] No permission to set slow-mode in channel %s", channel.id)
        except discord.NotFound:
            logger.debug("[DISCORD GATEWAY] Channel %s vanished before slow-mode was set", channel.id)
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to set slow-mode in channel %s: %s", channel.id, exc)
        return False

    async def delete_message(self, message: discord.Message) -> bool:
        try:
            await message.delete()
            return True
        except discord.NotFound:
            return False
        except discord.Forbidden:
            logger.warning("[DISCORD GATEWAY] No permission to delete message %s", message.id)
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Error deleting message %s: %s", message.id, exc)
        return False

    async def send_embed(self, channel: Messageable, embed: discord.Embed) -> bool:
        try:
            await channel.send(embed=embed)
            return True
        except discord.Forbidden:
            logger.warning("[DISCORD GATEWAY] No permission to send in channel %s", channel.id)
        except discord.NotFound:
            logger.debug("[DISCORD GATEWAY] Channel %s vanished before sending", channel.id)
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to send embed to channel %s: %s", channel.id, exc)
        return False

    async def post_transient(self, channel: Messageable, embed: discord.Embed, ttl_seconds: float) -> bool:
        """Send an embed that Discord deletes again after ``ttl_seconds``."""
        try:
            await channel.send(embed=embed, delete_after=ttl_seconds)
            return True
        except discord.Forbidden:
            logger.warning("[DISCORD GATEWAY] No permission to warn in channel %s", channel.id)
        except discord.NotFound:
            logger.debug("[DISCORD GATEWAY] Channel %s vanished before warning", channel.id)
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to send warning to channel %s: %s", channel.id, exc)
        return False

    async def timeout_member(self, member: discord.Member, duration_ms: int, reason: str) -> bool:
        try:
            await member.timeout_for(datetime.timedelta(milliseconds=duration_ms), reason=reason)
            return True
        except discord.Forbidden:
            logger.warning("[DISCORD GATEWAY] No permission to time out %s in guild %s", member.id, member.guild.id)
        except discord.NotFound:
            logger.debug("[DISCORD GATEWAY] Member %s left before the timeout", member.id)
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to time out %s: %s", member.id, exc)
        return False
