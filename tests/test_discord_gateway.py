"""Tests for the py-cord gateway."""

import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildguard.util.discord_gateway import DESTRUCTIVE_CAPABILITIES, DiscordGateway, role_has_administrator


def _http_error(cls, status):
    return cls(MagicMock(status=status, reason=cls.__name__), "error")


class FakeRole:
    def __init__(self, role_id, position, *, managed=False, value=0):
        self.id = role_id
        self.position = position
        self.managed = managed
        self.permissions = discord.Permissions(value)
        self.guild = SimpleNamespace(id=1)
        self.edit = AsyncMock()

    def __lt__(self, other):
        return self.position < other.position


def _guild_with_me(*, manage_roles=True, moderate_members=True, top_position=5):
    me = SimpleNamespace(
        guild_permissions=SimpleNamespace(manage_roles=manage_roles, moderate_members=moderate_members),
        top_role=FakeRole(99, top_position),
    )
    return SimpleNamespace(id=1, me=me, owner_id=1000, roles=[], text_channels=[])


class TestQueries:
    def test_editable_roles_excludes_managed_and_higher_roles(self):
        guild = _guild_with_me()
        low = FakeRole(1, 1)
        managed = FakeRole(2, 2, managed=True)
        high = FakeRole(3, 7)
        guild.roles = [low, managed, high]

        assert DiscordGateway().list_editable_roles(guild) == [low]

    def test_editable_roles_empty_without_manage_roles(self):
        guild = _guild_with_me(manage_roles=False)
        guild.roles = [FakeRole(1, 1)]

        assert DiscordGateway().list_editable_roles(guild) == []

    def test_editable_text_channels_need_view_and_manage(self):
        guild = _guild_with_me()
        allowed = MagicMock()
        allowed.permissions_for.return_value = SimpleNamespace(view_channel=True, manage_channels=True)
        hidden = MagicMock()
        hidden.permissions_for.return_value = SimpleNamespace(view_channel=False, manage_channels=True)
        guild.text_channels = [allowed, hidden]

        assert DiscordGateway().list_editable_text_channels(guild) == [allowed]

    def test_resolve_text_channel_rejects_other_channel_types(self):
        guild = MagicMock()
        text_channel = MagicMock(spec=discord.TextChannel)
        guild.get_channel_or_thread.return_value = text_channel
        gateway = DiscordGateway()

        assert gateway.resolve_text_channel(guild, 5) is text_channel

        guild.get_channel_or_thread.return_value = MagicMock(spec=discord.VoiceChannel)
        assert gateway.resolve_text_channel(guild, 5) is None

        guild.get_channel_or_thread.return_value = None
        assert gateway.resolve_text_channel(guild, 5) is None

    def test_has_standing_over(self):
        guild = _guild_with_me(top_position=5)
        member = SimpleNamespace(
            id=7,
            guild=guild,
            guild_permissions=SimpleNamespace(administrator=False),
            top_role=FakeRole(10, 3),
        )
        gateway = DiscordGateway()

        assert gateway.has_standing_over(member) is True

        member.top_role = FakeRole(11, 6)
        assert gateway.has_standing_over(member) is False

        member.top_role = FakeRole(10, 3)
        member.guild_permissions.administrator = True
        assert gateway.has_standing_over(member) is False

        member.guild_permissions.administrator = False
        member.id = guild.owner_id
        assert gateway.has_standing_over(member) is False

    def test_role_has_administrator(self):
        assert role_has_administrator(FakeRole(1, 1, value=discord.Permissions(administrator=True).value))
        assert not role_has_administrator(FakeRole(1, 1))


class TestActions:
    @pytest.mark.asyncio
    async def test_strip_permissions_keeps_other_flags(self):
        initial = discord.Permissions(manage_channels=True, ban_members=True, send_messages=True)
        role = FakeRole(1, 1, value=initial.value)

        assert await DiscordGateway().strip_permissions(role, DESTRUCTIVE_CAPABILITIES) is True

        permissions = role.edit.await_args.kwargs["permissions"]
        assert permissions.send_messages is True
        assert permissions.manage_channels is False
        assert permissions.ban_members is False
        assert permissions.kick_members is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error_cls, status", [(discord.Forbidden, 403), (discord.NotFound, 404), (discord.HTTPException, 500)])
    async def test_strip_permissions_reports_discord_errors(self, error_cls, status):
        role = FakeRole(1, 1)
        role.edit.side_effect = _http_error(error_cls, status)

        assert await DiscordGateway().strip_permissions(role, DESTRUCTIVE_CAPABILITIES) is False

    @pytest.mark.asyncio
    async def test_set_channel_slowmode(self):
        channel = MagicMock(id=3)
        channel.edit = AsyncMock()
        gateway = DiscordGateway()

        assert await gateway.set_channel_slowmode(channel, 10) is True
        assert channel.edit.await_args.kwargs["slowmode_delay"] == 10

        channel.edit.side_effect = _http_error(discord.Forbidden, 403)
        assert await gateway.set_channel_slowmode(channel, 10) is False

    @pytest.mark.asyncio
    async def test_delete_message_tolerates_already_deleted(self):
        message = MagicMock(id=4)
        message.delete = AsyncMock(side_effect=_http_error(discord.NotFound, 404))

        assert await DiscordGateway().delete_message(message) is False

    @pytest.mark.asyncio
    async def test_post_transient_sets_delete_after(self):
        channel = MagicMock(id=3)
        channel.send = AsyncMock()
        embed = discord.Embed(title="warning")

        assert await DiscordGateway().post_transient(channel, embed, 5) is True
        channel.send.assert_awaited_once_with(embed=embed, delete_after=5)

    @pytest.mark.asyncio
    async def test_send_embed_failure_returns_false(self):
        channel = MagicMock(id=3)
        channel.send = AsyncMock(side_effect=_http_error(discord.HTTPException, 500))

        assert await DiscordGateway().send_embed(channel, discord.Embed(title="x")) is False

    @pytest.mark.asyncio
    async def test_timeout_member_converts_milliseconds(self):
        member = MagicMock(id=7)
        member.timeout_for = AsyncMock()

        assert await DiscordGateway().timeout_member(member, 300_000, "spam") is True
        member.timeout_for.assert_awaited_once_with(datetime.timedelta(minutes=5), reason="spam")

    @pytest.mark.asyncio
    async def test_timeout_member_forbidden(self):
        member = MagicMock(id=7)
        member.timeout_for = AsyncMock(side_effect=_http_error(discord.Forbidden, 403))

        assert await DiscordGateway().timeout_member(member, 300_000, "spam") is False
