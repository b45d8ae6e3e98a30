from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from guildguard.database.database import Database
from guildguard.datatypes.action_datatypes import ActionData, ActionType
from guildguard.datatypes.discord_datatypes import ChannelID, GuildID
from guildguard.services.modlog import ModerationLogSink
from guildguard.settings.config_store import ConfigStore

from fakes import make_gateway

GUILD = SimpleNamespace(id=1)


@pytest.mark.asyncio
async def test_no_channel_configured_is_a_no_op():
    gateway = make_gateway()
    sink = ModerationLogSink(ConfigStore(), gateway)

    assert await sink.log(GUILD, discord.Embed(title="x")) is False
    gateway.resolve_text_channel.assert_not_called()
    gateway.send_embed.assert_not_awaited()


@pytest.mark.asyncio
async def test_posts_to_configured_channel_in_mod_colour():
    store = ConfigStore()
    await store.set_mod_log_channel(GuildID(1), ChannelID(77))
    gateway = make_gateway()
    channel = SimpleNamespace(id=77)
    gateway.resolve_text_channel.return_value = channel
    sink = ModerationLogSink(store, gateway)
    embed = discord.Embed(title="x")

    assert await sink.log(GUILD, embed) is True

    gateway.resolve_text_channel.assert_called_once_with(GUILD, 77)
    gateway.send_embed.assert_awaited_once_with(channel, embed)
    assert embed.colour.value == 0x17A2B8


@pytest.mark.asyncio
async def test_vanished_channel_clears_setting():
    store = ConfigStore()
    await store.set_mod_log_channel(GuildID(1), ChannelID(77))
    gateway = make_gateway()
    sink = ModerationLogSink(store, gateway)

    assert await sink.log(GUILD, discord.Embed(title="x")) is False

    assert (await store.get(GuildID(1))).mod_log_channel is None
    gateway.send_embed.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_failure_is_reported_not_raised():
    store = ConfigStore()
    await store.set_mod_log_channel(GuildID(1), ChannelID(77))
    gateway = make_gateway()
    gateway.resolve_text_channel.side_effect = RuntimeError("cache exploded")
    sink = ModerationLogSink(store, gateway)

    assert await sink.log(GUILD, discord.Embed(title="x")) is False


@pytest.mark.asyncio
async def test_action_is_written_to_audit_table(tmp_path):
    database = Database(tmp_path / "audit.db")
    assert await database.initialize()
    sink = ModerationLogSink(ConfigStore(), make_gateway(), database)

    await sink.log(GUILD, discord.Embed(title="x"), action=ActionData(GuildID(1), ActionType.DELETE, "rude"))

    rows = await database.get_recent_actions(GuildID(1))
    assert [(row["action"], row["reason"], row["user_id"]) for row in rows] == [("delete", "rude", None)]
    await database.shutdown()


@pytest.mark.asyncio
async def test_audit_skipped_when_database_is_closed():
    database = Database()
    database.log_moderation_action = AsyncMock()
    sink = ModerationLogSink(ConfigStore(), make_gateway(), database)

    await sink.log(GUILD, discord.Embed(title="x"), action=ActionData(GuildID(1), ActionType.DELETE, "rude"))

    database.log_moderation_action.assert_not_awaited()
