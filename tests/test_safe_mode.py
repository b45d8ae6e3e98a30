import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from guildguard.antinuke import safe_mode as safe_mode_module
from guildguard.antinuke.safe_mode import SafeModeController
from guildguard.datatypes.action_datatypes import ActionType
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.settings.config_store import ConfigStore
from guildguard.util.discord_gateway import DESTRUCTIVE_CAPABILITIES

from fakes import make_gateway, make_guild, make_role


@pytest.mark.asyncio
async def test_activate_strips_non_admin_roles_and_sets_slowmode():
    store = ConfigStore()
    member_role = make_role(10)
    admin_role = make_role(11, administrator=True)
    channels = ["general", "memes"]
    gateway = make_gateway(roles=[member_role, admin_role], channels=channels)
    modlog = AsyncMock()
    controller = SafeModeController(store, gateway, modlog=modlog, slowmode_seconds=10)
    guild = make_guild(1)

    assert await controller.activate(guild) is True

    assert controller.is_active(GuildID(1)) is True
    assert (await store.get(GuildID(1))).nukemode is True
    gateway.strip_permissions.assert_awaited_once_with(member_role, DESTRUCTIVE_CAPABILITIES)
    assert [c.args for c in gateway.set_channel_slowmode.await_args_list] == [("general", 10), ("memes", 10)]

    modlog.log.assert_awaited_once()
    assert modlog.log.await_args.kwargs["action"].action is ActionType.SAFE_MODE_ON


@pytest.mark.asyncio
async def test_activate_is_a_no_op_when_already_active():
    store = ConfigStore()
    gateway = make_gateway(roles=[make_role(10)], channels=["general"])
    controller = SafeModeController(store, gateway)
    guild = make_guild(1)

    assert await controller.activate(guild) is True
    assert await controller.activate(guild) is False
    assert gateway.strip_permissions.await_count == 1
    assert gateway.set_channel_slowmode.await_count == 1


@pytest.mark.asyncio
async def test_role_and_channel_failures_do_not_stop_the_sweep(monkeypatch):
    store = ConfigStore()
    roles = [make_role(1), make_role(2), make_role(3)]
    gateway = make_gateway(roles=roles, channels=["a", "b"])
    gateway.strip_permissions = AsyncMock(side_effect=[False, True, True])
    gateway.set_channel_slowmode = AsyncMock(side_effect=[False, True])
    controller = SafeModeController(store, gateway)

    fake_logger = MagicMock()
    monkeypatch.setattr(safe_mode_module, "logger", fake_logger)

    assert await controller.activate(make_guild(1)) is True

    assert gateway.strip_permissions.await_count == 3
    assert gateway.set_channel_slowmode.await_count == 2
    fake_logger.warning.assert_called_once()
    assert fake_logger.warning.call_args.args[-1] == 2


@pytest.mark.asyncio
async def test_concurrent_activations_run_one_sweep():
    store = ConfigStore()
    gateway = make_gateway(roles=[make_role(1), make_role(2)], channels=["a"])

    async def slow_strip(role, capabilities):
        await asyncio.sleep(0)
        return True

    gateway.strip_permissions = AsyncMock(side_effect=slow_strip)
    controller = SafeModeController(store, gateway)
    guild = make_guild(1)

    results = await asyncio.gather(controller.activate(guild), controller.activate(guild))

    assert sorted(results) == [False, True]
    assert gateway.strip_permissions.await_count == 2


@pytest.mark.asyncio
async def test_deactivate_only_clears_the_flag():
    store = ConfigStore()
    gateway = make_gateway(roles=[make_role(1)], channels=["a"])
    modlog = AsyncMock()
    controller = SafeModeController(store, gateway, modlog=modlog)
    guild = make_guild(1)

    assert await controller.deactivate(guild) is False

    await controller.activate(guild)
    gateway.strip_permissions.reset_mock()
    gateway.set_channel_slowmode.reset_mock()

    assert await controller.deactivate(guild) is True
    assert controller.is_active(GuildID(1)) is False
    gateway.strip_permissions.assert_not_awaited()
    gateway.set_channel_slowmode.assert_not_awaited()
    assert modlog.log.await_args.kwargs["action"].action is ActionType.SAFE_MODE_OFF

    assert await controller.deactivate(guild) is False


@pytest.mark.asyncio
async def test_safe_mode_is_scoped_per_guild():
    store = ConfigStore()
    controller = SafeModeController(store, make_gateway())

    await controller.activate(make_guild(1))

    assert controller.is_active(GuildID(1)) is True
    assert controller.is_active(GuildID(2)) is False
