from unittest.mock import AsyncMock, MagicMock

import pytest

from guildguard.antinuke.detector import AntiNukeDetector
from guildguard.antinuke.event_window import EventWindow
from guildguard.antinuke.safe_mode import SafeModeController
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.datatypes.event_datatypes import DestructiveEventKind
from guildguard.settings.config_store import ConfigStore

from fakes import FakeClock, make_gateway, make_guild, make_role

CHANNEL = DestructiveEventKind.CHANNEL_DELETE
ROLE = DestructiveEventKind.ROLE_DELETE
BAN = DestructiveEventKind.BAN


def _mock_safe_mode(active: bool = False):
    safe_mode = MagicMock()
    safe_mode.is_active.return_value = active
    safe_mode.activate = AsyncMock(return_value=True)
    return safe_mode


@pytest.mark.asyncio
async def test_third_channel_delete_inside_window_trips_safe_mode():
    clock = FakeClock()
    safe_mode = _mock_safe_mode()
    detector = AntiNukeDetector(safe_mode, window=EventWindow(10_000, clock=clock))
    guild = make_guild(1)

    assert await detector.on_destructive_event(guild, CHANNEL) is False
    clock.now = 2_000
    assert await detector.on_destructive_event(guild, CHANNEL) is False
    clock.now = 4_000
    assert await detector.on_destructive_event(guild, CHANNEL) is True

    safe_mode.activate.assert_awaited_once()
    assert "channel_delete x3" in safe_mode.activate.await_args.kwargs["reason"]


@pytest.mark.asyncio
async def test_kinds_are_counted_independently():
    safe_mode = _mock_safe_mode()
    detector = AntiNukeDetector(safe_mode, window=EventWindow(10_000, clock=FakeClock()))
    guild = make_guild(1)

    for kind in (CHANNEL, ROLE, BAN, CHANNEL, ROLE, BAN):
        assert await detector.on_destructive_event(guild, kind) is False

    safe_mode.activate.assert_not_awaited()
    assert await detector.on_destructive_event(guild, BAN) is True


@pytest.mark.asyncio
async def test_events_outside_window_do_not_count():
    clock = FakeClock()
    safe_mode = _mock_safe_mode()
    detector = AntiNukeDetector(safe_mode, window=EventWindow(10_000, clock=clock))
    guild = make_guild(1)

    await detector.on_destructive_event(guild, ROLE)
    await detector.on_destructive_event(guild, ROLE)
    clock.now = 10_000
    assert await detector.on_destructive_event(guild, ROLE) is False

    safe_mode.activate.assert_not_awaited()


@pytest.mark.asyncio
async def test_no_activation_when_already_in_safe_mode():
    safe_mode = _mock_safe_mode(active=True)
    detector = AntiNukeDetector(safe_mode, window=EventWindow(10_000, clock=FakeClock()))
    guild = make_guild(1)

    for _ in range(3):
        assert await detector.on_destructive_event(guild, BAN) is False

    safe_mode.activate.assert_not_awaited()


@pytest.mark.asyncio
async def test_guilds_do_not_share_counts():
    safe_mode = _mock_safe_mode()
    detector = AntiNukeDetector(safe_mode, window=EventWindow(10_000, clock=FakeClock()))

    await detector.on_destructive_event(make_guild(1), BAN)
    await detector.on_destructive_event(make_guild(1), BAN)
    assert await detector.on_destructive_event(make_guild(2), BAN) is False


@pytest.mark.asyncio
async def test_custom_thresholds_override_defaults():
    safe_mode = _mock_safe_mode()
    detector = AntiNukeDetector(
        safe_mode,
        window=EventWindow(10_000, clock=FakeClock()),
        thresholds={BAN: 1},
    )

    assert detector.thresholds[CHANNEL] == 3
    assert await detector.on_destructive_event(make_guild(1), BAN) is True


@pytest.mark.asyncio
async def test_burst_activates_real_safe_mode_once():
    store = ConfigStore()
    gateway = make_gateway(roles=[make_role(10)], channels=["general"])
    safe_mode = SafeModeController(store, gateway)
    detector = AntiNukeDetector(safe_mode, window=EventWindow(10_000, clock=FakeClock()))
    guild = make_guild(1)

    results = [await detector.on_destructive_event(guild, CHANNEL) for _ in range(5)]

    assert results == [False, False, True, False, False]
    assert (await store.get(GuildID(1))).nukemode is True
    assert gateway.strip_permissions.await_count == 1
