"""
Per-member message-rate tracking for the anti-spam filter.

Counters are keyed by guild and user, created on first message, pruned on
every append with the guild's current window, swept once idle members expire,
and never persisted.
"""

from __future__ import annotations

from typing import Optional

from guildguard import constants
from guildguard.antinuke.event_window import Clock, EventWindow
from guildguard.datatypes.discord_datatypes import GuildID, UserID


class SpamTracker:
    def __init__(self, clock: Optional[Clock] = None):
        self._window = EventWindow(constants.DEFAULT_ANTISPAM_WINDOW_MS, clock=clock)

    def record_message(self, guild_id: GuildID, user_id: UserID, window_ms: int) -> int:
        """Count one message and return how many the user sent inside ``window_ms``."""
        return self._window.record(GuildID(guild_id), UserID(user_id), window_ms=window_ms)

    def count(self, guild_id: GuildID, user_id: UserID, window_ms: int) -> int:
        return self._window.count_in_window(GuildID(guild_id), UserID(user_id), window_ms=window_ms)

    def clear_guild(self, guild_id: GuildID) -> None:
        self._window.clear(GuildID(guild_id))
