"""
Anti-nuke detector.

Records destructive guild events (channel deletions, role deletions, bans) in
a sliding window and trips safe mode when any single kind reaches its
threshold. Thresholds are evaluated on every event; there are no timers.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

import discord

from guildguard import constants
from guildguard.antinuke.event_window import EventWindow
from guildguard.antinuke.safe_mode import SafeModeController
from guildguard.configuration.app_configuration import DEFAULT_NUKE_THRESHOLDS
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.datatypes.event_datatypes import DestructiveEventKind
from guildguard.util.logger import get_logger

logger = get_logger("antinuke_detector")


class AntiNukeDetector:
    """
    Args:
        safe_mode: Controller asked to lock the guild down
        window: Event window; a fresh 10 s window when omitted
        thresholds: Per-kind trip counts, defaulting to 3 of each
    """

    def __init__(
        self,
        safe_mode: SafeModeController,
        window: Optional[EventWindow] = None,
        thresholds: Optional[Mapping[DestructiveEventKind, int]] = None,
    ):
        self._safe_mode = safe_mode
        self.window = window or EventWindow(constants.NUKE_DETECTION_WINDOW_MS)
        self.thresholds: Dict[DestructiveEventKind, int] = dict(DEFAULT_NUKE_THRESHOLDS)
        if thresholds:
            self.thresholds.update(thresholds)

    def tripped_kinds(self, guild_id: GuildID) -> List[DestructiveEventKind]:
        """Kinds whose live count has reached their threshold."""
        return [
            kind for kind, threshold in self.thresholds.items()
            if self.window.count_in_window(guild_id, kind) >= threshold
        ]

    async def on_destructive_event(self, guild: discord.Guild, kind: DestructiveEventKind) -> bool:
        """
        Record one destructive event and react to it.

        Returns:
            True if safe-mode activation was requested for this event.
        """
        guild_id = GuildID.from_object(guild)
        count = self.window.record(guild_id, kind)
        logger.debug("[ANTINUKE] Guild %s: %s x%d in window", guild_id, kind, count)

        tripped = self.tripped_kinds(guild_id)
        if not tripped or self._safe_mode.is_active(guild_id):
            return False

        summary = ", ".join(f"{k.value} x{self.window.count_in_window(guild_id, k)}" for k in tripped)
        reason = f"Possible nuke detected: {summary} within {self.window.window_ms // 1000}s"
        logger.warning("[ANTINUKE] %s in guild %s", reason, guild_id)

        # The trip reason travels with the safe-mode report to the mod log
        await self._safe_mode.activate(guild, reason=reason)
        return True
