"""
Leveling service: grants XP for messages and applies level-ups.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Dict, List, Optional, Tuple

from guildguard import constants
from guildguard.datatypes.discord_datatypes import GuildID, UserID
from guildguard.leveling.level_repository import LevelRepository
from guildguard.leveling.progression import LevelUpResult, UserLevel, apply_level_ups, total_xp
from guildguard.util.logger import get_logger

logger = get_logger("leveling_service")


class LevelingService:
    """
    Awards 15-25 XP per message, at most once per cooldown per member.

    Levels live in the database when a repository is given and in memory
    otherwise.

    Args:
        repository: Persistent storage for levels
        cooldown_seconds: Minimum time between two awards to the same member
        clock: Seconds clock, injectable for tests
        rng: Random source for the XP roll
    """

    def __init__(
        self,
        repository: Optional[LevelRepository] = None,
        cooldown_seconds: float = constants.XP_COOLDOWN_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._repository = repository
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock or time.monotonic
        self._rng = rng or random.Random()
        self._last_award: Dict[Tuple[GuildID, UserID], float] = {}
        self._levels: Dict[Tuple[GuildID, UserID], UserLevel] = {}

    async def get(self, guild_id: GuildID, user_id: UserID) -> UserLevel:
        key = (GuildID(guild_id), UserID(user_id))
        if self._repository is not None:
            return await self._repository.get(*key)
        return self._levels.get(key, UserLevel())

    async def award(self, guild_id: GuildID, user_id: UserID) -> Optional[LevelUpResult]:
        """
        Grant XP for one message.

        Returns:
            A LevelUpResult if the member reached a new level, otherwise None
            (including when the member is still cooling down).
        """
        key = (GuildID(guild_id), UserID(user_id))
        now = self._clock()

        last = self._last_award.get(key)
        if last is not None and now - last <= self.cooldown_seconds:
            return None
        self._last_award[key] = now

        gained = self._rng.randint(constants.XP_GAIN_MIN, constants.XP_GAIN_MAX)
        current = await self.get(*key)
        level, xp = apply_level_ups(current.level, current.xp + gained)
        updated = UserLevel(level=level, xp=xp)

        if self._repository is not None:
            await self._repository.save(*key, updated)
        else:
            self._levels[key] = updated

        if level == current.level:
            return None

        logger.debug("[LEVELING] User %s in guild %s reached level %d", key[1], key[0], level)
        return LevelUpResult(previous_level=current.level, level=level, xp=xp, gained=gained)

    async def leaderboard(self, guild_id: GuildID, limit: int = constants.LEADERBOARD_SIZE) -> List[Tuple[UserID, UserLevel]]:
        """Members of a guild with the most total XP, best first."""
        guild_id = GuildID(guild_id)
        if self._repository is not None:
            return await self._repository.top(guild_id, limit)

        ranked = [(key[1], state) for key, state in self._levels.items() if key[0] == guild_id]
        ranked.sort(key=lambda entry: total_xp(entry[1].level, entry[1].xp), reverse=True)
        return ranked[:limit]

    def forget_guild(self, guild_id: GuildID) -> None:
        """Drop in-memory cooldowns and levels for a guild."""
        guild_id = GuildID(guild_id)
        for store in (self._last_award, self._levels):
            for key in [key for key in store if key[0] == guild_id]:
                del store[key]
