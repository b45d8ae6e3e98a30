"""
Database access layer for the ``user_levels`` table.
"""

from __future__ import annotations

from typing import List, Tuple

from guildguard.database.database import Database
from guildguard.datatypes.discord_datatypes import GuildID, UserID
from guildguard.leveling.progression import UserLevel
from guildguard.util.logger import get_logger

logger = get_logger("level_repository")


class LevelRepository:
    def __init__(self, database: Database):
        self._database = database

    async def get(self, guild_id: GuildID, user_id: UserID) -> UserLevel:
        """Stored level for a member; level 0 with no XP if none is stored."""
        async with self._database.read() as conn:
            async with conn.execute(
                "SELECT level, xp FROM user_levels WHERE guild_id = ? AND user_id = ?",
                (guild_id.to_int(), user_id.to_int()),
            ) as cursor:
                row = await cursor.fetchone()

        if row is None:
            return UserLevel()
        return UserLevel(level=row[0], xp=row[1])

    async def save(self, guild_id: GuildID, user_id: UserID, state: UserLevel) -> bool:
        try:
            async with self._database.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO user_levels (guild_id, user_id, xp, level) VALUES (?, ?, ?, ?)
                    ON CONFLICT(guild_id, user_id) DO UPDATE SET
                        xp = excluded.xp,
                        level = excluded.level
                    """,
                    (guild_id.to_int(), user_id.to_int(), state.xp, state.level),
                )
        except Exception:
            logger.exception("[LEVELS] Failed to persist level of user %s in guild %s", user_id, guild_id)
            return False
        return True

    async def top(self, guild_id: GuildID, limit: int = 10) -> List[Tuple[UserID, UserLevel]]:
        """Members of a guild ordered by level, then XP, which is the same as by total XP."""
        async with self._database.read() as conn:
            async with conn.execute(
                """
                SELECT user_id, level, xp FROM user_levels
                WHERE guild_id = ?
                ORDER BY level DESC, xp DESC
                LIMIT ?
                """,
                (guild_id.to_int(), limit),
            ) as cursor:
                rows = await cursor.fetchall()

        return [(UserID.from_int(row[0]), UserLevel(level=row[1], xp=row[2])) for row in rows]
