"""
Database access layer for guild configuration.

Each guild is one row of ``guild_config`` holding its configuration record as
a JSON object:
- load_all(): Load every stored record
- save(): Upsert one guild's record
- delete(): Remove one guild's record
"""

import json
from typing import Any, Dict

from guildguard.database.database import Database
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.util.logger import get_logger

logger = get_logger("guild_config_db")


class GuildConfigDB:
    """Database access layer for guild configuration records."""

    def __init__(self, database: Database):
        self._database = database

    async def load_all(self) -> Dict[GuildID, Any]:
        """
        Load all persisted guild records.

        A row whose JSON cannot be decoded is returned as ``None`` so the
        caller repairs it with defaults instead of losing the guild.

        Returns:
            Dictionary mapping guild IDs to decoded records.
        """
        records: Dict[GuildID, Any] = {}

        try:
            async with self._database.read() as conn:
                async with conn.execute("SELECT guild_id, config FROM guild_config") as cursor:
                    rows = await cursor.fetchall()
        except Exception:
            logger.exception("[GUILD CONFIG DB] Failed to load from database")
            return {}

        for row in rows:
            guild_id = GuildID.from_int(row[0])
            try:
                records[guild_id] = json.loads(row[1]) if row[1] else None
            except (TypeError, ValueError):
                logger.warning("[GUILD CONFIG DB] Stored config for guild %s is not valid JSON", guild_id)
                records[guild_id] = None

        logger.info("[GUILD CONFIG DB] Loaded %d guild configs from database", len(records))
        return records

    async def save(self, guild_id: GuildID, record: Dict[str, Any]) -> bool:
        """
        Persist a single guild's record.

        Returns:
            True if successful, False otherwise.
        """
        try:
            async with self._database.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO guild_config (guild_id, config) VALUES (?, ?)
                    ON CONFLICT(guild_id) DO UPDATE SET config = excluded.config
                    """,
                    (guild_id.to_int(), json.dumps(record)),
                )
        except Exception:
            logger.exception("[GUILD CONFIG DB] Failed to persist guild %s", guild_id)
            return False

        logger.debug("[GUILD CONFIG DB] Persisted guild %s to database", guild_id)
        return True

    async def delete(self, guild_id: GuildID) -> bool:
        """
        Delete a guild's record. Deleting a guild with no row is not an error.

        Returns:
            True if successful, False otherwise.
        """
        try:
            async with self._database.transaction() as conn:
                await conn.execute("DELETE FROM guild_config WHERE guild_id = ?", (guild_id.to_int(),))
        except Exception:
            logger.exception("[GUILD CONFIG DB] Failed to delete guild %s from database", guild_id)
            return False

        logger.debug("[GUILD CONFIG DB] Deleted guild %s from database", guild_id)
        return True
