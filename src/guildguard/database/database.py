"""
Database initialization and coordination for SQLite.

The Database class owns the connection manager and schema setup and exposes
the moderation-action audit log. Table-specific access for guild
configuration and levels lives in the repositories that take a Database.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from guildguard.database.db_connection import ConnectionManager
from guildguard.database.db_schema import SchemaManager
from guildguard.datatypes.action_datatypes import ActionData
from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.util.logger import get_logger

logger = get_logger("database")

# Default database file path
DB_PATH = Path("./data/guildguard.db").resolve()


class Database:
    """
    Central database coordinator.

    Lifecycle:
        1. ``await initialize()`` at program startup
        2. use ``read()`` / ``transaction()`` or the helpers below
        3. ``await shutdown()`` at program end
    """

    def __init__(self, db_path: Path = DB_PATH):
        """
        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._connection = ConnectionManager()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def read(self):
        """Async context manager yielding the connection for reads."""
        return self._connection.read()

    def transaction(self):
        """Async context manager yielding the connection inside a serialised write."""
        return self._connection.transaction()

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self._connection.open(self.db_path)
            await SchemaManager.initialize_schema(self._connection.connection)

            self._initialized = True
            logger.info("[DATABASE] Database initialized at %s", self.db_path)
            return True

        except Exception as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self._connection.close()
            return False

    async def shutdown(self) -> None:
        """Close the connection. Safe to call more than once."""
        await self._connection.close()
        if self._initialized:
            self._initialized = False
            logger.info("[DATABASE] Database shutdown complete")

    async def log_moderation_action(self, action: ActionData) -> bool:
        """
        Append an action to the ``moderation_actions`` audit table.

        Returns:
            True if the row was written, False otherwise
        """
        try:
            async with self.transaction() as conn:
                await conn.execute(
                    "INSERT INTO moderation_actions (guild_id, user_id, action, reason) VALUES (?, ?, ?, ?)",
                    (
                        action.guild_id.to_int(),
                        action.user_id.to_int() if action.user_id is not None else None,
                        action.action.value,
                        action.reason,
                    ),
                )
        except Exception:
            logger.exception("[DATABASE] Failed to log %s action for guild %s", action.action, action.guild_id)
            return False

        logger.debug("[DATABASE] Logged action %s in guild %s", action.action, action.guild_id)
        return True

    async def get_recent_actions(self, guild_id: GuildID, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Return the newest audit rows for a guild, newest first.
        """
        async with self.read() as conn:
            async with conn.execute(
                """
                SELECT user_id, action, reason, timestamp
                FROM moderation_actions
                WHERE guild_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (guild_id.to_int(), limit),
            ) as cursor:
                rows = await cursor.fetchall()

        return [dict(row) for row in rows]

    async def delete_guild_data(self, guild_id: GuildID) -> bool:
        """Remove every row belonging to a guild from every table."""
        try:
            async with self.transaction() as conn:
                for table in ("guild_config", "moderation_actions", "user_levels"):
                    await conn.execute(f"DELETE FROM {table} WHERE guild_id = ?", (guild_id.to_int(),))
        except Exception:
            logger.exception("[DATABASE] Failed to delete data for guild %s", guild_id)
            return False
        return True
