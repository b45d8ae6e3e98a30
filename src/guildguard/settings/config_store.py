"""
Persistent per-guild configuration storage for the safety engine.

Provides a small API over the stored guild records:
- get(guild_id) -> GuildConfig: Read a guild's config, repairing missing fields
- set(guild_id, mutator): Apply a change in memory, then persist it
- drop(guild_id): Forget a guild entirely
- set_antilink/configure_antispam/add_banned_word/...: Convenience writers

Records are kept in memory as plain dicts in the stored JSON shape so keys this
version does not know about survive a round trip. Callers only ever see
detached :class:`GuildConfig` copies.

Database operations are delegated to GuildConfigDB.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Optional

from guildguard import constants
from guildguard.database.database import Database
from guildguard.datatypes.discord_datatypes import ChannelID, GuildID
from guildguard.datatypes.guild_config import GuildConfig, merge_defaults
from guildguard.settings.guild_config_db import GuildConfigDB
from guildguard.util.logger import get_logger

logger = get_logger("config_store")

ConfigMutator = Callable[[GuildConfig], None]


def _overlay(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Recursively copy ``source`` into ``target``, keeping keys only ``target`` has."""
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            _overlay(current, value)
        else:
            target[key] = copy.deepcopy(value)


class ConfigStore:
    """
    Owner of every guild's configuration.

    Without a database the store works purely in memory, which is what the
    unit tests and dry runs use.
    """

    def __init__(self, database: Optional[Database] = None):
        self._database = database
        self._db = GuildConfigDB(database) if database is not None else None
        self._records: Dict[GuildID, Dict[str, Any]] = {}
        self._db_initialized = False

        logger.info("[CONFIG STORE] Initialized")

    async def async_init(self) -> None:
        """Open the database and load every stored record into memory."""
        if self._db_initialized or self._database is None:
            return

        if not await self._database.initialize():
            logger.error("[CONFIG STORE] Database unavailable, running with in-memory configuration only")
            return

        for guild_id, record in (await self._db.load_all()).items():
            # Anything that is not an object is repaired on first read
            self._records[guild_id] = record if isinstance(record, dict) else None

        self._db_initialized = True
        logger.info("[CONFIG STORE] Loaded configuration for %d guilds", len(self._records))

    # ========== Core API ==========

    async def get(self, guild_id: GuildID) -> GuildConfig:
        """
        Retrieve a guild's configuration with every field populated.

        Missing fields are filled from the defaults and the repaired record is
        persisted before returning. An unknown guild is not an error; it gets
        a default record.

        Returns:
            A detached GuildConfig; changing it does not affect the store.
        """
        guild_id = GuildID(guild_id)
        record, changed = self._ensure(guild_id)
        if changed:
            await self._persist(guild_id)
        return GuildConfig.from_record(guild_id, record)

    def peek(self, guild_id: GuildID) -> GuildConfig:
        """
        Synchronous read that neither stores nor persists anything.

        Used on hot paths that must not yield to the event loop.
        """
        guild_id = GuildID(guild_id)
        record = self._records.get(guild_id)
        merged, _ = merge_defaults(copy.deepcopy(record) if record is not None else {})
        return GuildConfig.from_record(guild_id, merged)

    async def set(self, guild_id: GuildID, mutator: ConfigMutator) -> GuildConfig:
        """
        Apply ``mutator`` to a guild's configuration and persist the result.

        The change is applied to the in-memory record before anything is
        awaited. A failed write is logged and the in-memory change stands.
        If the mutator raises, nothing is changed and the exception propagates.

        Returns:
            A detached copy of the updated configuration.
        """
        guild_id = GuildID(guild_id)
        updated = self._apply(guild_id, mutator)
        await self._persist(guild_id)
        return updated

    async def drop(self, guild_id: GuildID) -> bool:
        """
        Remove a guild from memory and storage. Dropping an unknown guild is a no-op.

        Returns:
            True if storage was updated (or there is none), False otherwise.
        """
        guild_id = GuildID(guild_id)
        if self._records.pop(guild_id, None) is not None:
            logger.debug("[CONFIG STORE] Removed guild %s from memory", guild_id)

        if self._db is None:
            return True
        return await self._db.delete(guild_id)

    def list_guild_ids(self) -> List[GuildID]:
        return list(self._records)

    # ========== Convenience writers ==========

    async def set_antilink(self, guild_id: GuildID, enabled: bool) -> GuildConfig:
        def mutate(config: GuildConfig) -> None:
            config.automod.antilink = bool(enabled)
        return await self.set(guild_id, mutate)

    async def configure_antispam(self, guild_id: GuildID, max_messages: int, window_ms: int) -> GuildConfig:
        """
        Set the spam threshold and window and enable the filter.

        Raises:
            ValueError: If either value is not positive.
        """
        if max_messages <= 0 or window_ms <= 0:
            raise ValueError("Anti-spam max and window must be positive")

        def mutate(config: GuildConfig) -> None:
            config.automod.antispam.enabled = True
            config.automod.antispam.max = int(max_messages)
            config.automod.antispam.window_ms = int(window_ms)
        return await self.set(guild_id, mutate)

    async def set_antispam_enabled(self, guild_id: GuildID, enabled: bool) -> GuildConfig:
        def mutate(config: GuildConfig) -> None:
            config.automod.antispam.enabled = bool(enabled)
        return await self.set(guild_id, mutate)

    async def add_banned_word(self, guild_id: GuildID, word: str) -> bool:
        """
        Add a word to the filter list, lower-cased and de-duplicated.

        Returns:
            True if the word was added, False if it was empty or already listed.
        """
        word = word.strip().lower()
        if not word:
            return False
        if word in (await self.get(guild_id)).automod.wordfilter.banned_words:
            return False

        def mutate(config: GuildConfig) -> None:
            if word not in config.automod.wordfilter.banned_words:
                config.automod.wordfilter.banned_words.append(word)
        await self.set(guild_id, mutate)
        return True

    async def remove_banned_word(self, guild_id: GuildID, word: str) -> bool:
        """
        Remove a word from the filter list, ignoring case.

        Returns:
            True if the word was listed and has been removed.
        """
        word = word.strip().lower()
        if word not in [w.lower() for w in (await self.get(guild_id)).automod.wordfilter.banned_words]:
            return False

        def mutate(config: GuildConfig) -> None:
            config.automod.wordfilter.banned_words = [
                w for w in config.automod.wordfilter.banned_words if w.lower() != word
            ]
        await self.set(guild_id, mutate)
        return True

    async def set_wordfilter_enabled(self, guild_id: GuildID, enabled: bool) -> GuildConfig:
        def mutate(config: GuildConfig) -> None:
            config.automod.wordfilter.enabled = bool(enabled)
        return await self.set(guild_id, mutate)

    async def set_mod_log_channel(self, guild_id: GuildID, channel_id: Optional[ChannelID]) -> GuildConfig:
        """Set the mod-log channel, or clear it when ``channel_id`` is None."""
        value = int(channel_id) if channel_id is not None else None

        def mutate(config: GuildConfig) -> None:
            config.mod_log_channel = value
        return await self.set(guild_id, mutate)

    async def set_prefix(self, guild_id: GuildID, prefix: str) -> GuildConfig:
        """
        Change the command prefix.

        Raises:
            ValueError: If the prefix is empty or longer than ``MAX_PREFIX_LENGTH``.
        """
        if not prefix or len(prefix) > constants.MAX_PREFIX_LENGTH:
            raise ValueError(f"Prefix must be 1-{constants.MAX_PREFIX_LENGTH} characters")

        def mutate(config: GuildConfig) -> None:
            config.prefix = prefix
        return await self.set(guild_id, mutate)

    async def set_leveling_enabled(self, guild_id: GuildID, enabled: bool) -> GuildConfig:
        def mutate(config: GuildConfig) -> None:
            config.leveling_enabled = bool(enabled)
        return await self.set(guild_id, mutate)

    async def set_nukemode(self, guild_id: GuildID, enabled: bool) -> bool:
        """
        Flip the safe-mode flag. Only SafeModeController should call this.

        The check and the flip happen before the first await, so of two
        concurrent calls with the same value only one reports a change.

        Returns:
            True if the flag changed, False if it already had that value.
        """
        guild_id = GuildID(guild_id)
        if self.peek(guild_id).nukemode == enabled:
            return False

        def mutate(config: GuildConfig) -> None:
            config.nukemode = enabled
        self._apply(guild_id, mutate)
        await self._persist(guild_id)
        return True

    # ========== Lifecycle ==========

    async def shutdown(self) -> None:
        """Close the database connection."""
        if self._database is not None:
            await self._database.shutdown()
        self._db_initialized = False
        logger.info("[CONFIG STORE] Shutdown complete")

    # ========== Private Methods ==========

    def _ensure(self, guild_id: GuildID) -> tuple[Dict[str, Any], bool]:
        """Return the stored record merged with defaults, creating it if needed."""
        record = self._records.get(guild_id)
        merged, changed = merge_defaults(record if record is not None else {})
        if record is None:
            changed = True
        self._records[guild_id] = merged
        return merged, changed

    def _apply(self, guild_id: GuildID, mutator: ConfigMutator) -> GuildConfig:
        record, _ = self._ensure(guild_id)
        config = GuildConfig.from_record(guild_id, record)
        mutator(config)
        _overlay(record, config.to_record())
        return GuildConfig.from_record(guild_id, record)

    async def _persist(self, guild_id: GuildID) -> bool:
        """Write a guild's current record to the database, logging any failure."""
        if self._db is None:
            return True

        record = self._records.get(guild_id)
        if record is None:
            return False

        try:
            saved = await self._db.save(guild_id, copy.deepcopy(record))
        except Exception:
            logger.exception("[CONFIG STORE] Error persisting guild %s", guild_id)
            return False

        if not saved:
            logger.error("[CONFIG STORE] Failed to persist guild %s; keeping in-memory change", guild_id)
        return saved
