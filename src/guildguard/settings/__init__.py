"""
Per-guild settings for Guildguard.

- **config_store.py**: ConfigStore, the only owner of persisted guild
  configuration. Reads self-heal missing fields from defaults; writes apply in
  memory first, then persist.
- **guild_config_db.py**: Database access layer for the guild_config table.
"""
