"""
Database package for Guildguard.

Provides a single long-lived aiosqlite connection, schema management and the
Database coordinator used by the config store, moderation log and leveling.

Public API:
    - Database: Main database management class
    - DB_PATH: Default database location
"""
