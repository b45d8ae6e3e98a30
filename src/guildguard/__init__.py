"""
Guildguard - Guild Safety Engine for Discord

Guildguard watches a Discord server for bulk-destructive activity and
message-level abuse, and keeps per-server safety configuration.

Core Components:

- **Config Store**: Per-guild configuration with default-merge-on-read
  semantics, persisted to SQLite one record per guild
- **Anti-Nuke**: Sliding-window counting of channel deletions, role deletions
  and bans, tripping an emergency safe mode when thresholds are reached
- **Safe Mode**: Strips destructive permissions from non-administrator roles
  and throttles text channels; deactivation flips the flag only
- **Automod**: Link allow-list, banned-word and spam-rate filters evaluated in
  a fixed order on every message
- **Moderation Log**: Best-effort notification of actions to a configured
  channel

Usage:
    from guildguard.main import main
    main()  # Starts the bot
"""
