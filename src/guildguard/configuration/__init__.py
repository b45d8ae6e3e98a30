"""
Configuration management for Guildguard.

- **app_configuration.py**: YAML configuration loader for process-wide engine
  settings (anti-nuke thresholds, safe-mode slow-mode, spam timeout, link
  allow-list, database path). Falls back to built-in defaults on missing or
  malformed config files.
"""
