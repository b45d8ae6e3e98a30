"""
Per-guild configuration values and their defaults.

A guild's configuration is stored as a JSON object using the keys below
(``automod.bannedWords``, ``levelingEnabled``, ``modLogChannel``...). Stored
records may be partial or stale; :func:`merge_defaults` repairs them one level
deep and :class:`GuildConfig` gives callers a typed, snake_case view.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from guildguard import constants
from guildguard.datatypes.discord_datatypes import GuildID

DEFAULT_GUILD_RECORD: Dict[str, Any] = {
    "prefix": constants.DEFAULT_PREFIX,
    "automod": {
        "antilink": False,
        "antispam": {
            "enabled": True,
            "max": constants.DEFAULT_ANTISPAM_MAX,
            "window": constants.DEFAULT_ANTISPAM_WINDOW_MS,
        },
        "wordfilter": {"enabled": False, "bannedWords": []},
        "whitelistChannels": [],
        "whitelistRoles": [],
        "whitelistUsers": [],
    },
    "nukemode": False,
    "levelingEnabled": True,
    "modLogChannel": None,
    "slowmode": 0,
}


def default_guild_record() -> Dict[str, Any]:
    """Return a fresh, fully-populated default record."""
    return copy.deepcopy(DEFAULT_GUILD_RECORD)


def merge_defaults(record: Any) -> Tuple[Dict[str, Any], bool]:
    """
    Fill missing keys of a stored record from the defaults.

    Top-level keys missing from the record are copied from the defaults. For
    keys whose default is an object, each missing sub-key is copied
    individually; anything deeper is left alone. Lists are only checked for
    presence, never merged. A value whose type contradicts an object default
    (for example ``"automod": true``) is replaced by the default. Keys the
    defaults do not know about are preserved.

    Args:
        record: Stored value for one guild; anything that is not a dict is
            treated as an empty record.

    Returns:
        (merged_record, changed): the repaired record (the same dict when the
        input was a dict) and whether anything had to be filled in.
    """
    changed = False
    if not isinstance(record, dict):
        record = {}
        changed = True

    for key, default in DEFAULT_GUILD_RECORD.items():
        if key not in record:
            record[key] = copy.deepcopy(default)
            changed = True
        elif isinstance(default, dict):
            current = record[key]
            if not isinstance(current, dict):
                record[key] = copy.deepcopy(default)
                changed = True
                continue
            for sub_key, sub_default in default.items():
                if sub_key not in current:
                    current[sub_key] = copy.deepcopy(sub_default)
                    changed = True

    return record, changed


def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_id_list(value: Any) -> List[int]:
    if not isinstance(value, list):
        return []
    ids: List[int] = []
    for item in value:
        try:
            ids.append(int(item))
        except (TypeError, ValueError):
            continue
    return ids


def _section(record: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = record.get(key)
    return value if isinstance(value, dict) else {}


@dataclass(slots=True)
class AntispamConfig:
    enabled: bool = True
    max: int = constants.DEFAULT_ANTISPAM_MAX
    window_ms: int = constants.DEFAULT_ANTISPAM_WINDOW_MS


@dataclass(slots=True)
class WordFilterConfig:
    enabled: bool = False
    banned_words: List[str] = field(default_factory=list)


@dataclass(slots=True)
class AutomodConfig:
    antilink: bool = False
    antispam: AntispamConfig = field(default_factory=AntispamConfig)
    wordfilter: WordFilterConfig = field(default_factory=WordFilterConfig)
    # Reserved: declared and persisted, not consulted by any filter yet
    whitelist_channels: List[int] = field(default_factory=list)
    whitelist_roles: List[int] = field(default_factory=list)
    whitelist_users: List[int] = field(default_factory=list)


@dataclass(slots=True)
class GuildConfig:
    """Typed view of one guild's configuration record."""

    guild_id: GuildID
    prefix: str = constants.DEFAULT_PREFIX
    automod: AutomodConfig = field(default_factory=AutomodConfig)
    nukemode: bool = False
    leveling_enabled: bool = True
    mod_log_channel: Optional[int] = None
    slowmode: int = 0

    @classmethod
    def from_record(cls, guild_id: GuildID, record: Dict[str, Any]) -> "GuildConfig":
        """Build a typed view, substituting defaults for malformed values."""
        automod = _section(record, "automod")
        antispam = _section(automod, "antispam")
        wordfilter = _section(automod, "wordfilter")

        banned_words = wordfilter.get("bannedWords")
        if not isinstance(banned_words, list):
            banned_words = []

        mod_log_channel = record.get("modLogChannel")
        try:
            mod_log_channel = int(mod_log_channel) if mod_log_channel is not None else None
        except (TypeError, ValueError):
            mod_log_channel = None

        prefix = record.get("prefix")
        if not isinstance(prefix, str) or not prefix or len(prefix) > constants.MAX_PREFIX_LENGTH:
            prefix = constants.DEFAULT_PREFIX

        return cls(
            guild_id=GuildID(guild_id),
            prefix=prefix,
            automod=AutomodConfig(
                antilink=_as_bool(automod.get("antilink"), False),
                antispam=AntispamConfig(
                    enabled=_as_bool(antispam.get("enabled"), True),
                    max=_as_int(antispam.get("max"), constants.DEFAULT_ANTISPAM_MAX),
                    window_ms=_as_int(antispam.get("window"), constants.DEFAULT_ANTISPAM_WINDOW_MS),
                ),
                wordfilter=WordFilterConfig(
                    enabled=_as_bool(wordfilter.get("enabled"), False),
                    banned_words=[str(word) for word in banned_words if str(word)],
                ),
                whitelist_channels=_as_id_list(automod.get("whitelistChannels")),
                whitelist_roles=_as_id_list(automod.get("whitelistRoles")),
                whitelist_users=_as_id_list(automod.get("whitelistUsers")),
            ),
            nukemode=_as_bool(record.get("nukemode"), False),
            leveling_enabled=_as_bool(record.get("levelingEnabled"), True),
            mod_log_channel=mod_log_channel,
            slowmode=_as_int(record.get("slowmode"), 0),
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialise back to the stored JSON shape."""
        automod = self.automod
        return {
            "prefix": self.prefix,
            "automod": {
                "antilink": automod.antilink,
                "antispam": {
                    "enabled": automod.antispam.enabled,
                    "max": automod.antispam.max,
                    "window": automod.antispam.window_ms,
                },
                "wordfilter": {
                    "enabled": automod.wordfilter.enabled,
                    "bannedWords": list(automod.wordfilter.banned_words),
                },
                "whitelistChannels": list(automod.whitelist_channels),
                "whitelistRoles": list(automod.whitelist_roles),
                "whitelistUsers": list(automod.whitelist_users),
            },
            "nukemode": self.nukemode,
            "levelingEnabled": self.leveling_enabled,
            "modLogChannel": self.mod_log_channel,
            "slowmode": self.slowmode,
        }
