from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, Tuple
import yaml

from guildguard import constants
from guildguard.datatypes.event_datatypes import DestructiveEventKind
from guildguard.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()
DEFAULT_DB_PATH = Path("./data/guildguard.db")

DEFAULT_NUKE_THRESHOLDS: Dict[DestructiveEventKind, int] = {
    DestructiveEventKind.CHANNEL_DELETE: constants.NUKE_THRESHOLD_CHANNEL_DELETES,
    DestructiveEventKind.ROLE_DELETE: constants.NUKE_THRESHOLD_ROLE_DELETES,
    DestructiveEventKind.BAN: constants.NUKE_THRESHOLD_BANS,
}


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml`` and exposes typed
    properties for every engine constant, falling back to the built-in
    defaults in :mod:`guildguard.constants` when a key is missing or malformed.
    Uses fcntl file locks for safe concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                if not isinstance(data, dict):
                    logger.warning("[APP CONFIGURATION] Config %s is not a mapping; using defaults.", self.config_path)
                    return {}
                return data
        except FileNotFoundError:
            logger.warning("[APP CONFIGURATION] Config file %s not found; using defaults.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    @staticmethod
    def _positive_int(value: Any, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Location of the SQLite database file."""
        value = self._section("database").get("path")
        return Path(value).resolve() if value else DEFAULT_DB_PATH.resolve()

    @property
    def antinuke_window_ms(self) -> int:
        """Sliding window for destructive-event counting, in milliseconds."""
        return self._positive_int(self._section("antinuke").get("window_ms"), constants.NUKE_DETECTION_WINDOW_MS)

    @property
    def antinuke_thresholds(self) -> Dict[DestructiveEventKind, int]:
        """Per-kind event counts that trip safe mode within the window.

        Keys in the YAML file are the enum values (``channel_delete``,
        ``role_delete``, ``ban``); unknown keys are ignored.
        """
        configured = self._section("antinuke").get("thresholds", {})
        if not isinstance(configured, dict):
            configured = {}

        thresholds = dict(DEFAULT_NUKE_THRESHOLDS)
        for kind in DestructiveEventKind:
            if kind.value in configured:
                thresholds[kind] = self._positive_int(configured[kind.value], thresholds[kind])
        return thresholds

    @property
    def safe_mode_slowmode_seconds(self) -> int:
        """Slow-mode applied to every editable text channel on safe-mode entry."""
        return self._positive_int(self._section("safe_mode").get("slowmode_seconds"), constants.SAFE_MODE_SLOWMODE_SECONDS)

    @property
    def spam_timeout_ms(self) -> int:
        return self._positive_int(self._section("automod").get("spam_timeout_ms"), constants.SPAM_TIMEOUT_MS)

    @property
    def transient_warning_seconds(self) -> int:
        return self._positive_int(self._section("automod").get("warning_ttl_seconds"), constants.TRANSIENT_WARNING_SECONDS)

    @property
    def safe_domains(self) -> Tuple[str, ...]:
        """Allow-listed link domains, lower-cased.

        A configured list replaces the built-in one entirely.
        """
        configured = self._section("automod").get("safe_domains")
        if isinstance(configured, list) and configured:
            return tuple(str(domain).strip().lower() for domain in configured if str(domain).strip())
        return constants.SAFE_DOMAINS

    @property
    def xp_cooldown_seconds(self) -> int:
        return self._positive_int(self._section("leveling").get("cooldown_seconds"), constants.XP_COOLDOWN_SECONDS)


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
