"""
Built-in defaults for the guild safety engine.

Every value here can be overridden from ``config/app_config.yml`` through
:class:`guildguard.configuration.app_configuration.AppConfig`.
"""

DEFAULT_PREFIX = ".."
MAX_PREFIX_LENGTH = 5

# Anti-spam defaults for new guilds
DEFAULT_ANTISPAM_MAX = 5
DEFAULT_ANTISPAM_WINDOW_MS = 10 * 1000

# Anti-nuke detection
NUKE_DETECTION_WINDOW_MS = 10 * 1000
NUKE_THRESHOLD_CHANNEL_DELETES = 3
NUKE_THRESHOLD_ROLE_DELETES = 3
NUKE_THRESHOLD_BANS = 3

# Safe mode
SAFE_MODE_SLOWMODE_SECONDS = 10

# Automod enforcement
SPAM_TIMEOUT_MS = 5 * 60 * 1000
TRANSIENT_WARNING_SECONDS = 5

# Leveling
XP_COOLDOWN_SECONDS = 60
XP_GAIN_MIN = 15
XP_GAIN_MAX = 25
LEADERBOARD_SIZE = 10

# Rows shown by /modlog history
MOD_HISTORY_LIMIT = 10

# Links from these services (and their subdomains) pass the link filter
SAFE_DOMAINS = (
    "discord.gg", "discord.com", "discordapp.com", "youtube.com", "youtu.be",
    "twitch.tv", "twitter.com", "x.com", "github.com", "tenor.com", "giphy.com",
    "reddit.com", "spotify.com", "amazon.com", "google.com", "apple.com",
    "docs.google.com", "sheets.google.com", "forms.gle", "media.discordapp.net",
)

# Embed palette
EMBED_COLOR_SUCCESS = 0x28A745
EMBED_COLOR_ERROR = 0xDC3545
EMBED_COLOR_INFO = 0x007BFF
EMBED_COLOR_WARN = 0xFFC107
EMBED_COLOR_MOD = 0x17A2B8
EMBED_COLOR_LEVEL = 0x7646A7
