"""
Action types and data structures for automod outcomes and logged actions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from guildguard.datatypes.discord_datatypes import GuildID, UserID


class ActionType(Enum):
    """Enumeration of actions recorded in the moderation log."""

    DELETE = "delete"
    TIMEOUT = "timeout"
    SAFE_MODE_ON = "safe_mode_on"
    SAFE_MODE_OFF = "safe_mode_off"

    def __str__(self) -> str:
        return self.value


class AutomodVerdict(Enum):
    """What the automod pipeline decided to do with a message."""

    ALLOW = "allow"
    DELETE_WARN = "delete_warn"
    DELETE_TIMEOUT = "delete_timeout"

    def __str__(self) -> str:
        return self.value


class AutomodRule(Enum):
    """Filter that produced a non-ALLOW verdict."""

    LINK = "link"
    WORD = "word"
    SPAM = "spam"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class AutomodDecision:
    """Outcome of evaluating one message.

    Attributes:
        verdict: Action to take
        rule: Filter that matched, None for ALLOW
        detail: Offending link or word, or the message count for spam
    """
    verdict: AutomodVerdict
    rule: Optional[AutomodRule] = None
    detail: str = ""

    @property
    def allowed(self) -> bool:
        return self.verdict is AutomodVerdict.ALLOW


ALLOW = AutomodDecision(AutomodVerdict.ALLOW)


@dataclass(slots=True)
class ActionData:
    """A moderation action written to the ``moderation_actions`` audit table.

    Attributes:
        guild_id: Guild the action happened in
        action: Type of action
        reason: Human-readable reason
        user_id: Affected user, when the action targets one
    """
    guild_id: GuildID
    action: ActionType
    reason: str
    user_id: Optional[UserID] = None
