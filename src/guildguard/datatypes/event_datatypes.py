"""
Destructive-event types consumed by the anti-nuke detector.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Hashable


class DestructiveEventKind(Enum):
    """Guild events counted towards a nuke attempt."""

    CHANNEL_DELETE = "channel_delete"
    ROLE_DELETE = "role_delete"
    BAN = "ban"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class EventRecord:
    """A single timestamped entry inside an :class:`EventWindow`.

    Attributes:
        scope: What the event is counted against, usually a guild
        kind: Any hashable; a :class:`DestructiveEventKind` or a user ID
        timestamp_ms: Clock reading when the event was recorded
    """
    scope: Hashable
    kind: Hashable
    timestamp_ms: float
