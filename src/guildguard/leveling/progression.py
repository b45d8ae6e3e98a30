"""
XP curve and level-up arithmetic.

Reaching level ``l + 1`` from level ``l`` costs ``5*l**2 + 50*l + 100`` XP.
XP beyond the cost carries over, so one large award can cross several levels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def xp_for_level(level: int) -> int:
    """XP needed to advance from ``level`` to the next one."""
    return 5 * level ** 2 + 50 * level + 100


def apply_level_ups(level: int, xp: int) -> Tuple[int, int]:
    """
    Convert accumulated XP into levels.

    Returns:
        (level, xp) after every level-up the XP pays for.
    """
    while xp >= xp_for_level(level):
        xp -= xp_for_level(level)
        level += 1
    return level, xp


def total_xp(level: int, xp: int) -> int:
    """All XP ever earned by someone at ``level`` holding ``xp``."""
    return xp + sum(xp_for_level(l) for l in range(level))


@dataclass(frozen=True, slots=True)
class UserLevel:
    level: int = 0
    xp: int = 0


@dataclass(frozen=True, slots=True)
class LevelUpResult:
    """Outcome of an XP award that crossed at least one level.

    Attributes:
        previous_level: Level before the award
        level: Level after the award
        xp: Carried-over XP towards the next level
        gained: XP granted by the award
    """
    previous_level: int
    level: int
    xp: int
    gained: int

    @property
    def levels_gained(self) -> int:
        return self.level - self.previous_level
