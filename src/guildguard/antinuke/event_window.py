"""
Sliding-window event counter.

Events are counted per ``(scope, kind)`` key, where scope is a guild ID and
kind is an event category or a user ID. Each key keeps an ordered deque of
:class:`EventRecord` entries, pruned whenever the key is touched. Keys that
are never touched again are dropped by a sweep that runs at most once per
default window, so memory stays bounded by the event rate inside one window.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Callable, DefaultDict, Deque, Dict, Hashable, Optional, Tuple

from guildguard import constants
from guildguard.datatypes.event_datatypes import EventRecord

Clock = Callable[[], float]
Key = Tuple[Hashable, Hashable]


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class EventWindow:
    """
    Counts events inside a trailing time window.

    An event recorded at ``t`` is live while ``now - t < window_ms``.

    Args:
        window_ms: Default window length in milliseconds
        clock: Millisecond clock; injectable for deterministic tests
    """

    def __init__(self, window_ms: int = constants.NUKE_DETECTION_WINDOW_MS, clock: Optional[Clock] = None):
        self.window_ms = window_ms
        self._clock = clock or monotonic_ms
        self._events: DefaultDict[Key, Deque[EventRecord]] = defaultdict(deque)
        # Window last used for each key, so the sweep prunes with the same length
        self._key_windows: Dict[Key, int] = {}
        self._last_sweep = self._clock()

    def __len__(self) -> int:
        return len(self._events)

    def record(self, scope: Hashable, kind: Hashable, *, window_ms: Optional[int] = None) -> int:
        """
        Record one event and return how many are live for ``(scope, kind)``.

        Args:
            window_ms: Overrides the default window for this call
        """
        now = self._clock()
        self._sweep(now)

        key = (scope, kind)
        window = self._window(window_ms)
        entries = self._events[key]
        entries.append(EventRecord(scope, kind, now))
        self._key_windows[key] = window
        self._prune(entries, now, window)
        return len(entries)

    def count_in_window(self, scope: Hashable, kind: Hashable, *, window_ms: Optional[int] = None) -> int:
        """Count live events for ``(scope, kind)`` without recording one."""
        key = (scope, kind)
        entries = self._events.get(key)
        if not entries:
            return 0

        self._prune(entries, self._clock(), self._window(window_ms))
        if not entries:
            self._forget(key)
            return 0
        return len(entries)

    def clear(self, scope: Hashable) -> None:
        """Forget every kind recorded for ``scope``."""
        for key in [key for key in self._events if key[0] == scope]:
            self._forget(key)

    def _window(self, window_ms: Optional[int]) -> int:
        return self.window_ms if window_ms is None else window_ms

    def _forget(self, key: Key) -> None:
        self._events.pop(key, None)
        self._key_windows.pop(key, None)

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.window_ms:
            return
        self._last_sweep = now

        stale = [
            key
            for key, entries in self._events.items()
            if not entries or now - entries[-1].timestamp_ms >= self._key_windows.get(key, self.window_ms)
        ]
        for key in stale:
            self._forget(key)

    @staticmethod
    def _prune(entries: Deque[EventRecord], now: float, window: int) -> None:
        while entries and now - entries[0].timestamp_ms >= window:
            entries.popleft()
