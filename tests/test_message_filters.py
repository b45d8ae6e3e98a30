from guildguard.automod.spam_tracker import SpamTracker
from guildguard.automod.word_filter import find_banned_word
from guildguard.datatypes.discord_datatypes import GuildID, UserID

from fakes import FakeClock


def test_banned_word_is_case_insensitive_substring():
    assert find_banned_word("This is SUPERBAD stuff", ["bad"]) == "bad"
    assert find_banned_word("all good", ["bad"]) is None
    assert find_banned_word("", ["bad"]) is None
    assert find_banned_word("anything", []) is None


def test_spam_tracker_counts_per_member_and_guild():
    clock = FakeClock(0)
    tracker = SpamTracker(clock=clock)

    for _ in range(3):
        tracker.record_message(GuildID(1), UserID(5), 10_000)
    tracker.record_message(GuildID(1), UserID(6), 10_000)
    tracker.record_message(GuildID(2), UserID(5), 10_000)

    assert tracker.count(GuildID(1), UserID(5), 10_000) == 3
    assert tracker.count(GuildID(1), UserID(6), 10_000) == 1
    assert tracker.count(GuildID(2), UserID(5), 10_000) == 1


def test_spam_tracker_uses_window_given_per_call():
    clock = FakeClock(0)
    tracker = SpamTracker(clock=clock)
    tracker.record_message(GuildID(1), UserID(5), 10_000)

    clock.now = 3_000
    assert tracker.record_message(GuildID(1), UserID(5), 2_000) == 1

    clock.now = 60_000
    assert tracker.count(GuildID(1), UserID(5), 10_000) == 0


def test_spam_tracker_clear_guild():
    tracker = SpamTracker(clock=FakeClock(0))
    tracker.record_message(GuildID(1), UserID(5), 10_000)
    tracker.record_message(GuildID(2), UserID(5), 10_000)

    tracker.clear_guild(GuildID(1))

    assert tracker.count(GuildID(1), UserID(5), 10_000) == 0
    assert tracker.count(GuildID(2), UserID(5), 10_000) == 1


def test_spam_tracker_does_not_keep_idle_members():
    clock = FakeClock(0)
    tracker = SpamTracker(clock=clock)
    for user_id in range(1_001):
        tracker.record_message(GuildID(1), UserID(user_id), 5_000)

    clock.now = 60_000
    tracker.record_message(GuildID(1), UserID(5), 5_000)

    assert len(tracker._window) == 1
