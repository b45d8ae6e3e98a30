"""
Tests for the embed builders.
"""

from types import SimpleNamespace

from guildguard import constants
from guildguard.datatypes.action_datatypes import ActionType, AutomodRule
from guildguard.ui import embeds


def test_spam_warning_states_timeout_minutes():
    embed = embeds.automod_warning_embed(AutomodRule.SPAM, "<@5>", 300_000)

    assert embed.title == "🚫 Spam Detected"
    assert embed.description == "<@5> has been timed out for 5 minutes for spamming."
    assert embed.colour.value == constants.EMBED_COLOR_WARN


def test_link_warning_mentions_author():
    embed = embeds.automod_warning_embed(AutomodRule.LINK, "<@5>")

    assert embed.title == "🔗 Suspicious Link Blocked"
    assert embed.description.startswith("<@5>:")


def test_mod_log_embed_fields():
    user = SimpleNamespace(mention="<@5>", id=5)
    channel = SimpleNamespace(mention="<#3>")

    embed = embeds.mod_log_embed(ActionType.TIMEOUT, "Spam detected", user=user, channel=channel)

    assert embed.title == "⏱️ Timeout"
    assert [field.name for field in embed.fields] == ["User", "Channel", "Reason"]
    assert embed.fields[0].value == "<@5> (`5`)"
    assert embed.fields[2].value == "Spam detected"


def test_mod_log_embed_without_reason():
    embed = embeds.mod_log_embed(ActionType.DELETE, "")

    assert embed.fields[-1].value == "No reason given"


def test_safe_mode_embeds():
    on = embeds.safe_mode_embed(True, roles_locked=4, channels_throttled=2, reason="Possible nuke detected")
    off = embeds.safe_mode_embed(False, reason="Manual")

    assert on.title == "🚨 Safe Mode On"
    assert {field.name: field.value for field in on.fields}["Roles locked"] == "4"
    assert off.title == "✅ Safe Mode Off"
    assert off.fields[-1].name == "Note"


def test_level_status_progress_never_negative():
    embed = embeds.level_status_embed("Tester", 1, 200, 155)

    assert {field.name: field.value for field in embed.fields}["XP to Next Level"] == "0 XP"


def test_leaderboard_medals_then_diamonds():
    entries = [(user_id, 1, 100 + user_id) for user_id in range(1, 5)]

    lines = embeds.leaderboard_embed(entries).description.splitlines()

    assert [line.split(" ")[0] for line in lines] == ["🥇", "🥈", "🥉", "🔹"]
    assert lines[3] == "🔹 **#4** - <@4> | **Level 1** (104 Total XP)"


def test_mod_history_tolerates_unknown_action_values():
    rows = [{"action": "warn", "reason": "", "user_id": None, "timestamp": "2024-01-01 00:00:00"}]

    line = embeds.mod_history_embed(rows).description

    assert line == "⚙️ `2024-01-01 00:00:00` **Warn**: No reason given"
