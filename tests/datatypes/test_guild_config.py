from guildguard.datatypes.discord_datatypes import GuildID
from guildguard.datatypes.guild_config import (
    DEFAULT_GUILD_RECORD,
    GuildConfig,
    default_guild_record,
    merge_defaults,
)


def test_default_record_is_a_fresh_copy():
    record = default_guild_record()
    record["automod"]["wordfilter"]["bannedWords"].append("x")

    assert DEFAULT_GUILD_RECORD["automod"]["wordfilter"]["bannedWords"] == []


def test_merge_fills_missing_top_level_and_sub_keys():
    record = {"prefix": "!", "automod": {"antilink": True}}

    merged, changed = merge_defaults(record)

    assert changed is True
    assert merged is record
    assert merged["prefix"] == "!"
    assert merged["automod"]["antilink"] is True
    assert merged["automod"]["antispam"] == {"enabled": True, "max": 5, "window": 10000}
    assert merged["nukemode"] is False
    assert merged["modLogChannel"] is None


def test_merge_is_one_level_deep():
    record = default_guild_record()
    record["automod"]["antispam"] = {"enabled": False}

    merged, changed = merge_defaults(record)

    # Second-level objects are only checked for presence
    assert changed is False
    assert merged["automod"]["antispam"] == {"enabled": False}
    config = GuildConfig.from_record(GuildID(1), merged)
    assert config.automod.antispam.enabled is False
    assert config.automod.antispam.max == 5


def test_merge_replaces_non_object_values_and_records():
    merged, changed = merge_defaults({"automod": True})
    assert changed is True
    assert merged["automod"]["antilink"] is False

    merged, changed = merge_defaults(["not", "a", "record"])
    assert changed is True
    assert merged == default_guild_record()


def test_merge_keeps_unknown_keys_and_reports_no_change_for_complete_record():
    record = default_guild_record()
    record["legacy"] = {"a": 1}

    merged, changed = merge_defaults(record)

    assert changed is False
    assert merged["legacy"] == {"a": 1}


def test_from_record_tolerates_malformed_values():
    record = default_guild_record()
    record["prefix"] = ""
    record["nukemode"] = "yes"
    record["modLogChannel"] = "123"
    record["automod"]["antispam"]["max"] = "abc"
    record["automod"]["wordfilter"]["bannedWords"] = "notalist"
    record["automod"]["whitelistUsers"] = ["1", "x", 2]

    config = GuildConfig.from_record(GuildID(5), record)

    assert config.prefix == ".."
    assert config.nukemode is False
    assert config.mod_log_channel == 123
    assert config.automod.antispam.max == 5
    assert config.automod.wordfilter.banned_words == []
    assert config.automod.whitelist_users == [1, 2]


def test_from_record_replaces_overlong_prefix():
    record = default_guild_record()
    record["prefix"] = "!!!!!!"

    assert GuildConfig.from_record(GuildID(5), record).prefix == ".."

    record["prefix"] = "!!!!!"
    assert GuildConfig.from_record(GuildID(5), record).prefix == "!!!!!"


def test_to_record_round_trips_through_stored_shape():
    config = GuildConfig.from_record(GuildID(5), default_guild_record())
    config.automod.wordfilter.banned_words.append("bad")
    config.mod_log_channel = 99

    record = config.to_record()

    assert record["automod"]["wordfilter"]["bannedWords"] == ["bad"]
    assert record["modLogChannel"] == 99
    assert set(record) == set(DEFAULT_GUILD_RECORD)
