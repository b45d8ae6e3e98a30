"""
Embed builders for command replies, automod warnings and mod-log entries.

Colours follow a fixed palette: success, error, info and warning replies,
moderation log entries, and leveling messages.
"""

import datetime
from typing import Any, Mapping, Optional, Sequence, Tuple

import discord

from guildguard import constants
from guildguard.datatypes.action_datatypes import ActionType, AutomodRule

ACTION_EMOJIS = {
    ActionType.DELETE: "🗑️",
    ActionType.TIMEOUT: "⏱️",
    ActionType.SAFE_MODE_ON: "🚨",
    ActionType.SAFE_MODE_OFF: "✅",
}
ACTION_EMOJIS_BY_VALUE = {action.value: emoji for action, emoji in ACTION_EMOJIS.items()}

# Title and body of the transient warning posted for each automod rule
AUTOMOD_WARNINGS = {
    AutomodRule.LINK: (
        "🔗 Suspicious Link Blocked",
        "{mention}: Only links from approved services are allowed. Suspicious link blocked.",
    ),
    AutomodRule.WORD: (
        "🗣️ Word Filter Blocked",
        "{mention}: Your message contained a filtered word.",
    ),
    AutomodRule.SPAM: (
        "🚫 Spam Detected",
        "{mention} has been timed out for {minutes} minutes for spamming.",
    ),
}


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _build(title: str, description: str, color: int) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=color, timestamp=_utcnow())


def success_embed(title: str, description: str) -> discord.Embed:
    return _build(title, description, constants.EMBED_COLOR_SUCCESS)


def error_embed(title: str, description: str) -> discord.Embed:
    return _build(title, description, constants.EMBED_COLOR_ERROR)


def info_embed(title: str, description: str) -> discord.Embed:
    return _build(title, description, constants.EMBED_COLOR_INFO)


def warn_embed(title: str, description: str) -> discord.Embed:
    return _build(title, description, constants.EMBED_COLOR_WARN)


def automod_warning_embed(rule: AutomodRule, mention: str, timeout_ms: int = constants.SPAM_TIMEOUT_MS) -> discord.Embed:
    """Build the short-lived warning posted in the channel after an automod hit."""
    title, template = AUTOMOD_WARNINGS[rule]
    return warn_embed(title, template.format(mention=mention, minutes=timeout_ms // 60000))


def mod_log_embed(
    action_type: ActionType,
    reason: str,
    *,
    user: Optional[discord.abc.User] = None,
    channel: Optional[discord.abc.GuildChannel] = None,
) -> discord.Embed:
    """
    Create a mod-log entry for an action taken by the engine.

    Args:
        action_type: What was done
        reason: Why it was done
        user: The affected user, if any
        channel: Where it happened, if relevant
    """
    emoji = ACTION_EMOJIS.get(action_type, "⚙️")
    action_name = action_type.value.replace("_", " ").title()

    embed = discord.Embed(
        title=f"{emoji} {action_name}",
        color=constants.EMBED_COLOR_MOD,
        timestamp=_utcnow(),
    )

    if user is not None:
        embed.add_field(name="User", value=f"{user.mention} (`{user.id}`)", inline=True)
    if channel is not None:
        embed.add_field(name="Channel", value=channel.mention, inline=True)

    embed.add_field(name="Reason", value=reason or "No reason given", inline=False)
    return embed


def safe_mode_embed(active: bool, *, roles_locked: int = 0, channels_throttled: int = 0, reason: str = "") -> discord.Embed:
    """Mod-log entry for a safe-mode transition."""
    action_type = ActionType.SAFE_MODE_ON if active else ActionType.SAFE_MODE_OFF
    embed = mod_log_embed(action_type, reason)
    if active:
        embed.add_field(name="Roles locked", value=str(roles_locked), inline=True)
        embed.add_field(name="Channels throttled", value=str(channels_throttled), inline=True)
    else:
        embed.add_field(
            name="Note",
            value="Stripped permissions are not restored automatically. Review your roles.",
            inline=False,
        )
    return embed


def level_up_embed(mention: str, level: int) -> discord.Embed:
    return _build(
        f"🎉 Level Up! Level {level}",
        f"**Congratulations** {mention}! You've reached **Level {level}**!",
        constants.EMBED_COLOR_LEVEL,
    )


def level_status_embed(display_name: str, level: int, xp: int, next_level_xp: int) -> discord.Embed:
    """Summary of a member's level, XP and progress towards the next level."""
    progress = min(xp / next_level_xp, 1.0) if next_level_xp > 0 else 0.0
    embed = discord.Embed(
        title=f"🌟 Level Status for {display_name}",
        color=constants.EMBED_COLOR_LEVEL,
        timestamp=_utcnow(),
    )
    embed.add_field(name="Level", value=f"**{level}**", inline=True)
    embed.add_field(name="Current XP", value=f"{xp} XP", inline=True)
    embed.add_field(name="XP to Next Level", value=f"{max(next_level_xp - xp, 0)} XP", inline=True)
    embed.add_field(
        name="Progress",
        value=f"`{'█' * int(progress * 10):<10}` {round(progress * 100)}%",
        inline=False,
    )
    embed.set_footer(text=f"Next Level: {level + 1} | Total XP needed: {next_level_xp}")
    return embed


LEADERBOARD_MEDALS = ("🥇", "🥈", "🥉")


def leaderboard_embed(entries: Sequence[Tuple[int, int, int]]) -> discord.Embed:
    """
    Top members of a guild by total XP.

    Args:
        entries: ``(user_id, level, total_xp)`` tuples, best first
    """
    lines = []
    for index, (user_id, level, total) in enumerate(entries):
        medal = LEADERBOARD_MEDALS[index] if index < len(LEADERBOARD_MEDALS) else "🔹"
        lines.append(f"{medal} **#{index + 1}** - <@{user_id}> | **Level {level}** ({total} Total XP)")
    return _build("🏆 Top 10 Server Level Leaders", "\n".join(lines), constants.EMBED_COLOR_LEVEL)


def mod_history_embed(rows: Sequence[Mapping[str, Any]]) -> discord.Embed:
    """Newest audit rows of a guild, one line each."""
    lines = []
    for row in rows:
        emoji = ACTION_EMOJIS_BY_VALUE.get(row["action"], "⚙️")
        target = f" <@{row['user_id']}>" if row.get("user_id") else ""
        lines.append(
            f"{emoji} `{row['timestamp']}` **{str(row['action']).replace('_', ' ').title()}**"
            f"{target}: {row['reason'] or 'No reason given'}"
        )
    return _build("📜 Recent Moderation Actions", "\n".join(lines)[:4000], constants.EMBED_COLOR_MOD)
