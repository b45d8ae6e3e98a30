"""
Message-level automod pipeline.

Filters run in a fixed order and the first hit wins:

1. Link filter, when ``automod.antilink`` is on
2. Word filter, when enabled and the banned list is non-empty
3. Spam filter, when enabled; only messages reaching this stage are counted

:meth:`AutomodPipeline.evaluate` only decides. :meth:`AutomodPipeline.on_message`
also enforces the decision: it deletes the message, posts a short-lived
warning, times out spammers the bot has standing over, and reports to the
mod log. Enforcement is best effort.
"""

from __future__ import annotations

from typing import Iterable, Optional

import discord

from guildguard import constants
from guildguard.automod.link_filter import find_unsafe_link
from guildguard.automod.spam_tracker import SpamTracker
from guildguard.automod.word_filter import find_banned_word
from guildguard.datatypes.action_datatypes import (
    ALLOW,
    ActionData,
    ActionType,
    AutomodDecision,
    AutomodRule,
    AutomodVerdict,
)
from guildguard.datatypes.discord_datatypes import GuildID, UserID
from guildguard.settings.config_store import ConfigStore
from guildguard.ui import embeds
from guildguard.util.discord_gateway import PlatformGateway
from guildguard.util.logger import get_logger

logger = get_logger("automod_pipeline")

RULE_REASONS = {
    AutomodRule.LINK: "Suspicious link blocked",
    AutomodRule.WORD: "Filtered word",
    AutomodRule.SPAM: "Spam",
}


class AutomodPipeline:
    """
    Args:
        config_store: Source of each guild's automod settings
        gateway: Discord operations used to enforce decisions
        spam_tracker: Per-member message counters; a fresh one when omitted
        modlog: Optional sink that receives a report of each enforced action
        safe_domains: Link allow-list
        spam_timeout_ms: Timeout applied to spammers
        warning_ttl_seconds: Lifetime of the warning posted in the channel
    """

    def __init__(
        self,
        config_store: ConfigStore,
        gateway: PlatformGateway,
        spam_tracker: Optional[SpamTracker] = None,
        modlog=None,
        safe_domains: Iterable[str] = constants.SAFE_DOMAINS,
        spam_timeout_ms: int = constants.SPAM_TIMEOUT_MS,
        warning_ttl_seconds: float = constants.TRANSIENT_WARNING_SECONDS,
    ):
        self._config_store = config_store
        self._gateway = gateway
        self.spam_tracker = spam_tracker or SpamTracker()
        self._modlog = modlog
        self.safe_domains = tuple(safe_domains)
        self.spam_timeout_ms = spam_timeout_ms
        self.warning_ttl_seconds = warning_ttl_seconds

    async def evaluate(self, guild_id: GuildID, author_id: UserID, content: str) -> AutomodDecision:
        """Decide what to do with one message. Has no side effects beyond spam counting."""
        config = await self._config_store.get(guild_id)
        automod = config.automod

        if automod.antilink:
            link = find_unsafe_link(content, self.safe_domains)
            if link is not None:
                return AutomodDecision(AutomodVerdict.DELETE_WARN, AutomodRule.LINK, link)

        wordfilter = automod.wordfilter
        if wordfilter.enabled and wordfilter.banned_words:
            word = find_banned_word(content, wordfilter.banned_words)
            if word is not None:
                return AutomodDecision(AutomodVerdict.DELETE_WARN, AutomodRule.WORD, word)

        antispam = automod.antispam
        if antispam.enabled:
            count = self.spam_tracker.record_message(guild_id, author_id, antispam.window_ms)
            if count > antispam.max:
                return AutomodDecision(AutomodVerdict.DELETE_TIMEOUT, AutomodRule.SPAM, str(count))

        return ALLOW

    async def on_message(self, message: discord.Message) -> AutomodDecision:
        """
        Evaluate and enforce. Bot authors and direct messages are always allowed.
        """
        if message.author.bot or message.guild is None:
            return ALLOW

        guild_id = GuildID.from_object(message.guild)
        author_id = UserID.from_object(message.author)

        decision = await self.evaluate(guild_id, author_id, message.content)
        if decision.allowed:
            return decision

        logger.info(
            "[AUTOMOD] %s in guild %s by user %s (%s)",
            decision.verdict, guild_id, author_id, decision.rule,
        )
        await self._enforce(message, decision)
        return decision

    async def _enforce(self, message: discord.Message, decision: AutomodDecision) -> None:
        guild_id = GuildID.from_object(message.guild)
        author = message.author
        reason = RULE_REASONS[decision.rule]

        await self._gateway.delete_message(message)

        if decision.verdict is AutomodVerdict.DELETE_WARN:
            await self._gateway.post_transient(
                message.channel,
                embeds.automod_warning_embed(decision.rule, author.mention),
                self.warning_ttl_seconds,
            )
            await self._report(message, ActionType.DELETE, f"{reason}: {decision.detail}")
            return

        # DELETE_TIMEOUT: the message is gone either way; the timeout needs standing
        if not isinstance(author, discord.Member):
            return
        if self._gateway.is_timed_out(author) or not self._gateway.has_standing_over(author):
            logger.debug("[AUTOMOD] Not timing out %s in guild %s", author.id, guild_id)
            return

        if await self._gateway.timeout_member(author, self.spam_timeout_ms, "Automatic antispam timeout"):
            await self._gateway.post_transient(
                message.channel,
                embeds.automod_warning_embed(AutomodRule.SPAM, author.mention, self.spam_timeout_ms),
                self.warning_ttl_seconds,
            )
            await self._report(message, ActionType.TIMEOUT, f"{reason}: {decision.detail} messages in window")

    async def _report(self, message: discord.Message, action_type: ActionType, reason: str) -> None:
        if self._modlog is None:
            return
        await self._modlog.log(
            message.guild,
            embeds.mod_log_embed(action_type, reason, user=message.author, channel=message.channel),
            action=ActionData(
                GuildID.from_object(message.guild),
                action_type,
                reason,
                UserID.from_object(message.author),
            ),
        )
