"""
Message-level automatic moderation.

Filters run in a fixed order (link, word, spam) and stop at the first match.
"""
