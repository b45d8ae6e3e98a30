"""
Link filter: finds URL-like substrings and checks them against an allow-list
of domains. A link is safe when its hostname, lower-cased and without a
leading ``www.``, equals an allowed domain or is a subdomain of one.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from guildguard import constants

# Links with a scheme or a leading www.; bare hostnames are not treated as links
URL_REGEX_PATTERN = re.compile(
    r"(https?://(?:www\.|(?!www))[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]\.[^\s]{2,}"
    r"|www\.[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]\.[^\s]{2,}"
    r"|https?://(?:www\.|(?!www))[a-zA-Z0-9]+\.[^\s]{2,}"
    r"|www\.[a-zA-Z0-9]+\.[^\s]{2,})",
    re.IGNORECASE,
)


def extract_links(content: str) -> List[str]:
    return URL_REGEX_PATTERN.findall(content or "")


def normalize_hostname(link: str) -> Optional[str]:
    """
    Hostname of ``link`` as compared against the allow-list.

    Backslashes are read as path separators, the way browsers and Discord
    clients parse http(s) links. Links carrying credentials before the host
    (``user@host``) are rejected.

    Returns:
        The lower-cased hostname without ``www.``, or None if the link cannot
        be parsed.
    """
    link = link.replace("\\", "/")
    if not link.lower().startswith(("http://", "https://")):
        link = "http://" + link

    try:
        parts = urlsplit(link)
        hostname = parts.hostname
    except ValueError:
        return None

    if not hostname or "@" in parts.netloc:
        return None
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def is_safe_link(link: str, safe_domains: Iterable[str] = constants.SAFE_DOMAINS) -> bool:
    hostname = normalize_hostname(link)
    if hostname is None:
        return False
    return any(hostname == domain or hostname.endswith("." + domain) for domain in safe_domains)


def find_unsafe_link(content: str, safe_domains: Iterable[str] = constants.SAFE_DOMAINS) -> Optional[str]:
    """Return the first link in ``content`` that is not allowed, or None."""
    domains = tuple(safe_domains)
    for link in extract_links(content):
        if not is_safe_link(link, domains):
            return link
    return None
