import pytest

from guildguard.automod.link_filter import extract_links, find_unsafe_link, is_safe_link, normalize_hostname


@pytest.mark.parametrize(
    "link",
    [
        "https://discord.com/channels/1/2",
        "https://www.youtube.com/watch?v=abc",
        "http://gist.github.com/user/1",
        "www.reddit.com/r/python",
        "HTTPS://WWW.GITHUB.COM/x",
    ],
)
def test_allow_listed_domains_and_subdomains_are_safe(link):
    assert is_safe_link(link) is True


@pytest.mark.parametrize(
    "link",
    [
        "https://evil.example/",
        "https://notdiscord.com/",
        "https://discord.com.evil.io/",
        "www.freenitro.gift/claim",
        "http://[::1",
        "https://evil.com\\@discord.com/x",
        "https://discord.com@evil.io/",
    ],
)
def test_other_domains_and_unparsable_links_are_unsafe(link):
    assert is_safe_link(link) is False


def test_normalize_hostname_prepends_scheme_and_strips_www():
    assert normalize_hostname("www.Example.COM/path") == "example.com"
    assert normalize_hostname("https://sub.example.com:8080/x") == "sub.example.com"
    assert normalize_hostname("http://[::1") is None


def test_extract_links_requires_scheme_or_www():
    content = "see https://a.example.com and www.b.example.org but not c.example.net"

    assert extract_links(content) == ["https://a.example.com", "www.b.example.org"]


def test_find_unsafe_link_returns_first_offender():
    content = "ok https://github.com/x then https://phish.example/login and https://bad.example"

    assert find_unsafe_link(content) == "https://phish.example/login"
    assert find_unsafe_link("just text, and https://youtu.be/abc") is None


def test_custom_allow_list():
    assert find_unsafe_link("https://docs.python.org/3/", ["python.org"]) is None
    assert find_unsafe_link("https://github.com/x", ["python.org"]) == "https://github.com/x"


def test_backslash_before_at_sign_does_not_hide_real_host():
    message = "claim here https://evil.com\\@discord.com/x"

    assert normalize_hostname("https://evil.com\\@discord.com/x") == "evil.com"
    assert normalize_hostname("https://user@discord.com/x") is None
    assert find_unsafe_link(message) == "https://evil.com\\@discord.com/x"
