"""
Tests for frontier module.

Tests URL normalization, seed validation, deduplication, and budgets.
"""

import pytest

from crawly.core.exceptions import InvalidSeedError
from crawly.crawler import (
    Frontier,
    FrontierEntry,
    normalize_url,
    host_key,
    validate_seed,
)


class TestNormalizeUrl:
    """Tests for URL normalization."""

    def test_lowercases_scheme_and_host(self):
        """Scheme and host are case-insensitive."""
        assert normalize_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_removes_default_port(self):
        """Default ports are dropped."""
        assert normalize_url("http://example.com:80/a") == "http://example.com/a"
        assert normalize_url("https://example.com:443/a") == "https://example.com/a"

    def test_keeps_custom_port(self):
        """Non-default ports are significant."""
        assert normalize_url("https://example.com:8443/a") == "https://example.com:8443/a"

    def test_trailing_slash(self):
        """Trailing slash is removed except for root."""
        assert normalize_url("https://example.com/docs/") == "https://example.com/docs"
        assert normalize_url("https://example.com") == "https://example.com/"

    def test_removes_fragment(self):
        """Fragments do not make a URL distinct."""
        assert normalize_url("https://example.com/a#top") == "https://example.com/a"

    def test_sorts_query(self):
        """Query parameter order does not matter."""
        assert (
            normalize_url("https://example.com/s?b=2&a=1")
            == normalize_url("https://example.com/s?a=1&b=2")
        )


class TestHostKey:
    """Tests for host key extraction."""

    def test_host_key(self):
        """Host key is scheme plus authority."""
        assert host_key("https://Example.com/a/b?c=d") == "https://example.com"

    def test_scheme_matters(self):
        """http and https are different hosts."""
        assert host_key("http://example.com/") != host_key("https://example.com/")

    def test_default_port_removed(self):
        """Explicit default port maps to the same host."""
        assert host_key("https://example.com:443/") == "https://example.com"

    def test_port_matters(self):
        """Different ports are different hosts."""
        assert host_key("https://example.com:8443/") == "https://example.com:8443"

    @pytest.mark.parametrize(
        "url",
        [
            "http://Example.com:80/a",
            "https://example.com:443/a",
            "http://example.com:443/a",
            "https://example.com:80/a",
            "https://example.com:8443/a",
            "http://example.com:8080/a",
        ],
    )
    def test_agrees_with_normalize_url(self, url):
        """Host key and normalized URL treat ports the same way."""
        assert normalize_url(url).startswith(host_key(url) + "/")

    def test_default_port_only_for_own_scheme(self):
        """Port 443 on http (and 80 on https) is not a default port."""
        assert host_key("http://example.com:443/") == "http://example.com:443"
        assert host_key("https://example.com:80/") == "https://example.com:80"


class TestValidateSeed:
    """Tests for seed validation."""

    def test_valid_seed(self):
        """Absolute http(s) URLs are accepted."""
        assert validate_seed("https://example.com/") == "https://example.com/"
        assert validate_seed("http://example.com/a?b=c") == "http://example.com/a?b=c"

    def test_strips_fragment_and_whitespace(self):
        """Surrounding whitespace and fragments are removed."""
        assert validate_seed("  https://example.com/a#x  ") == "https://example.com/a"

    @pytest.mark.parametrize(
        "seed",
        [
            "",
            "   ",
            "example.com",
            "/relative/path",
            "ftp://example.com/file",
            "mailto:someone@example.com",
            "https://",
            "https://exa mple.com/",
            "http://example.com:notaport/",
        ],
    )
    def test_invalid_seed(self, seed):
        """Malformed seeds raise InvalidSeedError."""
        with pytest.raises(InvalidSeedError):
            validate_seed(seed)


class TestFrontier:
    """Tests for Frontier."""

    @pytest.fixture
    def frontier(self) -> Frontier:
        return Frontier(max_depth=2, max_pages=10)

    def test_add_and_pop(self, frontier: Frontier):
        """Added entry is popped with its depth."""
        assert frontier.add("https://example.com/", depth=0)

        entry = frontier.pop()

        assert isinstance(entry, FrontierEntry)
        assert entry.url == "https://example.com/"
        assert entry.depth == 0
        assert frontier.dispatched_count == 1

    def test_pop_empty(self, frontier: Frontier):
        """Empty frontier returns None and does not count."""
        assert frontier.pop() is None
        assert frontier.dispatched_count == 0

    def test_dedup_on_enqueue(self, frontier: Frontier):
        """A URL is enqueued only once, even before it is fetched."""
        assert frontier.add("https://example.com/a", depth=1)
        assert not frontier.add("https://example.com/a", depth=1)
        assert not frontier.add("https://EXAMPLE.com/a/", depth=2)
        assert not frontier.add("https://example.com/a#frag", depth=1)

        assert frontier.pending_count == 1

    def test_dedup_after_pop(self, frontier: Frontier):
        """Dispatched URLs stay visited."""
        frontier.add("https://example.com/a", depth=0)
        frontier.pop()

        assert not frontier.add("https://example.com/a", depth=1)
        assert frontier.is_visited("https://example.com/a")

    def test_fragment_removed_from_entry(self, frontier: Frontier):
        """Entries carry the URL without fragment."""
        frontier.add("https://example.com/a#section", depth=0)

        assert frontier.pop().url == "https://example.com/a"

    def test_depth_limit(self, frontier: Frontier):
        """URLs deeper than max_depth are not enqueued."""
        assert frontier.add("https://example.com/deep", depth=2)
        assert not frontier.add("https://example.com/deeper", depth=3)
        assert not frontier.is_visited("https://example.com/deeper")

    def test_add_links_depth_limit(self, frontier: Frontier):
        """No links are enqueued beyond max_depth."""
        added = frontier.add_links(["https://example.com/x"], depth=3)

        assert added == 0
        assert frontier.pending_count == 0

    def test_depth_first_order(self, frontier: Frontier):
        """Children of the last popped page are explored before its siblings."""
        frontier.add("https://example.com/", depth=0)
        frontier.pop()
        frontier.add_links(["https://example.com/a", "https://example.com/b"], depth=1)

        first = frontier.pop()
        assert first.url == "https://example.com/a"

        frontier.add_links(["https://example.com/a/1"], depth=2)

        assert frontier.pop().url == "https://example.com/a/1"
        assert frontier.pop().url == "https://example.com/b"

    def test_add_links_returns_count(self, frontier: Frontier):
        """add_links reports only new links."""
        frontier.add("https://example.com/a", depth=1)

        added = frontier.add_links(
            ["https://example.com/a", "https://example.com/b", "https://example.com/b"],
            depth=1,
        )

        assert added == 1

    def test_page_budget(self):
        """pop stops once max_pages entries have been dispatched."""
        frontier = Frontier(max_depth=5, max_pages=2)
        frontier.add_links([f"https://example.com/{i}" for i in range(5)], depth=0)

        assert frontier.pop() is not None
        assert frontier.pop() is not None
        assert frontier.pop() is None
        assert frontier.exhausted
        assert frontier.dispatched_count == 2

    def test_no_add_after_exhausted(self):
        """An exhausted frontier accepts nothing."""
        frontier = Frontier(max_depth=5, max_pages=1)
        frontier.add("https://example.com/", depth=0)
        frontier.pop()

        assert not frontier.add("https://example.com/new", depth=1)
