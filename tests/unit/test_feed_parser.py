"""Tests for FeedparserFeedParser."""

from datetime import datetime, timezone

import pytest

from feedline.feed.models import FeedParseError
from feedline.feed.parser import FeedparserFeedParser

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Feed</title>
  <entry>
    <title>Entry One</title>
    <link href="https://example.com/atom/1"/>
    <id>urn:1</id>
    <updated>2026-02-16T10:00:00Z</updated>
    <category term="python"/>
  </entry>
</feed>"""


class TestFeedparserFeedParser:
    def test_rss_items_and_title(self, make_rss):
        """RSS documents yield the channel title and item fields."""
        published = datetime(2026, 2, 16, 10, 0, tzinfo=timezone.utc)
        data = make_rss("Test Feed", [("Post One", "https://example.com/1", published)])
        feed = FeedparserFeedParser().parse(data)
        assert feed.title == "Test Feed"
        assert len(feed.items) == 1
        assert feed.items[0].title == "Post One"
        assert feed.items[0].link == "https://example.com/1"
        assert feed.items[0].published_at == published

    def test_atom_uses_updated_and_categories(self):
        """Atom entries fall back to updated and expose categories."""
        feed = FeedparserFeedParser().parse(ATOM)
        item = feed.items[0]
        assert feed.title == "Atom Feed"
        assert item.published_at == datetime(2026, 2, 16, 10, 0, tzinfo=timezone.utc)
        assert item.categories == ["python"]

    def test_missing_date_is_none(self, make_rss):
        """Items without any date have no published time."""
        feed = FeedparserFeedParser().parse(
            make_rss("Feed", [("Undated", "https://example.com/u", None)])
        )
        assert feed.items[0].published_at is None

    def test_html_raises_parse_error(self):
        """Non-feed content raises FeedParseError."""
        with pytest.raises(FeedParseError, match="not a valid feed"):
            FeedparserFeedParser().parse(b"<html><body>Not a feed</body></html>")
