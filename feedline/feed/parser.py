"""RSS/Atom/JSON feed decoding using feedparser."""

from datetime import datetime, timezone

import feedparser

from feedline.feed.models import FeedParseError, ParsedFeed, ParsedItem


class FeedparserFeedParser:
    def _parse_timestamp(self, entry) -> datetime | None:
        if entry.get("published_parsed"):
            return datetime(*entry.published_parsed[:6], tzinfo=timezone.utc)
        if entry.get("updated_parsed"):
            return datetime(*entry.updated_parsed[:6], tzinfo=timezone.utc)
        return None

    def parse(self, data: bytes) -> ParsedFeed:
        parsed = feedparser.parse(data)
        if not parsed.version:
            reason = parsed.get("bozo_exception") or "unrecognised format"
            raise FeedParseError(f"not a valid feed: {reason}")

        items = []
        for entry in parsed.entries:
            items.append(
                ParsedItem(
                    title=entry.get("title", ""),
                    link=entry.get("link", ""),
                    published_at=self._parse_timestamp(entry),
                    categories=[t.get("term", "") for t in entry.get("tags", [])],
                )
            )
        return ParsedFeed(title=parsed.feed.get("title", ""), items=items)
