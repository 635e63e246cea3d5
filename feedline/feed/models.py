from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ParsedItem:
    title: str
    link: str
    published_at: datetime | None
    categories: list[str] = field(default_factory=list)


@dataclass
class ParsedFeed:
    title: str
    items: list[ParsedItem]


@dataclass
class FetchResult:
    changed: bool
    etag: str = ""
    fetch_after: datetime | None = None
    body: bytes | None = None
    status_code: int | None = None


@dataclass
class FeedError:
    url: str
    error: str


@dataclass
class FeedOutcome:
    url: str
    previous_last_check: datetime
    fetch: FetchResult | None = None
    feed: ParsedFeed | None = None
    error: FeedError | None = None


@dataclass
class FeedItem:
    feed_title: str
    feed_url: str
    feed_index: int
    title: str
    link: str
    published_at: datetime
    is_new: bool


@dataclass
class FeedOptions:
    lists: list[str] = field(default_factory=list)
    limit: int = 0
    since: datetime | None = None


@dataclass
class RunSummary:
    started_at: datetime
    feeds_count: int = 0
    feeds_cached: int = 0
    feeds_fetched: int = 0
    items_count: int = 0
    items_shown: int = 0


class FetchError(Exception):
    pass


class FeedParseError(ValueError):
    pass


class InvalidURLError(ValueError):
    pass
