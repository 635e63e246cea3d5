"""FeedService application layer: orchestrates lists, caches and fetching."""

import asyncio
from pathlib import Path
from urllib.parse import urlsplit

import structlog

from feedline.clock import Clock
from feedline.feed.aggregator import Aggregator, FeedResult
from feedline.feed.models import FeedOptions, InvalidURLError, RunSummary
from feedline.feed.since import parse_since
from feedline.ports import CacheStore, ListStore, Scheduler
from feedline.storage.models import ListEntry
from feedline.storage.run_state import load_last_run, save_last_run

logger = structlog.get_logger(__name__)


def _has_control_chars(url: str) -> bool:
    return any(ord(c) <= 0x20 or ord(c) == 0x7F for c in url)


def validate_urls(urls: list[str]) -> list[str]:
    if not urls:
        raise InvalidURLError("please provide at least one URL")
    cleaned = []
    for url in urls:
        url = url.strip()
        # urlsplit silently drops tabs and newlines, so check the raw string
        if _has_control_chars(url):
            raise InvalidURLError(f"failed to parse URL: {url!r}")
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise InvalidURLError(f"failed to parse URL: {url!r}")
        try:
            parts.port
        except ValueError as exc:
            raise InvalidURLError(f"failed to parse URL: {url!r}: {exc}") from exc
        cleaned.append(url)
    return cleaned


class FeedService:
    def __init__(
        self,
        lists: ListStore,
        caches: CacheStore,
        scheduler: Scheduler,
        aggregator: Aggregator,
        clock: Clock,
        run_state_path: str | Path,
        default_list: str = "default",
        default_limit: int = 50,
    ):
        self._lists = lists
        self._caches = caches
        self._scheduler = scheduler
        self._aggregator = aggregator
        self._clock = clock
        self._run_state_path = Path(run_state_path)
        self._default_list = default_list
        self._default_limit = default_limit
        # serialises display runs and list mutations over the shared files
        self._lock = asyncio.Lock()

    @property
    def default_list(self) -> str:
        return self._default_list

    def init_storage(self) -> None:
        self._lists.ensure_data_dir()
        self._caches.ensure_data_dir()

    async def get_items(
        self,
        lists: list[str] | None = None,
        limit: int | None = None,
        since: str = "",
    ) -> FeedResult:
        last_run = load_last_run(self._run_state_path)
        options = FeedOptions(
            lists=list(lists or []),
            limit=self._default_limit if limit is None else limit,
            since=parse_since(since, self._clock.now(), last_run),
        )
        return await self.display(options)

    async def display(self, options: FeedOptions) -> FeedResult:
        async with self._lock:
            return await self._display(options)

    async def _display(self, options: FeedOptions) -> FeedResult:
        summary = RunSummary(started_at=self._clock.now())
        names = options.lists or self._lists.list_names()
        urls = self._lists.load_url_set(names)
        if not urls:
            logger.info("no_feeds_to_display", lists=names)
            return FeedResult(items=[], errors=[], summary=summary)

        cache_info = self._caches.load_cache_info()
        outcomes = await self._scheduler.run(cache_info, urls)
        result = self._aggregator.aggregate(outcomes, options, summary)

        if not result.items:
            # the since=last watermark only moves when something was shown
            logger.info("no_items_to_display", feeds=len(urls), errors=len(result.errors))
            return result
        save_last_run(self._run_state_path, self._clock.now())
        logger.info(
            "feed_displayed",
            feeds=summary.feeds_count,
            cached=summary.feeds_cached,
            fetched=summary.feeds_fetched,
            items=summary.items_count,
            shown=summary.items_shown,
        )
        return result

    async def follow(self, urls: list[str], list_name: str | None = None) -> list[str]:
        name = list_name or self._default_list
        cleaned = validate_urls(urls)
        async with self._lock:
            added = self._lists.add_urls(cleaned, name)
        logger.info("feeds_followed", list=name, count=len(added))
        return added

    async def unfollow(
        self, urls: list[str], list_name: str | None = None
    ) -> dict[str, bool]:
        name = list_name or self._default_list
        async with self._lock:
            results = self._lists.remove_urls(urls, name)
        for url, found in zip(urls, results):
            if not found:
                logger.warning("feed_not_in_list", list=name, url=url)
        return dict(zip(urls, results))

    def list_names(self) -> list[str]:
        return self._lists.list_names() or [self._default_list]

    def list_entries(self, name: str) -> list[ListEntry]:
        return self._lists.list_entries(name)

    async def rename_list(self, old: str, new: str) -> None:
        async with self._lock:
            self._lists.rename_list(old, new)

    async def merge_lists(self, into: str, from_: str) -> None:
        async with self._lock:
            self._lists.merge_lists(into, from_)

    async def remove_list(self, name: str) -> None:
        async with self._lock:
            self._lists.remove_list(name)
