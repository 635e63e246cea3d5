"""Concurrent fan-out of conditional fetches over a working set of URLs."""

import asyncio
from collections.abc import Iterable

import structlog

from feedline.clock import Clock
from feedline.feed.fetcher import apply_fetch_result
from feedline.feed.models import FeedError, FeedOutcome, FeedParseError, FetchError
from feedline.ports import CacheStore, FeedFetcher, FeedParser
from feedline.storage.models import CacheInfoItem

logger = structlog.get_logger(__name__)


class FetchScheduler:
    def __init__(
        self,
        fetcher: FeedFetcher,
        parser: FeedParser,
        caches: CacheStore,
        clock: Clock,
        max_concurrency: int = 16,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._fetcher = fetcher
        self._parser = parser
        self._caches = caches
        self._clock = clock
        self._max_concurrency = max_concurrency

    async def _process(
        self, info: CacheInfoItem, semaphore: asyncio.Semaphore
    ) -> FeedOutcome:
        outcome = FeedOutcome(url=info.url, previous_last_check=info.last_check)
        async with semaphore:
            try:
                outcome.fetch = await self._fetcher.fetch(info)
            except FetchError as exc:
                outcome.error = FeedError(url=info.url, error=f"failed to fetch feed: {exc}")
                return outcome

        try:
            if outcome.fetch.body is not None:
                await asyncio.to_thread(self._caches.save_body, info.url, outcome.fetch.body)
            data = await asyncio.to_thread(self._caches.read_body, info.url)
        except FileNotFoundError:
            outcome.error = FeedError(url=info.url, error="failed to parse feed: no cached body")
            return outcome

        try:
            outcome.feed = await asyncio.to_thread(self._parser.parse, data)
        except FeedParseError as exc:
            outcome.error = FeedError(url=info.url, error=f"failed to parse feed: {exc}")
        return outcome

    async def run(
        self, cache_info: dict[str, CacheInfoItem], urls: Iterable[str]
    ) -> list[FeedOutcome]:
        """Bring every URL's cached body up to date and parse it.

        ``cache_info`` is the full table; entries for new URLs are created
        in place. Once every task finishes, fetch results are applied and
        the whole table is saved in one write. Outcomes come back in URL
        order.
        """
        working = []
        for url in sorted(set(urls)):
            info = cache_info.get(url)
            if info is None:
                info = CacheInfoItem(url=url)
                cache_info[url] = info
            working.append(info)

        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(*(self._process(i, semaphore) for i in working))

        now = self._clock.now()
        for outcome in outcomes:
            if outcome.error is not None:
                logger.warning("feed_failed", url=outcome.url, error=outcome.error.error)
            if outcome.fetch is not None:
                apply_fetch_result(cache_info[outcome.url], outcome.fetch, now)
        self._caches.save_cache_info(cache_info)
        return list(outcomes)
