"""Tests for FetchScheduler fan-out, cache persistence and failure isolation."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from feedline.feed.fetcher import HttpFeedFetcher
from feedline.feed.models import FetchResult
from feedline.feed.parser import FeedparserFeedParser
from feedline.feed.scheduler import FetchScheduler
from feedline.storage import EPOCH, CacheInfoItem

A = "https://a.example.com/rss"
B = "https://b.example.com/rss"
PUBLISHED = datetime(2026, 2, 19, 8, 0, tzinfo=timezone.utc)


def make_scheduler(clock, caches, handler, max_concurrency: int = 16) -> FetchScheduler:
    fetcher = HttpFeedFetcher(clock, "test", transport=httpx.MockTransport(handler))
    return FetchScheduler(
        fetcher, FeedparserFeedParser(), caches, clock, max_concurrency=max_concurrency
    )


class TestFetchScheduler:
    def test_fresh_fetch_stores_body_and_cache_info(self, clock, caches, make_rss):
        """A 200 persists the body and the updated cache-info table."""
        body = make_rss("Feed A", [("One", "https://a.example.com/1", PUBLISHED)])

        def handler(request):
            return httpx.Response(200, content=body, headers={"ETag": '"a1"'})

        cache_info: dict = {}
        outcomes = asyncio.run(make_scheduler(clock, caches, handler).run(cache_info, [A]))

        assert outcomes[0].error is None
        assert outcomes[0].feed.title == "Feed A"
        assert outcomes[0].previous_last_check == EPOCH
        assert caches.read_body(A) == body
        saved = caches.load_cache_info()[A]
        assert saved.etag == '"a1"'
        assert saved.last_check == clock.now()
        assert saved.fetch_after == clock.now() + timedelta(seconds=60)

    def test_skip_window_reuses_cached_body(self, clock, caches, make_rss):
        """A feed inside its fetch_after window is parsed from the stored blob."""
        caches.save_body(A, make_rss("Cached", [("Old", "https://a.example.com/o", PUBLISHED)]))
        info = CacheInfoItem(url=A, fetch_after=clock.now() + timedelta(minutes=10))
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        outcomes = asyncio.run(make_scheduler(clock, caches, handler).run({A: info}, [A]))

        assert calls == []
        assert outcomes[0].feed.title == "Cached"
        assert outcomes[0].fetch == FetchResult(changed=False)

    def test_304_keeps_body_and_watermark(self, clock, caches, make_rss):
        """304 leaves the blob and last_check alone but advances fetch_after."""
        body = make_rss("Feed A", [("One", "https://a.example.com/1", PUBLISHED)])
        caches.save_body(A, body)
        last_check = clock.now() - timedelta(days=1)
        info = CacheInfoItem(url=A, last_check=last_check, etag='"a1"')

        def handler(request):
            return httpx.Response(304, headers={"Cache-Control": "max-age=900"})

        asyncio.run(make_scheduler(clock, caches, handler).run({A: info}, [A]))

        saved = caches.load_cache_info()[A]
        assert caches.read_body(A) == body
        assert saved.last_check == last_check
        assert saved.etag == '"a1"'
        assert saved.fetch_after == clock.now() + timedelta(seconds=900)

    def test_429_on_first_check_records_backoff(self, clock, caches):
        """Backoff is persisted even when the feed has no body yet."""

        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "300"})

        outcomes = asyncio.run(make_scheduler(clock, caches, handler).run({}, [A]))

        assert outcomes[0].error is not None
        saved = caches.load_cache_info()[A]
        assert saved.fetch_after == clock.now() + timedelta(seconds=300)
        assert saved.last_check == EPOCH
        assert saved.etag == ""

    def test_failure_is_isolated_per_feed(self, clock, caches, make_rss):
        """One failing feed does not stop the others, and cache info is saved."""
        body = make_rss("Feed B", [("Two", "https://b.example.com/2", PUBLISHED)])

        def handler(request):
            if request.url.host == "a.example.com":
                return httpx.Response(500)
            return httpx.Response(200, content=body)

        outcomes = asyncio.run(make_scheduler(clock, caches, handler).run({}, [A, B]))

        by_url = {o.url: o for o in outcomes}
        assert "unexpected status code: 500" in by_url[A].error.error
        assert by_url[B].feed.title == "Feed B"
        saved = caches.load_cache_info()
        assert saved[A].fetch_after == EPOCH
        assert saved[B].last_check == clock.now()

    def test_unrequestable_url_is_isolated(self, clock, caches, make_rss):
        """A URL httpx rejects becomes a per-feed error and the rest still succeed."""
        bad = "http://bad.example.com:abc/rss"
        body = make_rss("Feed A", [("One", "https://a.example.com/1", PUBLISHED)])

        def handler(request):
            return httpx.Response(200, content=body)

        outcomes = asyncio.run(make_scheduler(clock, caches, handler).run({}, [A, bad]))

        by_url = {o.url: o for o in outcomes}
        assert "failed to fetch feed" in by_url[bad].error.error
        assert by_url[A].feed.title == "Feed A"
        saved = caches.load_cache_info()
        assert saved[A].last_check == clock.now()
        assert saved[bad].fetch_after == EPOCH

    def test_unparseable_body_is_a_feed_error(self, clock, caches):
        """A body that is not a feed is reported and excluded."""

        def handler(request):
            return httpx.Response(200, content=b"<html>nope</html>")

        outcomes = asyncio.run(make_scheduler(clock, caches, handler).run({}, [A]))
        assert outcomes[0].feed is None
        assert "failed to parse feed" in outcomes[0].error.error

    def test_entries_outside_working_set_are_kept(self, clock, caches, make_rss):
        """The whole table is written back, not only the fetched URLs."""
        other = CacheInfoItem(url=B, etag="keep")

        def handler(request):
            return httpx.Response(304)

        asyncio.run(make_scheduler(clock, caches, handler).run({B: other}, [A]))
        assert caches.load_cache_info()[B].etag == "keep"

    def test_concurrency_is_bounded(self, clock, caches, make_rss):
        """No more than max_concurrency requests are in flight at once."""
        body = make_rss("Feed", [])
        in_flight = 0
        peak = 0

        class SlowFetcher:
            async def fetch(self, info):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return FetchResult(changed=True, body=body)

        scheduler = FetchScheduler(
            SlowFetcher(), FeedparserFeedParser(), caches, clock, max_concurrency=2
        )
        urls = [f"https://{i}.example.com/rss" for i in range(6)]
        outcomes = asyncio.run(scheduler.run({}, urls))
        assert len(outcomes) == 6
        assert peak == 2

    def test_invalid_concurrency_rejected(self, clock, caches):
        """max_concurrency below one is a configuration error."""
        with pytest.raises(ValueError):
            make_scheduler(clock, caches, lambda r: httpx.Response(200), max_concurrency=0)
