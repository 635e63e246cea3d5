"""Merging parsed feeds into one filtered, ordered item list."""

from feedline.feed.models import FeedError, FeedItem, FeedOptions, FeedOutcome, RunSummary
from feedline.storage.models import EPOCH


class FeedResult:
    def __init__(
        self, items: list[FeedItem], errors: list[FeedError], summary: RunSummary
    ):
        self.items = items
        self.errors = errors
        self.summary = summary


class Aggregator:
    def __init__(self, mark_new_on_first_fetch: bool = True):
        self._mark_new_on_first_fetch = mark_new_on_first_fetch

    def aggregate(
        self,
        outcomes: list[FeedOutcome],
        options: FeedOptions,
        summary: RunSummary,
    ) -> FeedResult:
        """Collect items from successful outcomes.

        Items without a publication time count as published at the epoch.
        ``is_new`` compares against the feed's ``last_check`` from before
        this run. Ordering is newest first, then feed title, then link.
        """
        items: list[FeedItem] = []
        errors: list[FeedError] = []
        feed_indexes: dict[str, int] = {}

        summary.feeds_count = len(outcomes)
        for outcome in outcomes:
            if outcome.error is not None:
                errors.append(outcome.error)
                continue
            if outcome.fetch is not None and outcome.fetch.changed:
                summary.feeds_fetched += 1
            else:
                summary.feeds_cached += 1

            feed = outcome.feed
            index = feed_indexes.setdefault(feed.title, len(feed_indexes))
            watermark = outcome.previous_last_check
            first_fetch = watermark <= EPOCH
            for parsed in feed.items:
                published = parsed.published_at or EPOCH
                if options.since is not None and published < options.since:
                    continue
                is_new = published > watermark
                if first_fetch and not self._mark_new_on_first_fetch:
                    is_new = False
                items.append(
                    FeedItem(
                        feed_title=feed.title,
                        feed_url=outcome.url,
                        feed_index=index,
                        title=parsed.title,
                        link=parsed.link,
                        published_at=published,
                        is_new=is_new,
                    )
                )

        items.sort(key=lambda i: (i.feed_title, i.link))
        items.sort(key=lambda i: i.published_at, reverse=True)
        summary.items_count = len(items)
        if options.limit > 0:
            items = items[: options.limit]
        summary.items_shown = len(items)
        return FeedResult(items=items, errors=errors, summary=summary)
