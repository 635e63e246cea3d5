"""Cache reconciliation after URLs leave a list."""

from collections.abc import Iterable
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class _Lists(Protocol):
    def list_names(self) -> list[str]: ...

    def load_url_set(self, lists: Iterable[str]) -> dict: ...


class _Caches(Protocol):
    def remove_feed_caches(self, urls: list[str]) -> None: ...


def reachable_urls(lists: _Lists, exclude: str | None = None) -> set[str]:
    names = [name for name in lists.list_names() if name != exclude]
    return set(lists.load_url_set(names))


def collect_garbage(
    lists: _Lists,
    caches: _Caches,
    removed_urls: Iterable[str],
    mutated_list: str | None = None,
) -> list[str]:
    """Drop cache entries and blobs for removed URLs no list references.

    Reachability is recomputed from every list on disk other than
    ``mutated_list``, whose post-mutation contents the caller already
    accounts for. Returns the URLs whose caches were deleted.
    """
    reachable = reachable_urls(lists, exclude=mutated_list)
    orphaned = []
    for url in dict.fromkeys(removed_urls):
        if url not in reachable:
            orphaned.append(url)
    caches.remove_feed_caches(orphaned)
    logger.debug(
        "cache_gc_complete",
        mutated_list=mutated_list,
        removed=len(orphaned),
        reachable=len(reachable),
    )
    return orphaned
