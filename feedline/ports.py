from collections.abc import Iterable
from typing import Protocol

from feedline.feed.models import FeedOutcome, FetchResult, ParsedFeed
from feedline.storage.models import CacheInfoItem, ListEntry


class FeedParser(Protocol):
    def parse(self, data: bytes) -> ParsedFeed: ...


class FeedFetcher(Protocol):
    async def fetch(self, info: CacheInfoItem) -> FetchResult: ...


class CacheStore(Protocol):
    def load_cache_info(self) -> dict[str, CacheInfoItem]: ...

    def save_cache_info(self, cache_info: dict[str, CacheInfoItem]) -> None: ...

    def save_body(self, url: str, body: bytes) -> None: ...

    def read_body(self, url: str) -> bytes: ...

    def remove_feed_caches(self, urls: list[str]) -> None: ...

    def ensure_data_dir(self) -> None: ...


class ListStore(Protocol):
    def ensure_data_dir(self) -> None: ...

    def list_names(self) -> list[str]: ...

    def list_entries(self, name: str) -> list[ListEntry]: ...

    def load_url_set(self, lists: Iterable[str]) -> dict[str, ListEntry]: ...

    def add_urls(self, urls: list[str], name: str) -> list[str]: ...

    def remove_urls(self, urls: list[str], name: str) -> list[bool]: ...

    def rename_list(self, old: str, new: str) -> None: ...

    def merge_lists(self, into: str, from_: str) -> None: ...

    def remove_list(self, name: str) -> None: ...


class Scheduler(Protocol):
    async def run(
        self, cache_info: dict[str, CacheInfoItem], urls: Iterable[str]
    ) -> list[FeedOutcome]: ...

