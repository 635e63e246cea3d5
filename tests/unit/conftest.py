"""Shared fixtures for feedline unit tests."""

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path

import pytest

from feedline.storage import FileCacheStore, FileListStore

NOW = datetime(2026, 2, 20, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, current: datetime = NOW):
        self.current = current

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def caches(tmp_path: Path) -> FileCacheStore:
    store = FileCacheStore(tmp_path / "cache")
    store.ensure_data_dir()
    return store


@pytest.fixture
def lists(tmp_path: Path, clock: FakeClock, caches: FileCacheStore) -> FileListStore:
    store = FileListStore(tmp_path / "config" / "lists", clock, caches)
    store.ensure_data_dir()
    return store


@pytest.fixture
def make_rss():
    """Build an RSS 2.0 document from (title, link, published) tuples."""

    def build(title: str, items: list[tuple[str, str, datetime | None]]) -> bytes:
        parts = []
        for item_title, link, published in items:
            pub = ""
            if published is not None:
                pub = f"<pubDate>{format_datetime(published, usegmt=True)}</pubDate>"
            parts.append(
                f"<item><title>{item_title}</title><link>{link}</link>{pub}</item>"
            )
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f'<rss version="2.0"><channel><title>{title}</title>'
            f"{''.join(parts)}</channel></rss>"
        ).encode()

    return build
