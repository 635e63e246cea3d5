"""Named subscription lists, one plain-text file per list."""

from collections.abc import Iterable
from pathlib import Path

import structlog

from feedline.clock import Clock
from feedline.storage.cache import FileCacheStore
from feedline.storage.files import atomic_write_bytes, from_unix, to_unix
from feedline.storage.gc import collect_garbage
from feedline.storage.models import (
    EmptyListError,
    InvalidListNameError,
    InvalidRecordError,
    ListEntry,
    ListExistsError,
    ListNotFoundError,
)

logger = structlog.get_logger(__name__)


def format_list_line(entry: ListEntry) -> str:
    return f"{to_unix(entry.added_at)} {entry.address}\n"


def parse_list_line(line: str) -> ListEntry:
    parts = line.split(" ")
    if len(parts) < 2:
        raise InvalidRecordError(f"invalid feed list item: {line!r}")
    try:
        added_at = from_unix(int(parts[0]))
    except ValueError:
        raise InvalidRecordError(f"invalid feed list item: {line!r}")
    return ListEntry(added_at=added_at, address=parts[1])


class FileListStore:
    def __init__(self, lists_dir: str | Path, clock: Clock, caches: FileCacheStore):
        self._dir = Path(lists_dir)
        self._clock = clock
        self._caches = caches

    def _path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise InvalidListNameError(f"invalid list name: {name!r}")
        return self._dir / name

    def _write(self, name: str, entries: list[ListEntry]) -> None:
        content = "".join(format_list_line(e) for e in entries)
        atomic_write_bytes(self._path(name), content.encode())

    def ensure_data_dir(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)

    def list_names(self) -> list[str]:
        if not self._dir.exists():
            return []
        return sorted(
            p.name
            for p in self._dir.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

    def list_entries(self, name: str) -> list[ListEntry]:
        """Return the entries of ``name`` in append order (empty if missing)."""
        path = self._path(name)
        if not path.exists():
            return []
        return [
            parse_list_line(line)
            for line in path.read_text().splitlines()
            if line.strip()
        ]

    def load_url_set(self, lists: Iterable[str]) -> dict[str, ListEntry]:
        urls: dict[str, ListEntry] = {}
        for name in lists:
            for entry in self.list_entries(name):
                urls[entry.address] = entry
        return urls

    def add_urls(self, urls: list[str], name: str) -> list[str]:
        """Append URLs not already in the list; returns the ones added."""
        entries = self.list_entries(name)
        present = {e.address for e in entries}
        now = self._clock.now()
        added = []
        for url in urls:
            if url in present:
                continue
            present.add(url)
            entries.append(ListEntry(added_at=now, address=url))
            added.append(url)
        if added:
            self._write(name, entries)
        logger.info("list_urls_added", list=name, added=len(added))
        return added

    def remove_urls(self, urls: list[str], name: str) -> list[bool]:
        entries = self.list_entries(name)
        if not entries:
            raise EmptyListError(f"no items in list: {name}")
        targets = set(urls)
        remaining = [e for e in entries if e.address not in targets]
        removed = {e.address for e in entries if e.address in targets}
        self._write(name, remaining)
        collect_garbage(self, self._caches, [u for u in urls if u in removed], name)
        return [url in removed for url in urls]

    def rename_list(self, old: str, new: str) -> None:
        old_path = self._path(old)
        new_path = self._path(new)
        if new_path.exists():
            raise ListExistsError(f"list already exists: {new}")
        if not old_path.exists():
            raise ListNotFoundError(f"list not found: {old}")
        old_path.rename(new_path)
        logger.info("list_renamed", old=old, new=new)

    def merge_lists(self, into: str, from_: str) -> None:
        """Fold ``from_`` into ``into`` and delete ``from_``.

        Shared URLs keep their earliest ``added_at``; the merged list is
        ordered by ``added_at``.
        """
        if into == from_:
            raise ValueError(f"cannot merge list into itself: {into}")
        from_path = self._path(from_)
        if not from_path.exists():
            raise ListNotFoundError(f"list not found: {from_}")
        merged: dict[str, ListEntry] = {}
        for entry in self.list_entries(into) + self.list_entries(from_):
            current = merged.get(entry.address)
            if current is None or entry.added_at < current.added_at:
                merged[entry.address] = entry
        entries = sorted(merged.values(), key=lambda e: e.added_at)
        self._write(into, entries)
        from_path.unlink()
        logger.info("lists_merged", into=into, from_=from_, count=len(entries))

    def remove_list(self, name: str) -> None:
        path = self._path(name)
        if not path.exists():
            raise ListNotFoundError(f"list not found: {name}")
        entries = self.list_entries(name)
        path.unlink()
        collect_garbage(self, self._caches, [e.address for e in entries], name)
        logger.info("list_removed", list=name, count=len(entries))
