"""File-backed cache metadata table and per-URL body blobs."""

from pathlib import Path
from urllib.parse import quote_plus, unquote_plus

import structlog

from feedline.storage.files import atomic_write_bytes, from_unix, to_unix
from feedline.storage.models import EPOCH, CacheInfoItem, InvalidRecordError

logger = structlog.get_logger(__name__)

CACHE_INFO_FILE = "cache_info"
BLOB_PREFIX = "feed_"


def format_cache_info_line(item: CacheInfoItem) -> str:
    return (
        f"{item.url} {to_unix(item.last_check)} "
        f"{quote_plus(item.etag)} {to_unix(item.fetch_after)}\n"
    )


def parse_cache_info_line(line: str) -> CacheInfoItem:
    """Parse one cache-info record.

    Lines written before backoff support carry only three fields; their
    ``fetch_after`` defaults to the epoch.
    """
    parts = line.split(" ")
    if len(parts) < 3:
        raise InvalidRecordError(f"invalid cache info line: {line!r}")
    try:
        last_check = from_unix(int(parts[1]))
    except ValueError:
        raise InvalidRecordError(f"invalid cache info line: {line!r}")
    fetch_after = EPOCH
    if len(parts) >= 4:
        try:
            fetch_after = from_unix(int(parts[3]))
        except ValueError:
            fetch_after = EPOCH
    return CacheInfoItem(
        url=parts[0],
        last_check=last_check,
        etag=unquote_plus(parts[2]),
        fetch_after=fetch_after,
    )


class FileCacheStore:
    def __init__(self, cache_dir: str | Path):
        self._dir = Path(cache_dir)

    @property
    def cache_info_path(self) -> Path:
        return self._dir / CACHE_INFO_FILE

    def blob_path(self, url: str) -> Path:
        return self._dir / (BLOB_PREFIX + quote_plus(url))

    def ensure_data_dir(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)

    def load_cache_info(self) -> dict[str, CacheInfoItem]:
        path = self.cache_info_path
        if not path.exists():
            return {}
        cache_info: dict[str, CacheInfoItem] = {}
        for line in path.read_text().splitlines():
            if not line.strip():
                continue
            item = parse_cache_info_line(line)
            cache_info[item.url] = item
        return cache_info

    def save_cache_info(self, cache_info: dict[str, CacheInfoItem]) -> None:
        content = "".join(
            format_cache_info_line(item) for item in cache_info.values()
        )
        atomic_write_bytes(self.cache_info_path, content.encode())

    def save_body(self, url: str, body: bytes) -> None:
        atomic_write_bytes(self.blob_path(url), body)

    def read_body(self, url: str) -> bytes:
        """Return the cached body for ``url``.

        Raises:
            FileNotFoundError: No successful fetch has been stored yet.
        """
        return self.blob_path(url).read_bytes()

    def remove_feed_caches(self, urls: list[str]) -> None:
        if not urls:
            return
        cache_info = self.load_cache_info()
        for url in urls:
            cache_info.pop(url, None)
        self.save_cache_info(cache_info)
        for url in urls:
            self.blob_path(url).unlink(missing_ok=True)
        logger.info("feed_caches_removed", count=len(urls))
