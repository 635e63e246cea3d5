from dataclasses import dataclass
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class ListEntry:
    added_at: datetime
    address: str


@dataclass
class CacheInfoItem:
    url: str
    last_check: datetime = EPOCH
    etag: str = ""
    fetch_after: datetime = EPOCH


class InvalidRecordError(ValueError):
    pass


class InvalidListNameError(ValueError):
    pass


class EmptyListError(Exception):
    pass


class ListNotFoundError(Exception):
    pass


class ListExistsError(Exception):
    pass
