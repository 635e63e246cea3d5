from feedline.storage.cache import FileCacheStore
from feedline.storage.gc import collect_garbage
from feedline.storage.lists import FileListStore
from feedline.storage.models import (
    EPOCH,
    CacheInfoItem,
    EmptyListError,
    InvalidListNameError,
    InvalidRecordError,
    ListEntry,
    ListExistsError,
    ListNotFoundError,
)
from feedline.storage.run_state import load_last_run, save_last_run

__all__ = [
    "EPOCH",
    "CacheInfoItem",
    "EmptyListError",
    "FileCacheStore",
    "FileListStore",
    "InvalidListNameError",
    "InvalidRecordError",
    "ListEntry",
    "ListExistsError",
    "ListNotFoundError",
    "collect_garbage",
    "load_last_run",
    "save_last_run",
]
