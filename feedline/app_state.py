from typing import NamedTuple

from feedline.clock import Clock
from feedline.feed.service import FeedService


class AppState(NamedTuple):
    feed_service: FeedService
    clock: Clock
