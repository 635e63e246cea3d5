import logging
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedline.app_state import AppState
from feedline.clock import SystemClock
from feedline.config import Settings
from feedline.feed.aggregator import Aggregator
from feedline.feed.fetcher import HttpFeedFetcher
from feedline.feed.parser import FeedparserFeedParser
from feedline.feed.scheduler import FetchScheduler
from feedline.feed.service import FeedService
from feedline.routers.feed import router as feed_router
from feedline.routers.lists import router as lists_router
from feedline.storage import FileCacheStore, FileListStore

settings = Settings()

logging.basicConfig(level=settings.log_level.upper())
logger = structlog.get_logger(__name__)


def build_app_state(cfg: Settings) -> AppState:
    clock = SystemClock()
    caches = FileCacheStore(cfg.cache_dir)
    lists = FileListStore(cfg.lists_dir, clock, caches)
    fetcher = HttpFeedFetcher(clock, cfg.user_agent, timeout=cfg.fetch_timeout)
    scheduler = FetchScheduler(
        fetcher,
        FeedparserFeedParser(),
        caches,
        clock,
        max_concurrency=cfg.max_concurrency,
    )
    feed_service = FeedService(
        lists=lists,
        caches=caches,
        scheduler=scheduler,
        aggregator=Aggregator(cfg.mark_new_on_first_fetch),
        clock=clock,
        run_state_path=cfg.run_state_path,
        default_list=cfg.default_list,
        default_limit=cfg.default_limit,
    )
    feed_service.init_storage()
    return AppState(feed_service=feed_service, clock=clock)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.app_state = build_app_state(settings)
    app.state.settings = settings
    logger.info(
        "storage_ready", config_dir=str(settings.config_dir), cache_dir=str(settings.cache_dir)
    )
    yield


app = FastAPI(title="Feedline API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(feed_router)
app.include_router(lists_router)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
