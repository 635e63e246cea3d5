import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from feedline.app_state import AppState
from feedline.models import (
    FeedErrorResponse,
    FeedItemResponse,
    FeedResponse,
    RunSummaryResponse,
)

router = APIRouter(prefix="/api/v1")

logger = structlog.get_logger(__name__)


def get_app_state(request: Request) -> AppState:
    return request.app.state.app_state


@router.get("/feed")
async def get_feed(
    list_: list[str] = Query(default=[], alias="list"),
    limit: int | None = Query(default=None, ge=0),
    since: str = "",
    state: AppState = Depends(get_app_state),
):
    try:
        result = await state.feed_service.get_items(
            lists=list_, limit=limit, since=since
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    summary = result.summary
    elapsed = (state.clock.now() - summary.started_at).total_seconds()
    body = FeedResponse(
        items=[
            FeedItemResponse(
                feed_title=i.feed_title,
                feed_url=i.feed_url,
                feed_index=i.feed_index,
                title=i.title,
                link=i.link,
                published_at=i.published_at,
                is_new=i.is_new,
            )
            for i in result.items
        ],
        errors=[FeedErrorResponse(url=e.url, error=e.error) for e in result.errors],
        summary=RunSummaryResponse(
            feeds_count=summary.feeds_count,
            feeds_cached=summary.feeds_cached,
            feeds_fetched=summary.feeds_fetched,
            items_count=summary.items_count,
            items_shown=summary.items_shown,
            elapsed_seconds=elapsed,
        ),
    )

    headers = {}
    if result.errors and not result.items:
        headers["X-Feed-Errors"] = "all-feeds-failed"
        logger.warning("all_feeds_failed", errors=len(result.errors))

    return JSONResponse(content=body.model_dump(mode="json"), headers=headers)
