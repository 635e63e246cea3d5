from datetime import datetime

from pydantic import BaseModel, Field


class FollowRequest(BaseModel):
    urls: list[str] = Field(min_length=1)


class FollowResponse(BaseModel):
    list_name: str
    added: list[str]


class UnfollowRequest(BaseModel):
    urls: list[str] = Field(min_length=1)


class UnfollowResult(BaseModel):
    url: str
    removed: bool


class RenameListRequest(BaseModel):
    new_name: str = Field(min_length=1)


class MergeListsRequest(BaseModel):
    from_list: str = Field(min_length=1)


class ListEntryResponse(BaseModel):
    address: str
    added_at: datetime


class ListEntriesResponse(BaseModel):
    list_name: str
    entries: list[ListEntryResponse]
    total: int


class FeedItemResponse(BaseModel):
    feed_title: str
    feed_url: str
    feed_index: int
    title: str
    link: str
    published_at: datetime
    is_new: bool


class FeedErrorResponse(BaseModel):
    url: str
    error: str


class RunSummaryResponse(BaseModel):
    feeds_count: int
    feeds_cached: int
    feeds_fetched: int
    items_count: int
    items_shown: int
    elapsed_seconds: float


class FeedResponse(BaseModel):
    items: list[FeedItemResponse]
    errors: list[FeedErrorResponse]
    summary: RunSummaryResponse
