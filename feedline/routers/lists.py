from fastapi import APIRouter, Depends, HTTPException, Request

from feedline.app_state import AppState
from feedline.models import (
    FollowRequest,
    FollowResponse,
    ListEntriesResponse,
    ListEntryResponse,
    MergeListsRequest,
    RenameListRequest,
    UnfollowRequest,
    UnfollowResult,
)
from feedline.storage.models import (
    EmptyListError,
    ListExistsError,
    ListNotFoundError,
)

router = APIRouter(prefix="/api/v1/lists")


def get_app_state(request: Request) -> AppState:
    return request.app.state.app_state


@router.get("")
async def get_lists(state: AppState = Depends(get_app_state)) -> list[str]:
    return state.feed_service.list_names()


@router.get("/{name}")
async def get_list(
    name: str, state: AppState = Depends(get_app_state)
) -> ListEntriesResponse:
    try:
        entries = state.feed_service.list_entries(name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ListEntriesResponse(
        list_name=name,
        entries=[
            ListEntryResponse(address=e.address, added_at=e.added_at) for e in entries
        ],
        total=len(entries),
    )


@router.put("/{name}/feeds", status_code=201)
async def follow(
    name: str,
    body: FollowRequest,
    state: AppState = Depends(get_app_state),
) -> FollowResponse:
    try:
        added = await state.feed_service.follow(body.urls, name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return FollowResponse(list_name=name, added=added)


@router.post("/{name}/unfollow")
async def unfollow(
    name: str,
    body: UnfollowRequest,
    state: AppState = Depends(get_app_state),
) -> list[UnfollowResult]:
    try:
        results = await state.feed_service.unfollow(body.urls, name)
    except EmptyListError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [UnfollowResult(url=url, removed=removed) for url, removed in results.items()]


@router.post("/{name}/rename")
async def rename_list(
    name: str,
    body: RenameListRequest,
    state: AppState = Depends(get_app_state),
) -> dict[str, str]:
    try:
        await state.feed_service.rename_list(name, body.new_name)
    except ListExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ListNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"message": f"list {name} was renamed to {body.new_name}"}


@router.post("/{name}/merge")
async def merge_lists(
    name: str,
    body: MergeListsRequest,
    state: AppState = Depends(get_app_state),
) -> dict[str, str]:
    try:
        await state.feed_service.merge_lists(name, body.from_list)
    except ListNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"message": f"list {body.from_list} was merged into {name}"}


@router.delete("/{name}")
async def remove_list(
    name: str, state: AppState = Depends(get_app_state)
) -> dict[str, str]:
    try:
        await state.feed_service.remove_list(name)
    except ListNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"message": f"list {name} was removed"}
