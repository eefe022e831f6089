from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from api import Api
from db.database import get_store
from db.repository import Repository
from errors import InvalidArgument, NotFound, ReciteError, StorageUnavailable, UnknownAction

router = APIRouter()

STATUS_BY_ERROR = {
    NotFound: status.HTTP_404_NOT_FOUND,
    UnknownAction: status.HTTP_404_NOT_FOUND,
    InvalidArgument: status.HTTP_400_BAD_REQUEST,
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_api: Optional[Api] = None


def get_api() -> Api:
    """Dependency returning the facade bound to the process-wide store."""
    global _api
    store = get_store()
    if _api is None or _api.repository.store is not store:
        _api = Api(Repository(store))
    return _api


async def dispatch(api: Api, method: str, action: str, data: Optional[Dict[str, Any]]) -> Any:
    try:
        return await api(method, action, data)
    except ReciteError as exc:
        code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise HTTPException(status_code=code, detail=str(exc)) from exc


def action_with_query(action: str, request: Request) -> str:
    """Re-encode query parameters the way the facade expects them (getText&id=3)."""
    query = "&".join(f"{key}={value}" for key, value in request.query_params.items())
    return f"{action}&{query}" if query else action


@router.get("/{action}")
async def get_action(action: str, request: Request, api: Api = Depends(get_api)):
    return await dispatch(api, "GET", action_with_query(action, request), None)


@router.post("/{action}")
async def post_action(
    action: str,
    request: Request,
    data: Optional[Dict[str, Any]] = Body(default=None),
    api: Api = Depends(get_api),
):
    return await dispatch(api, "POST", action_with_query(action, request), data)


@router.put("/{action}")
async def put_action(
    action: str,
    request: Request,
    data: Optional[Dict[str, Any]] = Body(default=None),
    api: Api = Depends(get_api),
):
    return await dispatch(api, "PUT", action_with_query(action, request), data)


@router.delete("/{action}")
async def delete_action(
    action: str,
    request: Request,
    data: Optional[Dict[str, Any]] = Body(default=None),
    api: Api = Depends(get_api),
):
    return await dispatch(api, "DELETE", action_with_query(action, request), data)
