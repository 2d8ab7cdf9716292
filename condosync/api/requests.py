"""
Condo Sync - Requests (Pendências) API
"""
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from condosync.schemas import (
    User,
    RequestCreate,
    RequestUpdate,
    StatusChange,
    CommentCreate,
)
from condosync.sync import MutationGateway, SyncContext, request_stats
from condosync.api.deps import get_sync, get_current_user, get_management_user, get_gateway, done

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.get("")
async def list_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    sync: SyncContext = Depends(get_sync)
):
    """Lista pendências (mais recentes primeiro)"""
    requests = sync.entities.requests
    if status_filter:
        requests = [r for r in requests if r.status.value == status_filter]
    return [r.model_dump(mode="json") for r in requests]


@router.get("/stats")
async def get_stats(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    user: User = Depends(get_management_user),
    sync: SyncContext = Depends(get_sync)
):
    """Contagens para relatórios"""
    return request_stats(sync.entities.requests, start, end, sync.settings.TIMEZONE)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_request(data: RequestCreate, gateway: MutationGateway = Depends(get_gateway)):
    request_id = await gateway.create_request(data)
    return done(gateway, id=request_id)


@router.patch("/{request_id}")
async def update_request(
    request_id: str,
    data: RequestUpdate,
    gateway: MutationGateway = Depends(get_gateway)
):
    await gateway.update_request(request_id, data)
    return done(gateway, id=request_id)


@router.delete("/{request_id}")
async def delete_request(request_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.delete_request(request_id)
    return done(gateway, id=request_id)


@router.post("/{request_id}/status")
async def change_status(
    request_id: str,
    data: StatusChange,
    gateway: MutationGateway = Depends(get_gateway)
):
    await gateway.change_request_status(request_id, data.status, data.justification)
    return done(gateway, id=request_id)


@router.post("/{request_id}/like")
async def toggle_like(request_id: str, gateway: MutationGateway = Depends(get_gateway)):
    liked = await gateway.toggle_like(request_id)
    return done(gateway, id=request_id, liked=liked)


@router.post("/{request_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    request_id: str,
    data: CommentCreate,
    gateway: MutationGateway = Depends(get_gateway)
):
    comment_id = await gateway.add_comment(request_id, data.text)
    return done(gateway, id=comment_id)
