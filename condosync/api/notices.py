"""
Condo Sync - Notices (Avisos) API
"""
from fastapi import APIRouter, Depends, Query, status

from condosync.schemas import NoticeCreate, ReactionToggle
from condosync.sync import MutationGateway
from condosync.api.deps import get_gateway, done

router = APIRouter(prefix="/notices", tags=["Notices"])


@router.get("")
async def list_notices(
    active: bool = Query(False),
    gateway: MutationGateway = Depends(get_gateway)
):
    notices = gateway.entities.active_notices(gateway.today()) if active else gateway.entities.notices
    return [n.model_dump(mode="json") for n in notices]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notice(data: NoticeCreate, gateway: MutationGateway = Depends(get_gateway)):
    notice_id = await gateway.create_notice(data)
    return done(gateway, id=notice_id)


@router.delete("/{notice_id}")
async def delete_notice(notice_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.delete_notice(notice_id)
    return done(gateway, id=notice_id)


@router.post("/{notice_id}/reactions")
async def toggle_reaction(
    notice_id: str,
    data: ReactionToggle,
    gateway: MutationGateway = Depends(get_gateway)
):
    state = await gateway.toggle_notice_reaction(notice_id, data.kind)
    return done(gateway, id=notice_id, reaction=state.value if state else None)
