"""
Condo Sync - Occurrences API
"""
from fastapi import APIRouter, Depends, status

from condosync.core import is_management
from condosync.schemas import User, OccurrenceCreate, OccurrenceUpdate, OccurrenceResponse
from condosync.sync import MutationGateway, SyncContext
from condosync.api.deps import get_sync, get_current_user, get_gateway, done

router = APIRouter(prefix="/occurrences", tags=["Occurrences"])


@router.get("")
async def list_occurrences(
    user: User = Depends(get_current_user),
    sync: SyncContext = Depends(get_sync)
):
    """Gestão vê todas; morador vê as próprias"""
    occurrences = sync.entities.occurrences
    if not is_management(user.role):
        occurrences = [o for o in occurrences if o.author_id == user.id]
    return [o.model_dump(mode="json") for o in occurrences]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_occurrence(data: OccurrenceCreate, gateway: MutationGateway = Depends(get_gateway)):
    occurrence_id = await gateway.create_occurrence(data)
    return done(gateway, id=occurrence_id)


@router.patch("/{occurrence_id}")
async def update_occurrence(
    occurrence_id: str,
    data: OccurrenceUpdate,
    gateway: MutationGateway = Depends(get_gateway)
):
    await gateway.update_occurrence(occurrence_id, data)
    return done(gateway, id=occurrence_id)


@router.post("/{occurrence_id}/response")
async def respond_occurrence(
    occurrence_id: str,
    data: OccurrenceResponse,
    gateway: MutationGateway = Depends(get_gateway)
):
    await gateway.respond_occurrence(occurrence_id, data.response, data.resolve)
    return done(gateway, id=occurrence_id)


@router.delete("/{occurrence_id}")
async def delete_occurrence(occurrence_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.delete_occurrence(occurrence_id)
    return done(gateway, id=occurrence_id)
