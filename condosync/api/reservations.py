"""
Condo Sync - Reservations API
"""
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from condosync.schemas import User, Area, ReservationCreate
from condosync.sync import MutationGateway, SyncContext, resolve_reservation
from condosync.api.deps import get_sync, get_current_user, get_gateway, done

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.get("")
async def list_reservations(
    day: Optional[date] = Query(None, alias="date"),
    user: User = Depends(get_current_user),
    sync: SyncContext = Depends(get_sync)
):
    reservations = sync.entities.reservations_on(day) if day else sync.entities.reservations
    return [r.model_dump(mode="json") for r in reservations]


@router.get("/check")
async def check_availability(
    day: date = Query(..., alias="date"),
    area: Area = Query(...),
    gateway: MutationGateway = Depends(get_gateway)
):
    """Pré-visualiza a decisão do resolvedor para o usuário atual"""
    decision = resolve_reservation(
        day,
        area,
        gateway.actor.house_number,
        gateway.actor.role,
        gateway.entities.reservations,
        today=gateway.today(),
        churrasco_days=gateway.settings.CHURRASCO_LEAD_DAYS,
        salao_days=gateway.settings.SALAO_LEAD_DAYS
    )
    return {
        "accepted": decision.accepted,
        "reason": decision.reason.value if decision.reason else None,
        "message": decision.message,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reservation(data: ReservationCreate, gateway: MutationGateway = Depends(get_gateway)):
    reservation_id = await gateway.create_reservation(data)
    return done(gateway, id=reservation_id)


@router.delete("/{reservation_id}")
async def cancel_reservation(reservation_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.cancel_reservation(reservation_id)
    return done(gateway, id=reservation_id)
