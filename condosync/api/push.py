"""
Condo Sync - Push API
Registro de dispositivos, fan-out e alerta SOS
"""
from fastapi import APIRouter, Depends, HTTPException, status

from condosync.schemas import User, DeviceRegistration, PushRequest, AlertRequest
from condosync.sync import MutationGateway, SyncContext
from condosync.api.deps import get_sync, get_management_user, get_gateway, done

router = APIRouter(prefix="/push", tags=["Push"])


@router.post("/devices")
async def register_device(data: DeviceRegistration, gateway: MutationGateway = Depends(get_gateway)):
    state = await gateway.register_device(data.token)
    return done(gateway, permission=state.value)


@router.post("/send")
async def send_push(
    data: PushRequest,
    user: User = Depends(get_management_user),
    sync: SyncContext = Depends(get_sync)
):
    """Resolve os tokens do alvo (usuário ou 'all') e despacha"""
    if sync.devices is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Push não configurado"
        )
    return await sync.devices.dispatch(data.target, data.title, data.body, data.data)


@router.post("/alert")
async def raise_alert(data: AlertRequest, gateway: MutationGateway = Depends(get_gateway)):
    text = await gateway.raise_alert(data.message)
    return done(gateway, alert=text)
