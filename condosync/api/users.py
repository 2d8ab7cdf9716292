"""
Condo Sync - Users API
"""
from fastapi import APIRouter, Depends

from condosync.schemas import User, UserRoleUpdate
from condosync.sync import MutationGateway, SyncContext
from condosync.api.deps import get_sync, get_current_user, get_gateway, done, public_user

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
async def list_users(
    user: User = Depends(get_current_user),
    sync: SyncContext = Depends(get_sync)
):
    """Lista moradores e funcionários"""
    return [public_user(u, user) for u in sync.entities.users]


@router.patch("/{user_id}/role")
async def update_role(
    user_id: str,
    data: UserRoleUpdate,
    gateway: MutationGateway = Depends(get_gateway)
):
    """Altera o papel (somente ADMIN)"""
    await gateway.update_user_role(user_id, data.role)
    return done(gateway, id=user_id)


@router.delete("/{user_id}")
async def delete_user(user_id: str, gateway: MutationGateway = Depends(get_gateway)):
    """Remove perfil e conta de login (a remoção da conta é melhor esforço)"""
    warning = await gateway.delete_user(user_id)
    return done(gateway, id=user_id, warning=warning.message if warning else None)


@router.post("/maintenance/purge")
async def purge_legacy_data(gateway: MutationGateway = Depends(get_gateway)):
    """Remove pendências e reservas antigas (somente ADMIN)"""
    removed = await gateway.purge_legacy_data()
    return done(gateway, removed=removed)
