"""
Condo Sync - API Dependencies
Usuário autenticado, contexto de sincronização e gateway por requisição
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from condosync.core import verify_access_token, is_management
from condosync.schemas import User
from condosync.sync import MutationGateway, SyncContext, ToastQueue

security = HTTPBearer(auto_error=False)


def get_sync(request: Request) -> SyncContext:
    return request.app.state.sync


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    sync: SyncContext = Depends(get_sync)
) -> User:
    """Dependency para obter o usuário autenticado (perfil lido do store)"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token não informado"
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado"
        )

    document = await sync.store.get("users", payload.get("sub"))
    if not document:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não encontrado"
        )

    return User.model_validate(document)


async def get_management_user(user: User = Depends(get_current_user)) -> User:
    if not is_management(user.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito à gestão"
        )
    return user


def get_gateway(
    user: User = Depends(get_current_user),
    sync: SyncContext = Depends(get_sync)
) -> MutationGateway:
    return sync.gateway(actor=user, toasts=ToastQueue())


def done(gateway: MutationGateway, **data) -> dict:
    """Resposta de mutação: dados + a mensagem única de feedback"""
    toast = gateway.toasts.last
    return {
        **data,
        "message": toast.message if toast else None,
        "kind": toast.kind.value if toast else None,
    }


def public_user(user: User, viewer: User) -> dict:
    """CPF só aparece para a gestão e para o próprio usuário"""
    data = user.model_dump(mode="json")
    if viewer.id != user.id and not is_management(viewer.role):
        data["cpf"] = ""
    return data
