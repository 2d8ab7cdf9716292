"""
Condo Sync - Auth API
Login por nome de usuário, cadastro de morador e perfil atual
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from condosync.core import (
    settings,
    create_access_token,
    username_to_identifier,
    RemoteError,
    Reason,
)
from condosync.schemas import LoginRequest, LoginResponse, User, UserCreate
from condosync.sync import SyncContext, ToastQueue
from condosync.api.deps import get_sync, get_current_user, done

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])
limiter = Limiter(key_func=get_remote_address)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": user.id, "role": user.role.value})


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, credentials: LoginRequest, sync: SyncContext = Depends(get_sync)):
    """Login com usuário e senha"""
    identifier = username_to_identifier(credentials.username, settings.IDENTITY_DOMAIN)

    try:
        session = await sync.identity.sign_in(identifier, credentials.password)
    except RemoteError as e:
        if e.reason != Reason.AUTH_FAILED:
            raise
        logger.info(f"[AUTH] Login recusado para {identifier}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message
        )

    profiles = await sync.store.list("users", auth_uid=session.uid)
    if not profiles:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Perfil não encontrado para esta conta"
        )

    user = User.model_validate(profiles[0])
    return LoginResponse(
        access_token=issue_token(user),
        token_type="bearer",
        user=user.model_dump(mode="json")
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, sync: SyncContext = Depends(get_sync)):
    """Cadastro de morador (papel sempre MORADOR)"""
    gateway = sync.gateway(toasts=ToastQueue())
    user = await gateway.create_user(data)
    return done(
        gateway,
        user=user.model_dump(mode="json"),
        access_token=issue_token(user),
        token_type="bearer"
    )


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    """Retorna o perfil do usuário atual"""
    return user.model_dump(mode="json")
