"""
Condo Sync - Identity Provider
Contas de login (usuario@dominio + senha bcrypt) separadas do perfil do morador
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from condosync.core.config import settings
from condosync.core.errors import Reason, RemoteError
from condosync.core.security import verify_password, get_password_hash
from condosync.models import AuthAccount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    uid: str
    identifier: str


class LocalIdentityProvider:
    """Provedor de identidade sobre a tabela auth_accounts"""

    def __init__(self, session_factory, min_password_length: Optional[int] = None):
        self._session_factory = session_factory
        self._min_password_length = min_password_length or settings.MIN_PASSWORD_LENGTH
        self._listeners: List[Callable] = []
        self.current: Optional[AuthSession] = None

    def on_session_change(self, callback: Callable[[Optional[AuthSession]], None]) -> Callable[[], None]:
        """Registra listener; retorna função que remove o registro"""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_current(self, session: Optional[AuthSession]):
        self.current = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception as e:
                logger.error(f"[AUTH] Erro em listener de sessão: {e}")

    async def sign_up(self, identifier: str, secret: str, display_name: Optional[str] = None) -> AuthSession:
        """Cria a conta. Não altera a sessão atual (admin cadastrando morador)."""
        if not secret or len(secret) < self._min_password_length:
            raise RemoteError(Reason.AUTH_FAILED, code="auth/weak-password")

        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(AuthAccount).where(AuthAccount.identifier == identifier)
                )
                if result.scalar_one_or_none():
                    raise RemoteError(Reason.AUTH_FAILED, code="auth/email-already-in-use")

                account = AuthAccount(
                    identifier=identifier,
                    hashed_password=get_password_hash(secret),
                    display_name=display_name
                )
                db.add(account)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"[AUTH] Erro ao criar conta {identifier}: {e}")
            raise RemoteError(Reason.AUTH_FAILED) from e

        logger.info(f"[AUTH] Conta criada: {identifier}")
        return AuthSession(uid=account.id, identifier=identifier)

    async def find_uid(self, identifier: str) -> Optional[str]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(AuthAccount.id).where(AuthAccount.identifier == identifier)
            )
            return result.scalar_one_or_none()

    async def sign_in(self, identifier: str, secret: str) -> AuthSession:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(AuthAccount).where(AuthAccount.identifier == identifier)
                )
                account = result.scalar_one_or_none()

                if not account or not account.is_active:
                    raise RemoteError(Reason.AUTH_FAILED, code="auth/invalid-credential")
                if not verify_password(secret or "", account.hashed_password):
                    raise RemoteError(Reason.AUTH_FAILED, code="auth/invalid-credential")

                account.last_login_at = datetime.utcnow()
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"[AUTH] Erro no login de {identifier}: {e}")
            raise RemoteError(Reason.AUTH_FAILED) from e

        session = AuthSession(uid=account.id, identifier=identifier)
        self._set_current(session)
        return session

    async def sign_out(self):
        self._set_current(None)

    async def delete_account(self, uid: str):
        try:
            async with self._session_factory() as db:
                account = await db.get(AuthAccount, uid)
                if account is None:
                    raise RemoteError(Reason.AUTH_ACCOUNT_CLEANUP, code="auth/user-not-found")
                await db.delete(account)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"[AUTH] Erro ao excluir conta {uid}: {e}")
            raise RemoteError(Reason.AUTH_ACCOUNT_CLEANUP) from e

        if self.current and self.current.uid == uid:
            self._set_current(None)
        logger.info(f"[AUTH] Conta removida: {uid}")
