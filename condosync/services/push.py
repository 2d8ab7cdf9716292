"""
Condo Sync - Push Notifications
Registro de tokens de dispositivo, fan-out para o FCM (HTTP v1) e
gatilho do lado do cliente (melhor esforço, nunca levanta).
"""
import enum
import logging
from typing import Callable, List, Optional

import httpx

from condosync.core.config import settings as default_settings
from condosync.core.errors import CondoError

logger = logging.getLogger(__name__)

PUSH_TOKENS = "push_tokens"
FCM_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"


class PermissionState(str, enum.Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class PushFanout:
    """Resolve tokens (um usuário ou todos) e despacha as mensagens"""

    def __init__(self, store, settings=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.store = store
        self.settings = settings or default_settings
        self._transport = transport

    async def register_token(self, user_id: str, token: Optional[str]) -> PermissionState:
        if not token:
            return PermissionState.DENIED

        async with self.store.transaction() as tx:
            existing = await tx.get(PUSH_TOKENS, user_id)
            if existing is None:
                await tx.create(PUSH_TOKENS, {"user_id": user_id, "token": token}, doc_id=user_id)
            elif existing.get("token") != token:
                await tx.update(PUSH_TOKENS, user_id, {"token": token})

        logger.info(f"[PUSH] Token registrado para {user_id}")
        return PermissionState.GRANTED

    async def resolve_tokens(self, target: str) -> List[str]:
        if target == "all":
            documents = await self.store.list(PUSH_TOKENS)
        else:
            document = await self.store.get(PUSH_TOKENS, target)
            documents = [document] if document else []
        return [d["token"] for d in documents if d.get("token")]

    async def dispatch(self, target: str, title: str, body: str, data: Optional[dict] = None) -> dict:
        tokens = await self.resolve_tokens(target)
        report = {"sent": 0, "failed": 0, "skipped": False}

        if not tokens:
            logger.info(f"[PUSH] Nenhum dispositivo para '{target}'")
            return report

        project_id = self.settings.FCM_PROJECT_ID
        access_token = self.settings.FCM_ACCESS_TOKEN
        if not project_id or not access_token:
            logger.warning(f"[PUSH] FCM não configurado, {len(tokens)} envio(s) ignorado(s)")
            report["skipped"] = True
            return report

        payload_data = {key: str(value) for key, value in (data or {}).items()}
        url = FCM_URL.format(project_id=project_id)
        headers = {"Authorization": f"Bearer {access_token}"}

        async with httpx.AsyncClient(
            timeout=self.settings.PUSH_TIMEOUT_SECONDS,
            transport=self._transport
        ) as client:
            for token in tokens:
                message = {
                    "message": {
                        "token": token,
                        "notification": {"title": title, "body": body},
                        "data": payload_data
                    }
                }
                try:
                    response = await client.post(url, json=message, headers=headers)
                except httpx.HTTPError as e:
                    logger.error(f"[PUSH] Erro ao enviar: {e}")
                    report["failed"] += 1
                    continue
                if response.status_code == 200:
                    report["sent"] += 1
                else:
                    logger.warning(f"[PUSH] FCM respondeu {response.status_code}: {response.text[:200]}")
                    report["failed"] += 1

        logger.info(f"[PUSH] '{title}' -> {target}: {report['sent']} enviado(s), {report['failed']} falha(s)")
        return report


class PushNotifier:
    """
    Gatilho usado pelo gateway (nova pendência, alerta SOS).
    Usa o endpoint remoto quando configurado, senão o fan-out local.
    Falhas são apenas registradas em log.
    """

    def __init__(
        self,
        fanout: Optional[PushFanout] = None,
        endpoint_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.fanout = fanout
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._transport = transport
        self._listeners: List[Callable[[dict], None]] = []

    async def notify(self, target: str, title: str, body: str, data: Optional[dict] = None) -> bool:
        payload = {"target": target, "title": title, "body": body, "data": data or {}}
        try:
            if self.endpoint_url:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.post(self.endpoint_url, json=payload)
                    response.raise_for_status()
            elif self.fanout is not None:
                await self.fanout.dispatch(target, title, body, data)
            else:
                return False
        except (httpx.HTTPError, CondoError) as e:
            logger.warning(f"[PUSH] Falha ao disparar notificação '{title}': {e}")
            return False
        return True

    def on_foreground_message(self, callback: Callable[[dict], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def deliver_foreground(self, message: dict):
        """Mensagem recebida com o app aberto"""
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception as e:
                logger.error(f"[PUSH] Erro em listener de mensagem: {e}")
