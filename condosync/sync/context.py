"""
Condo Sync - Sync Context
Agrupa store, Entity Store, assinaturas e colaboradores externos com
ciclo de vida explícito (start/stop), sem estado global.
"""
import logging
from typing import Optional

from condosync.core.config import settings as default_settings
from condosync.services import (
    LocalIdentityProvider,
    LocalObjectStorage,
    PushFanout,
    PushNotifier,
    SqlDocumentStore,
)
from condosync.sync.entity_store import EntityStore
from condosync.sync.gateway import MutationGateway
from condosync.sync.subscriptions import SubscriptionManager
from condosync.sync.toasts import ToastQueue

logger = logging.getLogger(__name__)


class SyncContext:
    def __init__(
        self,
        store,
        identity=None,
        storage=None,
        push: Optional[PushNotifier] = None,
        devices: Optional[PushFanout] = None,
        settings=None,
        clock=None
    ):
        self.settings = settings or default_settings
        self.store = store
        self.identity = identity
        self.storage = storage
        self.devices = devices
        self.push = push
        self.clock = clock
        self.entities = EntityStore()
        self.subscriptions = SubscriptionManager(store, self.entities, self.settings)
        self.running = False

    async def start(self):
        if self.running:
            return
        await self.subscriptions.start()
        self.running = True
        logger.info("[SYNC] Contexto iniciado")

    async def stop(self):
        """Fecha todas as assinaturas e descarta o cache"""
        if not self.running:
            return
        await self.subscriptions.stop()
        self.entities.clear()
        self.running = False
        logger.info("[SYNC] Contexto encerrado")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    def gateway(self, actor=None, toasts: Optional[ToastQueue] = None) -> MutationGateway:
        """Gateway para um usuário (ou para o sistema, sem actor)"""
        return MutationGateway(
            self.store,
            self.entities,
            actor=actor,
            toasts=toasts,
            identity=self.identity,
            storage=self.storage,
            push=self.push,
            devices=self.devices,
            clock=self.clock,
            settings=self.settings
        )


def build_context(session_factory, settings=None, clock=None) -> SyncContext:
    """Monta o contexto com as implementações locais dos colaboradores"""
    settings = settings or default_settings
    store = SqlDocumentStore(session_factory, clock=clock)
    devices = PushFanout(store, settings)
    return SyncContext(
        store,
        identity=LocalIdentityProvider(session_factory, settings.MIN_PASSWORD_LENGTH),
        storage=LocalObjectStorage(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL),
        push=PushNotifier(
            fanout=devices,
            endpoint_url=settings.PUSH_ENDPOINT_URL,
            timeout=settings.PUSH_TIMEOUT_SECONDS
        ),
        devices=devices,
        settings=settings,
        clock=clock
    )


def build_default_context() -> SyncContext:
    from condosync.database import AsyncSessionLocal

    return build_context(AsyncSessionLocal)
