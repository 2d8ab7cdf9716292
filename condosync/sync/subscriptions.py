"""
Condo Sync - Subscription Manager
Um watch de longa duração por coleção, alimentando o Entity Store.
Quedas de canal mantêm o último snapshot e agendam nova tentativa
com backoff exponencial limitado.
"""
import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from condosync.core.config import settings as default_settings
from condosync.core.errors import RemoteError
from condosync.sync.entity_store import COLLECTIONS

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class SubscriptionHandle:
    id: int
    collection: str
    active: bool = True
    attempts: int = 0
    watch: Optional[object] = field(default=None, repr=False)
    retry_task: Optional[asyncio.Task] = field(default=None, repr=False)


class SubscriptionManager:
    def __init__(self, store, entities, settings=None):
        self.store = store
        self.entities = entities
        settings = settings or default_settings
        self.max_attempts = settings.SUBSCRIPTION_RETRY_ATTEMPTS
        self.base_delay = settings.SUBSCRIPTION_RETRY_BASE_SECONDS
        self.max_delay = settings.SUBSCRIPTION_RETRY_MAX_SECONDS
        self._ids = itertools.count(1)
        self._handles: Dict[int, SubscriptionHandle] = {}
        self.started = False

    async def start(self, collections=None):
        """Abre um watch para cada coleção do Entity Store"""
        self.started = True
        for collection in collections or COLLECTIONS:
            await self.subscribe(collection)
        logger.info(f"[SYNC] {len(self._handles)} coleção(ões) sincronizada(s)")

    async def stop(self):
        for handle in list(self._handles.values()):
            self.unsubscribe(handle)
        self.started = False

    async def subscribe(self, collection: str) -> SubscriptionHandle:
        handle = SubscriptionHandle(id=next(self._ids), collection=collection)
        self._handles[handle.id] = handle
        await self._open(handle)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle):
        """Idempotente; seguro mesmo com snapshot ou retry em andamento"""
        if not handle.active:
            return
        handle.active = False
        self._handles.pop(handle.id, None)
        if handle.retry_task is not None and not handle.retry_task.done():
            handle.retry_task.cancel()
        handle.retry_task = None
        if handle.watch is not None:
            handle.watch.close()
            handle.watch = None
        logger.info(f"[SYNC] Watch de {handle.collection} encerrado")

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    async def _open(self, handle: SubscriptionHandle):
        def on_snapshot(snapshot):
            if handle.active:
                self.entities.apply_snapshot(snapshot.collection, snapshot.version, snapshot.documents)
                handle.attempts = 0

        def on_error(error: RemoteError):
            self._on_error(handle, error)

        try:
            watch = await self.store.subscribe(handle.collection, on_snapshot, on_error)
        except RemoteError as e:
            self._on_error(handle, e)
            return

        if not handle.active:
            # unsubscribe() chegou enquanto o watch abria
            watch.close()
            return
        handle.watch = watch

    def _on_error(self, handle: SubscriptionHandle, error: RemoteError):
        if not handle.active:
            return
        handle.watch = None
        self.entities.mark_error(handle.collection, error.message)

        if handle.attempts >= self.max_attempts:
            logger.error(f"[SYNC] {handle.collection}: desistindo após {handle.attempts} tentativa(s)")
            return

        delay = self.delay_for(handle.attempts)
        handle.attempts += 1
        logger.warning(
            f"[SYNC] {handle.collection}: canal com erro ({error.message}), "
            f"tentativa {handle.attempts}/{self.max_attempts} em {delay:.1f}s"
        )
        handle.retry_task = asyncio.get_running_loop().create_task(self._retry(handle, delay))

    async def _retry(self, handle: SubscriptionHandle, delay: float):
        await asyncio.sleep(delay)
        if handle.active:
            handle.retry_task = None
            await self._open(handle)

    def resubscribe(self, handle: SubscriptionHandle):
        """Reabre manualmente um canal que esgotou as tentativas"""
        if handle.active and handle.watch is None and handle.retry_task is None:
            handle.attempts = 0
            handle.retry_task = asyncio.get_running_loop().create_task(self._retry(handle, 0))

    @property
    def handles(self):
        return list(self._handles.values())
