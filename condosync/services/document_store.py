"""
Condo Sync - Document Store
Coleções de documentos JSON sobre SQLAlchemy async, com watches por coleção,
transações serializadas e chaves únicas (claims) verificadas na escrita.
"""
import asyncio
import inspect
import logging
import uuid
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from pydantic_core import to_jsonable_python
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from condosync.core.errors import ConflictError, CondoError, NotFoundError, Reason, RemoteError
from condosync.models import StoredDocument, UniqueClaim

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Snapshot:
    """Estado completo de uma coleção em uma versão do store"""
    collection: str
    version: int
    documents: Tuple[dict, ...]


@dataclass(frozen=True)
class Claim:
    """Chave única reservada junto com o documento (ex: reservations.slot / 2026-05-01:churrasco1)"""
    scope: str
    key: str
    reason: Reason


class Watch:
    """Canal de snapshots de uma coleção. close() é idempotente."""

    def __init__(self, store: "SqlDocumentStore", collection: str, on_snapshot, on_error=None):
        self._store = store
        self.collection = collection
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self.active = True
        self.last_version = -1

    def close(self):
        if not self.active:
            return
        self.active = False
        self._store._detach(self)

    async def _deliver(self, snapshot: Snapshot):
        # Nunca entrega versão mais antiga que a última entregue
        if not self.active or snapshot.version <= self.last_version:
            return
        self.last_version = snapshot.version
        try:
            result = self._on_snapshot(snapshot)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"[STORE] Erro no callback de {self.collection}: {e}")

    def _fail(self, error: RemoteError):
        if not self.active:
            return
        self.close()
        logger.warning(f"[STORE] Canal {self.collection} caiu: {error.message}")
        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception as e:
                logger.error(f"[STORE] Erro no handler de falha de {self.collection}: {e}")


class Transaction:
    """
    Visão transacional do store. Tudo que é lido aqui é consistente com o
    que será escrito: o store só executa uma transação por vez.
    """

    def __init__(self, session, now: datetime):
        self._session = session
        self.now = now
        self.touched: Set[str] = set()

    @property
    def _row_time(self) -> datetime:
        return self.now.replace(tzinfo=None)

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        row = await self._session.get(StoredDocument, (collection, doc_id))
        return row.to_dict() if row else None

    async def query(self, collection: str, **equals) -> List[dict]:
        """Documentos da coleção cujos campos são iguais aos informados"""
        result = await self._session.execute(
            select(StoredDocument)
            .where(StoredDocument.collection == collection)
            .order_by(StoredDocument.created_at, StoredDocument.id)
        )
        wanted = {key: to_jsonable_python(value) for key, value in equals.items()}
        documents = []
        for row in result.scalars().all():
            data = row.data or {}
            if all(data.get(key) == value for key, value in wanted.items()):
                documents.append(row.to_dict())
        return documents

    async def claim(self, collection: str, doc_id: str, *claims: Claim):
        for claim in claims:
            existing = await self._session.get(UniqueClaim, (claim.scope, claim.key))
            if existing is not None:
                raise ConflictError(claim.reason)
            self._session.add(UniqueClaim(
                scope=claim.scope,
                key=claim.key,
                collection=collection,
                document_id=doc_id,
                created_at=self._row_time
            ))
            try:
                await self._session.flush()
            except IntegrityError as e:
                raise ConflictError(claim.reason) from e

    async def create(
        self,
        collection: str,
        data: dict,
        *,
        doc_id: Optional[str] = None,
        claims: Iterable[Claim] = ()
    ) -> str:
        doc_id = doc_id or str(uuid.uuid4())
        payload = to_jsonable_python(data)
        payload.pop("id", None)

        await self.claim(collection, doc_id, *claims)
        self._session.add(StoredDocument(
            collection=collection,
            id=doc_id,
            data=payload,
            created_at=self._row_time,
            updated_at=self._row_time
        ))
        self.touched.add(collection)
        return doc_id

    async def update(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> dict:
        row = await self._session.get(StoredDocument, (collection, doc_id))
        if row is None:
            raise NotFoundError(collection, doc_id)

        changes = to_jsonable_python(patch)
        changes.pop("id", None)
        # Reatribui o dict para o SQLAlchemy detectar a mudança no JSON
        row.data = {**(row.data or {}), **changes}
        row.updated_at = self._row_time
        self.touched.add(collection)
        return row.to_dict()

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Remove o documento e as chaves únicas dele. Retorna False se já não existia."""
        row = await self._session.get(StoredDocument, (collection, doc_id))
        if row is None:
            return False
        await self._session.execute(
            delete(UniqueClaim).where(
                UniqueClaim.collection == collection,
                UniqueClaim.document_id == doc_id
            )
        )
        await self._session.delete(row)
        self.touched.add(collection)
        return True


class WriteBatch:
    """Escritas acumuladas e aplicadas de forma atômica no commit"""

    def __init__(self, store: "SqlDocumentStore"):
        self._store = store
        self._operations: List[Tuple[str, str, Optional[str], Optional[dict]]] = []

    def create(self, collection: str, data: dict, doc_id: Optional[str] = None) -> "WriteBatch":
        self._operations.append(("create", collection, doc_id, data))
        return self

    def update(self, collection: str, doc_id: str, patch: dict) -> "WriteBatch":
        self._operations.append(("update", collection, doc_id, patch))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._operations.append(("delete", collection, doc_id, None))
        return self

    def __len__(self):
        return len(self._operations)

    async def commit(self) -> int:
        return await self._store.commit_batch(self._operations)


class SqlDocumentStore:
    """
    Store de documentos autoritativo.

    Cada commit incrementa a versão do store e publica um snapshot novo
    das coleções alteradas para os watches abertos.
    """

    def __init__(self, session_factory, clock: Optional[Callable[[], datetime]] = None):
        self._session_factory = session_factory
        self._clock = clock or utcnow
        self._lock = asyncio.Lock()
        self._watches: Dict[str, List[Watch]] = defaultdict(list)
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    # ============== WATCHES ==============

    async def subscribe(self, collection: str, on_snapshot, on_error=None) -> Watch:
        """
        Abre um watch e entrega o snapshot inicial antes de retornar.
        Levanta RemoteError se a leitura inicial falhar (watch já fechado).
        """
        watch = Watch(self, collection, on_snapshot, on_error)
        self._watches[collection].append(watch)
        try:
            snapshot = await self._snapshot(collection)
        except RemoteError:
            watch.close()
            raise
        await watch._deliver(snapshot)
        logger.info(f"[STORE] Watch aberto em {collection} (v{snapshot.version})")
        return watch

    def _detach(self, watch: Watch):
        watches = self._watches.get(watch.collection, [])
        if watch in watches:
            watches.remove(watch)

    def close(self):
        for watches in list(self._watches.values()):
            for watch in list(watches):
                watch.close()

    async def _snapshot(self, collection: str) -> Snapshot:
        async with self._lock:
            try:
                async with self._session_factory() as session:
                    result = await session.execute(
                        select(StoredDocument)
                        .where(StoredDocument.collection == collection)
                        .order_by(StoredDocument.created_at, StoredDocument.id)
                    )
                    documents = tuple(row.to_dict() for row in result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"[STORE] Erro ao ler {collection}: {e}")
                raise RemoteError(Reason.STORE_FAILURE) from e
            return Snapshot(collection, self._version, documents)

    async def _publish(self, collections: Iterable[str]):
        for collection in sorted(collections):
            watches = [w for w in self._watches.get(collection, []) if w.active]
            if not watches:
                continue
            try:
                snapshot = await self._snapshot(collection)
            except RemoteError as e:
                for watch in watches:
                    watch._fail(e)
                continue
            for watch in watches:
                await watch._deliver(snapshot)

    # ============== TRANSAÇÕES ==============

    @asynccontextmanager
    async def transaction(self):
        """
        Executa leituras e escritas atomicamente.
        Erros de negócio levantados dentro do bloco desfazem tudo.
        """
        touched: Set[str] = set()
        async with self._lock:
            try:
                async with self._session_factory() as session:
                    tx = Transaction(session, self._clock())
                    try:
                        yield tx
                        await session.commit()
                    except BaseException:
                        await session.rollback()
                        raise
                    touched = set(tx.touched)
            except CondoError:
                raise
            except IntegrityError as e:
                logger.error(f"[STORE] Violação de integridade: {e}")
                raise ConflictError(Reason.STORE_FAILURE, "Registro em conflito com outro já existente.") from e
            except SQLAlchemyError as e:
                logger.error(f"[STORE] Erro na transação: {e}")
                raise RemoteError(Reason.STORE_FAILURE) from e
            if touched:
                self._version += 1

        if touched:
            await self._publish(touched)

    async def commit_batch(self, operations) -> int:
        async with self.transaction() as tx:
            for operation, collection, doc_id, data in operations:
                if operation == "create":
                    await tx.create(collection, data, doc_id=doc_id)
                elif operation == "update":
                    await tx.update(collection, doc_id, data)
                else:
                    await tx.delete(collection, doc_id)
        return len(operations)

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    # ============== ATALHOS ==============

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        async with self.transaction() as tx:
            return await tx.get(collection, doc_id)

    async def list(self, collection: str, **equals) -> List[dict]:
        async with self.transaction() as tx:
            return await tx.query(collection, **equals)

    async def create(
        self,
        collection: str,
        data: dict,
        *,
        doc_id: Optional[str] = None,
        claims: Iterable[Claim] = ()
    ) -> str:
        async with self.transaction() as tx:
            return await tx.create(collection, data, doc_id=doc_id, claims=claims)

    async def update(self, collection: str, doc_id: str, patch: dict) -> dict:
        async with self.transaction() as tx:
            return await tx.update(collection, doc_id, patch)

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self.transaction() as tx:
            return await tx.delete(collection, doc_id)
