"""
Condo Sync - Entity Store
Espelho tipado e não-autoritativo de cada coleção remota.
Cada snapshot substitui a coleção inteira (mapa id -> entidade).
"""
import logging
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError as SchemaError

from condosync.core.security import normalize_username
from condosync.schemas import (
    User,
    Request,
    Reservation,
    Occurrence,
    Notice,
    Voting,
    Notification,
    CondoDocument,
)

logger = logging.getLogger(__name__)

COLLECTIONS: Dict[str, Type[BaseModel]] = {
    "users": User,
    "requests": Request,
    "reservations": Reservation,
    "occurrences": Occurrence,
    "notices": Notice,
    "votings": Voting,
    "notifications": Notification,
    "documents": CondoDocument,
}

# Coleções reordenadas por created_at (mais recente primeiro) a cada snapshot
NEWEST_FIRST = {"requests", "notifications"}


class CollectionState:
    """Último snapshot conhecido de uma coleção"""

    def __init__(self, name: str):
        self.name = name
        self.version = -1
        self.items: Dict[str, BaseModel] = {}
        self.error: Optional[str] = None
        self.loaded = False

    def ordered(self) -> List[BaseModel]:
        return list(self.items.values())


class EntityStore:
    def __init__(self):
        self._collections: Dict[str, CollectionState] = {
            name: CollectionState(name) for name in COLLECTIONS
        }
        self._listeners: List[Callable[[str], None]] = []

    def _state(self, collection: str) -> CollectionState:
        if collection not in self._collections:
            raise KeyError(f"Coleção desconhecida: {collection}")
        return self._collections[collection]

    def apply_snapshot(self, collection: str, version: int, documents) -> bool:
        """
        Substitui a coleção pelo snapshot. Snapshots mais antigos que o
        atual são ignorados. Retorna True se o estado mudou.
        """
        state = self._state(collection)
        if version < state.version:
            logger.debug(f"[SYNC] Snapshot v{version} de {collection} descartado (atual v{state.version})")
            return False

        model = COLLECTIONS[collection]
        parsed = []
        for document in documents:
            try:
                parsed.append(model.model_validate(document))
            except SchemaError as e:
                logger.warning(f"[SYNC] Documento {collection}/{document.get('id')} ignorado: {e.error_count()} erro(s)")

        if collection in NEWEST_FIRST:
            parsed.sort(key=lambda entity: entity.created_at, reverse=True)

        state.items = {entity.id: entity for entity in parsed}
        state.version = version
        state.error = None
        state.loaded = True
        self._notify(collection)
        return True

    def mark_error(self, collection: str, message: str):
        """Canal caiu: mantém o último snapshot e registra o erro"""
        state = self._state(collection)
        state.error = message
        self._notify(collection)

    def on_change(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, collection: str):
        for listener in list(self._listeners):
            try:
                listener(collection)
            except Exception as e:
                logger.error(f"[SYNC] Erro em listener de {collection}: {e}")

    def clear(self):
        """Descarta todo o cache (logout)"""
        for name in self._collections:
            self._collections[name] = CollectionState(name)
        for name in COLLECTIONS:
            self._notify(name)

    # ============== LEITURAS ==============

    def all(self, collection: str) -> List[BaseModel]:
        return self._state(collection).ordered()

    def get(self, collection: str, entity_id: str) -> Optional[BaseModel]:
        return self._state(collection).items.get(entity_id)

    def version(self, collection: str) -> int:
        return self._state(collection).version

    def error(self, collection: str) -> Optional[str]:
        return self._state(collection).error

    def is_loaded(self, collection: str) -> bool:
        return self._state(collection).loaded

    @property
    def users(self) -> List[User]:
        return self.all("users")

    @property
    def requests(self) -> List[Request]:
        return self.all("requests")

    @property
    def reservations(self) -> List[Reservation]:
        return self.all("reservations")

    @property
    def occurrences(self) -> List[Occurrence]:
        return self.all("occurrences")

    @property
    def notices(self) -> List[Notice]:
        return self.all("notices")

    @property
    def votings(self) -> List[Voting]:
        return self.all("votings")

    @property
    def notifications(self) -> List[Notification]:
        return self.all("notifications")

    @property
    def documents(self) -> List[CondoDocument]:
        return self.all("documents")

    def find_user_by_username(self, username: str) -> Optional[User]:
        username = normalize_username(username)
        return next((u for u in self.users if normalize_username(u.username) == username), None)

    def find_user_by_cpf(self, cpf: str) -> Optional[User]:
        return next((u for u in self.users if u.cpf and u.cpf == cpf), None)

    def find_user_by_house(self, house_number: int) -> Optional[User]:
        if not house_number:
            return None
        return next((u for u in self.users if u.house_number == house_number), None)

    def reservations_on(self, day) -> List[Reservation]:
        return [r for r in self.reservations if r.date == day]

    def sorted_documents(self) -> List[CondoDocument]:
        """Fixados primeiro, depois mais recentes"""
        newest = sorted(
            self.documents,
            key=lambda d: d.created_at.timestamp() if d.created_at else 0,
            reverse=True
        )
        return sorted(newest, key=lambda d: not d.is_pinned)

    def active_notices(self, today) -> List[Notice]:
        return [n for n in self.notices if n.is_active(today)]
