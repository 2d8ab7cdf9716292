"""
Condo Sync - Mutation Gateway
Uma operação de escrita por ação de negócio. Cada uma valida antes de
escrever, nunca altera o Entity Store diretamente (o resultado chega pelo
próximo snapshot) e gera exatamente um toast por desfecho.
"""
import functools
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from condosync.core.config import settings as default_settings
from condosync.core.errors import (
    CondoError,
    ConflictError,
    NotFoundError,
    PartialFailureError,
    PolicyError,
    Reason,
    RemoteError,
    ValidationError,
    DEFAULT_MESSAGES,
)
from condosync.core.policy import Action, Role, can, require
from condosync.core.security import normalize_username, username_to_identifier
from condosync.schemas import (
    BROADCAST,
    CommentType,
    DocumentCreate,
    NoticeCreate,
    Occurrence,
    OccurrenceCreate,
    OccurrenceStatus,
    OccurrenceUpdate,
    ReactionKind,
    Request,
    RequestCreate,
    RequestStatus,
    RequestUpdate,
    Reservation,
    ReservationCreate,
    User,
    UserCreate,
    Voting,
    VotingCreate,
)
from condosync.services.document_store import Claim
from condosync.services.push import PermissionState
from condosync.sync.notifications import NotificationTracker
from condosync.sync.reservations import check_reservation, slot_key
from condosync.sync.toasts import ToastKind, ToastQueue
from condosync.sync import votes as ledger
from condosync.utils.formatters import format_name, is_valid_cpf, only_digits

logger = logging.getLogger(__name__)

USERS = "users"
REQUESTS = "requests"
RESERVATIONS = "reservations"
OCCURRENCES = "occurrences"
VOTINGS = "votings"
NOTICES = "notices"
NOTIFICATIONS = "notifications"
DOCUMENTS = "documents"

Feedback = Union[str, Callable[..., tuple]]


def mutation(success: Feedback):
    """
    Garante um toast por desfecho. `success` é a mensagem fixa ou uma
    função do resultado que devolve (mensagem, tipo).
    Falhas viram toast de erro e são relançadas.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                result = await func(self, *args, **kwargs)
            except CondoError as e:
                if isinstance(e, RemoteError):
                    logger.error(f"[GATEWAY] {func.__name__} falhou: {e.message}")
                else:
                    logger.info(f"[GATEWAY] {func.__name__} rejeitado: {e.reason.value}")
                self.toasts.add(e.message, ToastKind.ERROR)
                raise
            except Exception:
                logger.exception(f"[GATEWAY] Erro inesperado em {func.__name__}")
                self.toasts.add(DEFAULT_MESSAGES[Reason.STORE_FAILURE], ToastKind.ERROR)
                raise

            if callable(success):
                message, kind = success(result)
            else:
                message, kind = success, ToastKind.SUCCESS
            self.toasts.add(message, kind)
            return result

        return wrapper

    return decorator


def _required(*values):
    if any(value is None or not str(value).strip() for value in values):
        raise ValidationError(Reason.MISSING_FIELD)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class MutationGateway:
    def __init__(
        self,
        store,
        entities,
        *,
        actor: Optional[User] = None,
        toasts: Optional[ToastQueue] = None,
        identity=None,
        storage=None,
        push=None,
        devices=None,
        clock: Optional[Callable[[], datetime]] = None,
        settings=None
    ):
        self.store = store
        self.entities = entities
        self.actor = actor
        self.settings = settings or default_settings
        self.toasts = toasts if toasts is not None else ToastQueue(self.settings.TOAST_TTL_SECONDS)
        self.identity = identity
        self.storage = storage
        self.push = push
        self.devices = devices
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.tz = ZoneInfo(self.settings.TIMEZONE)
        self.tracker = NotificationTracker(store)
        self.warnings: List[PartialFailureError] = []

    # ============== HELPERS ==============

    def today(self) -> date:
        """Dia corrente no fuso do condomínio"""
        return self.clock().astimezone(self.tz).date()

    def _require_actor(self) -> User:
        if self.actor is None:
            raise PolicyError(Reason.FORBIDDEN, "Faça login para continuar.")
        return self.actor

    def _require(self, action: Action) -> User:
        actor = self._require_actor()
        require(actor.role, action)
        return actor

    def _owner_or(self, owner_id: str, action: Action) -> User:
        actor = self._require_actor()
        if actor.id != owner_id and not can(actor.role, action):
            raise PolicyError(Reason.FORBIDDEN)
        return actor

    async def _notify(self, tx, message: str, user_id: str = BROADCAST, request_id: Optional[str] = None):
        await tx.create(NOTIFICATIONS, {
            "message": message,
            "user_id": user_id,
            "request_id": request_id,
            "created_at": tx.now,
            "read_by": []
        })

    async def _load(self, tx, collection: str, doc_id: str, model):
        document = await tx.get(collection, doc_id)
        if document is None:
            raise NotFoundError(collection, doc_id)
        return model.model_validate(document)

    async def _push(self, target: str, title: str, body: str, data: Optional[dict] = None):
        if self.push is not None:
            await self.push.notify(target, title, body, data)

    async def upload(self, filename: str, content: bytes, folder: str = "photos") -> str:
        """Envia o arquivo e devolve a URL pública (só a URL é gravada nos documentos)"""
        if self.storage is None:
            raise RemoteError(Reason.STORE_FAILURE, "Armazenamento de arquivos indisponível.")
        return await self.storage.upload(filename, content, folder)

    # ============== USERS ==============

    @mutation("Usuário cadastrado com sucesso!")
    async def create_user(self, data: Union[UserCreate, dict]) -> User:
        """
        Cadastro de morador: valida, cria a conta de login e depois o perfil.
        O papel é sempre MORADOR.
        """
        if isinstance(data, dict):
            data = UserCreate(**data)

        name = format_name(data.name)
        username = normalize_username(data.username)
        cpf = only_digits(data.cpf)
        house_number = data.house_number
        _required(name, username, data.cpf, data.password)

        if not is_valid_cpf(cpf):
            raise ValidationError(Reason.INVALID_CPF)
        if self.entities.find_user_by_cpf(cpf):
            raise ConflictError(Reason.DUPLICATE_CPF)
        if self.entities.find_user_by_username(username):
            raise ConflictError(Reason.DUPLICATE_USERNAME)
        if self.entities.find_user_by_house(house_number):
            raise ConflictError(Reason.DUPLICATE_HOUSE)

        if self.identity is None:
            raise RemoteError(Reason.AUTH_FAILED, "Provedor de identidade indisponível.")

        identifier = username_to_identifier(username, self.settings.IDENTITY_DOMAIN)
        session = await self.identity.sign_up(identifier, data.password, name)

        profile = User(
            id=session.uid,
            name=name,
            username=username,
            cpf=cpf,
            house_number=house_number,
            role=Role.MORADOR,
            email=identifier,
            auth_uid=session.uid
        )
        claims = [
            Claim("users.cpf", cpf, Reason.DUPLICATE_CPF),
            Claim("users.username", username, Reason.DUPLICATE_USERNAME),
        ]
        if house_number:
            claims.append(Claim("users.house", str(house_number), Reason.DUPLICATE_HOUSE))

        try:
            async with self.store.transaction() as tx:
                await tx.create(USERS, profile.model_dump(exclude={"id"}), doc_id=profile.id, claims=claims)
                await self._notify(tx, f"Novo morador cadastrado: {name} (Unidade {house_number})")
        except CondoError:
            # Perfil não foi gravado: remove a conta recém-criada
            try:
                await self.identity.delete_account(session.uid)
            except RemoteError as cleanup_error:
                logger.warning(f"[GATEWAY] Conta {identifier} órfã: {cleanup_error.message}")
            raise

        logger.info(f"[GATEWAY] Morador cadastrado: {username} (Unidade {house_number})")
        return profile

    @mutation("Perfil atualizado.")
    async def update_user_role(self, user_id: str, role: Union[Role, str]):
        self._require(Action.USER_CHANGE_ROLE)
        role = Role(role)
        await self.store.update(USERS, user_id, {"role": role})

    @mutation("Usuário excluído com sucesso!")
    async def delete_user(self, user_id: str) -> Optional[PartialFailureError]:
        """
        Remove o perfil e, em seguida, tenta remover a conta de login.
        Falha no segundo passo vira aviso e não desfaz o primeiro.
        """
        self._require(Action.USER_DELETE)

        async with self.store.transaction() as tx:
            user = await self._load(tx, USERS, user_id, User)
            await tx.delete(USERS, user_id)

        if self.identity is None:
            return None

        try:
            await self.identity.delete_account(user.auth_uid or user.id)
        except RemoteError as e:
            warning = PartialFailureError(Reason.AUTH_ACCOUNT_CLEANUP, cause=e)
            self.warnings.append(warning)
            logger.warning(f"[GATEWAY] Perfil {user.username} removido, conta de login não: {e.message}")
            return warning
        return None

    async def ensure_admin(self) -> Optional[User]:
        """Primeiro boot: cria um único ADMIN se a coleção users estiver vazia"""
        if await self.store.list(USERS):
            return None

        username = normalize_username(self.settings.ADMIN_USERNAME)
        identifier = username_to_identifier(username, self.settings.IDENTITY_DOMAIN)

        uid = None
        if self.identity is not None:
            uid = await self.identity.find_uid(identifier)
            if uid is None:
                session = await self.identity.sign_up(identifier, self.settings.ADMIN_PASSWORD, self.settings.ADMIN_NAME)
                uid = session.uid

        admin = User(
            id=uid or str(uuid.uuid4()),
            name=self.settings.ADMIN_NAME,
            username=username,
            cpf="",
            house_number=0,
            role=Role.ADMIN,
            email=identifier,
            auth_uid=uid
        )
        async with self.store.transaction() as tx:
            if await tx.query(USERS):
                return None
            await tx.create(
                USERS,
                admin.model_dump(exclude={"id"}),
                doc_id=admin.id,
                claims=[Claim("users.username", username, Reason.DUPLICATE_USERNAME)]
            )

        logger.info(f"[GATEWAY] Administrador inicial criado: {username}")
        return admin

    # ============== REQUESTS ==============

    @mutation("Sugestão registrada.")
    async def create_request(self, data: Union[RequestCreate, dict]) -> str:
        actor = self._require_actor()
        if isinstance(data, dict):
            data = RequestCreate(**data)
        _required(data.title)

        async with self.store.transaction() as tx:
            request_id = await tx.create(REQUESTS, {
                **data.model_dump(),
                "title": data.title.strip(),
                "status": RequestStatus.PENDENTE,
                "author_id": actor.id,
                "author_name": actor.name,
                "created_at": tx.now,
                "comments": [],
                "likes": [],
                "admin_response": None,
            })
            await self._notify(tx, f"Nova sugestão criada por {actor.name}", request_id=request_id)

        await self._push("all", "Nova pendência", f"{actor.name}: {data.title.strip()}", {"request_id": request_id})
        return request_id

    @mutation("Sugestão atualizada.")
    async def update_request(self, request_id: str, patch: Union[RequestUpdate, dict]):
        if isinstance(patch, dict):
            patch = RequestUpdate(**patch)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in changes:
            _required(changes["title"])

        async with self.store.transaction() as tx:
            request = await self._load(tx, REQUESTS, request_id, Request)
            self._owner_or(request.author_id, Action.REQUEST_MODERATE)
            await tx.update(REQUESTS, request_id, changes)

    @mutation(lambda _: ("Sugestão excluída.", ToastKind.INFO))
    async def delete_request(self, request_id: str):
        async with self.store.transaction() as tx:
            request = await self._load(tx, REQUESTS, request_id, Request)
            self._owner_or(request.author_id, Action.REQUEST_MODERATE)
            await tx.delete(REQUESTS, request_id)

    @mutation(lambda _: ("Status atualizado.", ToastKind.INFO))
    async def change_request_status(
        self,
        request_id: str,
        status: Union[RequestStatus, str],
        justification: Optional[str] = None
    ):
        """
        Muda o status (gestão). Com justificativa, grava admin_response e
        acrescenta um comentário do tipo status_change com a transição.
        """
        actor = self._require(Action.REQUEST_CHANGE_STATUS)
        status = RequestStatus(status)
        if justification is not None:
            if not justification.strip():
                raise ValidationError(Reason.MISSING_FIELD, "Informe a justificativa da mudança de status.")
            justification = justification.strip()

        async with self.store.transaction() as tx:
            request = await self._load(tx, REQUESTS, request_id, Request)
            changes = {"status": status, "status_updated_at": tx.now}

            if justification:
                changes["admin_response"] = justification
                changes["comments"] = [*request.comments, {
                    "id": _new_id("comment"),
                    "author_id": actor.id,
                    "author_name": actor.name,
                    "text": f'Alterou o status para "{status.value}". Justificativa: {justification}',
                    "created_at": tx.now,
                    "type": CommentType.STATUS_CHANGE,
                    "from_status": request.status,
                    "to_status": status,
                }]

            await tx.update(REQUESTS, request_id, changes)
            await self._notify(
                tx,
                f'Status da sugestão "{request.title}" alterado para {status.value}',
                request_id=request_id
            )

    @mutation(lambda liked: ("Curtida registrada." if liked else "Curtida removida.", ToastKind.INFO))
    async def toggle_like(self, request_id: str, user_id: Optional[str] = None) -> bool:
        """Retorna True se passou a curtir"""
        user_id = user_id or self._require_actor().id
        async with self.store.transaction() as tx:
            request = await self._load(tx, REQUESTS, request_id, Request)
            liked = user_id not in request.likes
            likes = [*request.likes, user_id] if liked else [u for u in request.likes if u != user_id]
            await tx.update(REQUESTS, request_id, {"likes": likes})
        return liked

    @mutation("Comentário adicionado.")
    async def add_comment(self, request_id: str, text: str) -> str:
        actor = self._require_actor()
        _required(text)

        comment_id = _new_id("comment")
        async with self.store.transaction() as tx:
            request = await self._load(tx, REQUESTS, request_id, Request)
            await tx.update(REQUESTS, request_id, {"comments": [*request.comments, {
                "id": comment_id,
                "author_id": actor.id,
                "author_name": actor.name,
                "text": text.strip(),
                "created_at": tx.now,
                "type": CommentType.MANUAL,
            }]})
            await self._notify(tx, f'{actor.name} comentou em: "{request.title}"', request_id=request_id)
        return comment_id

    # ============== RESERVATIONS ==============

    @mutation("Reserva realizada com sucesso!")
    async def create_reservation(self, data: Union[ReservationCreate, dict]) -> str:
        """
        Valida contra o snapshot local e revalida dentro da transação,
        reservando a chave data:área no mesmo commit.
        """
        actor = self._require_actor()
        if isinstance(data, dict):
            data = ReservationCreate(**data)

        house_number = actor.house_number
        user_name = actor.name
        if data.house_number is not None or data.user_name:
            require(actor.role, Action.RESERVATION_FOR_HOUSE)
            if data.house_number is not None:
                house_number = data.house_number
            if data.user_name:
                user_name = data.user_name.strip()

        rules = {
            "today": self.today(),
            "churrasco_days": self.settings.CHURRASCO_LEAD_DAYS,
            "salao_days": self.settings.SALAO_LEAD_DAYS,
        }
        check_reservation(data.date, data.area, house_number, actor.role, self.entities.reservations, **rules)

        async with self.store.transaction() as tx:
            current = [Reservation.model_validate(d) for d in await tx.query(RESERVATIONS, date=data.date)]
            check_reservation(data.date, data.area, house_number, actor.role, current, **rules)
            return await tx.create(
                RESERVATIONS,
                {
                    "user_id": actor.id,
                    "user_name": user_name,
                    "house_number": house_number,
                    "date": data.date,
                    "area": data.area,
                    "created_at": tx.now,
                },
                claims=[Claim("reservations.slot", slot_key(data.date, data.area), Reason.AREA_TAKEN)]
            )

    @mutation(lambda _: ("Reserva cancelada.", ToastKind.INFO))
    async def cancel_reservation(self, reservation_id: str):
        async with self.store.transaction() as tx:
            reservation = await self._load(tx, RESERVATIONS, reservation_id, Reservation)
            self._owner_or(reservation.user_id, Action.RESERVATION_CANCEL_ANY)
            await tx.delete(RESERVATIONS, reservation_id)

    # ============== OCCURRENCES ==============

    @mutation("Ocorrência registrada.")
    async def create_occurrence(self, data: Union[OccurrenceCreate, dict]) -> str:
        actor = self._require_actor()
        if isinstance(data, dict):
            data = OccurrenceCreate(**data)
        _required(data.phone, data.subject, data.description)

        async with self.store.transaction() as tx:
            return await tx.create(OCCURRENCES, {
                **data.model_dump(),
                "author_id": actor.id,
                "author_name": actor.name,
                "house_number": actor.house_number,
                "status": OccurrenceStatus.ABERTO,
                "admin_response": None,
                "resolved_at": None,
                "created_at": tx.now,
            })

    @mutation("Ocorrência atualizada.")
    async def update_occurrence(self, occurrence_id: str, patch: Union[OccurrenceUpdate, dict]):
        """Somente o autor, enquanto aberta e sem resposta da gestão"""
        actor = self._require_actor()
        if isinstance(patch, dict):
            patch = OccurrenceUpdate(**patch)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        for key in ("phone", "subject", "description"):
            if key in changes:
                _required(changes[key])

        async with self.store.transaction() as tx:
            occurrence = await self._load(tx, OCCURRENCES, occurrence_id, Occurrence)
            if occurrence.author_id != actor.id:
                raise PolicyError(Reason.FORBIDDEN)
            if not occurrence.is_editable():
                raise PolicyError(Reason.EDIT_WINDOW_CLOSED)
            await tx.update(OCCURRENCES, occurrence_id, changes)

    @mutation("Ocorrência atualizada.")
    async def respond_occurrence(self, occurrence_id: str, response: str, resolve: bool = True):
        self._require(Action.OCCURRENCE_RESPOND)
        _required(response)

        async with self.store.transaction() as tx:
            occurrence = await self._load(tx, OCCURRENCES, occurrence_id, Occurrence)
            changes = {"admin_response": response.strip()}
            if resolve:
                changes["status"] = OccurrenceStatus.RESOLVIDO
                changes["resolved_at"] = tx.now
            await tx.update(OCCURRENCES, occurrence_id, changes)
            await self._notify(
                tx,
                f'Sua ocorrência "{occurrence.subject}" foi respondida pela gestão.',
                user_id=occurrence.author_id
            )

    @mutation(lambda _: ("Ocorrência excluída.", ToastKind.INFO))
    async def delete_occurrence(self, occurrence_id: str):
        self._require(Action.OCCURRENCE_DELETE)
        if not await self.store.delete(OCCURRENCES, occurrence_id):
            raise NotFoundError(OCCURRENCES, occurrence_id)

    # ============== VOTINGS ==============

    @mutation("Votação criada com sucesso!")
    async def create_voting(self, data: Union[VotingCreate, dict]) -> str:
        actor = self._require(Action.VOTING_MANAGE)
        if isinstance(data, dict):
            data = VotingCreate(**data)
        _required(data.title)

        options = [o for o in data.options if o.text and o.text.strip()]
        if len(options) < 2:
            raise ValidationError(Reason.INVALID_CHOICE, "Informe pelo menos duas opções.")
        if data.end_date < data.start_date:
            raise ValidationError(Reason.INVALID_PERIOD, "A data final deve ser igual ou posterior à inicial.")

        async with self.store.transaction() as tx:
            voting_id = await tx.create(VOTINGS, {
                "title": data.title.strip(),
                "description": data.description,
                "start_date": data.start_date,
                "end_date": data.end_date,
                "options": [
                    {"id": _new_id("opt"), "text": o.text.strip(), "image_url": o.image_url}
                    for o in options
                ],
                "allow_multiple_choices": data.allow_multiple_choices,
                "created_by": actor.id,
                "created_at": tx.now,
                "votes": [],
            })
            await self._notify(tx, f"Nova votação disponível: {data.title.strip()}")
        return voting_id

    @mutation(lambda _: ("Votação excluída.", ToastKind.INFO))
    async def delete_voting(self, voting_id: str):
        self._require(Action.VOTING_MANAGE)
        if not await self.store.delete(VOTINGS, voting_id):
            raise NotFoundError(VOTINGS, voting_id)

    @mutation("Voto registrado com sucesso!")
    async def cast_vote(self, voting_id: str, option_ids: Sequence[str]):
        """
        Acrescenta a cédula da unidade do usuário. A verificação roda contra
        o snapshot local e de novo na transação, junto com a chave votação:unidade.
        """
        actor = self._require_actor()
        today = self.today()

        cached = self.entities.get(VOTINGS, voting_id)
        if cached is not None:
            ledger.ensure_active(cached, today)
            ledger.validate_ballot(cached, actor.house_number, option_ids)

        async with self.store.transaction() as tx:
            voting = await self._load(tx, VOTINGS, voting_id, Voting)
            ledger.ensure_active(voting, today)
            chosen = ledger.validate_ballot(voting, actor.house_number, option_ids)
            ballot = ledger.new_ballot(actor.id, actor.name, actor.house_number, chosen, tx.now)
            await tx.claim(
                VOTINGS,
                voting_id,
                Claim("votings.ballot", ledger.ballot_key(voting_id, actor.house_number), Reason.DUPLICATE_VOTE)
            )
            await tx.update(VOTINGS, voting_id, {"votes": [*voting.votes, ballot]})

    # ============== NOTICES ==============

    @mutation("Aviso publicado com sucesso!")
    async def create_notice(self, data: Union[NoticeCreate, dict]) -> str:
        actor = self._require(Action.NOTICE_MANAGE)
        if isinstance(data, dict):
            data = NoticeCreate(**data)
        _required(data.title, data.content)
        if data.start_date and data.end_date and data.end_date < data.start_date:
            raise ValidationError(Reason.INVALID_PERIOD)

        async with self.store.transaction() as tx:
            notice_id = await tx.create(NOTICES, {
                **data.model_dump(),
                "title": data.title.strip(),
                "author_id": actor.id,
                "author_name": actor.name,
                "likes": [],
                "dislikes": [],
                "created_at": tx.now,
            })
            await self._notify(tx, f"Novo aviso publicado: {data.title.strip()}")
        return notice_id

    @mutation(lambda _: ("Aviso removido.", ToastKind.INFO))
    async def delete_notice(self, notice_id: str):
        self._require(Action.NOTICE_MANAGE)
        if not await self.store.delete(NOTICES, notice_id):
            raise NotFoundError(NOTICES, notice_id)

    @mutation(lambda state: ("Reação registrada." if state else "Reação removida.", ToastKind.INFO))
    async def toggle_notice_reaction(
        self,
        notice_id: str,
        kind: Union[ReactionKind, str],
        user_id: Optional[str] = None
    ) -> Optional[ReactionKind]:
        """
        Deixa o usuário em no máximo um dos conjuntos (likes xor dislikes).
        Retorna a reação resultante ou None.
        """
        kind = ReactionKind(kind)
        user_id = user_id or self._require_actor().id

        async with self.store.transaction() as tx:
            document = await tx.get(NOTICES, notice_id)
            if document is None:
                raise NotFoundError(NOTICES, notice_id)
            likes = [u for u in document.get("likes", []) if u != user_id]
            dislikes = [u for u in document.get("dislikes", []) if u != user_id]
            current = document.get("likes", []) if kind is ReactionKind.LIKE else document.get("dislikes", [])

            state = None
            if user_id not in current:
                state = kind
                (likes if kind is ReactionKind.LIKE else dislikes).append(user_id)

            await tx.update(NOTICES, notice_id, {"likes": likes, "dislikes": dislikes})
        return state

    # ============== DOCUMENTS ==============

    @mutation("Documento adicionado com sucesso!")
    async def add_document(self, data: Union[DocumentCreate, dict]) -> str:
        actor = self._require(Action.DOCUMENT_MANAGE)
        if isinstance(data, dict):
            data = DocumentCreate(**data)
        _required(data.title, data.file_url, data.file_name)

        async with self.store.transaction() as tx:
            return await tx.create(DOCUMENTS, {
                **data.model_dump(),
                "uploaded_by": actor.name,
                "is_pinned": False,
                "created_at": tx.now,
            })

    @mutation(lambda _: ("Documento removido.", ToastKind.INFO))
    async def delete_document(self, document_id: str):
        self._require(Action.DOCUMENT_MANAGE)
        if not await self.store.delete(DOCUMENTS, document_id):
            raise NotFoundError(DOCUMENTS, document_id)

    @mutation(lambda pinned: ("Documento fixado no topo!" if pinned else "Documento desfixado.", ToastKind.SUCCESS))
    async def toggle_document_pin(self, document_id: str) -> bool:
        self._require(Action.DOCUMENT_MANAGE)
        async with self.store.transaction() as tx:
            document = await tx.get(DOCUMENTS, document_id)
            if document is None:
                raise NotFoundError(DOCUMENTS, document_id)
            pinned = not document.get("is_pinned", False)
            await tx.update(DOCUMENTS, document_id, {"is_pinned": pinned})
        return pinned

    # ============== NOTIFICATIONS ==============

    @mutation(lambda _: ("Notificações marcadas como lidas.", ToastKind.INFO))
    async def mark_all_notifications_read(self) -> int:
        actor = self._require_actor()
        return await self.tracker.mark_all_read(actor.id)

    @mutation(lambda _: ("Notificação removida.", ToastKind.INFO))
    async def delete_notification(self, notification_id: str):
        actor = self._require_actor()
        document = await self.store.get(NOTIFICATIONS, notification_id)
        if document is None:
            raise NotFoundError(NOTIFICATIONS, notification_id)
        if document.get("user_id") not in (BROADCAST, actor.id):
            raise PolicyError(Reason.FORBIDDEN)
        await self.tracker.delete(notification_id)

    @mutation(lambda removed: (
        f"{removed} notificação(ões) removida(s)." if removed else "Nenhuma notificação para remover.",
        ToastKind.INFO
    ))
    async def delete_all_notifications(self) -> int:
        """Um único lote e um único toast, qualquer que seja a quantidade"""
        actor = self._require_actor()
        return await self.tracker.delete_all(actor.id)

    # ============== SISTEMA ==============

    @mutation("Dados antigos limpos com sucesso.")
    async def purge_legacy_data(self) -> int:
        self._require(Action.DATA_PURGE)
        batch = self.store.batch()
        for collection in (REQUESTS, RESERVATIONS):
            for document in await self.store.list(collection):
                batch.delete(collection, document["id"])
        if not len(batch):
            return 0
        removed = await batch.commit()
        logger.info(f"[GATEWAY] Limpeza de dados antigos: {removed} documento(s)")
        return removed

    @mutation("Alerta enviado a todos os moradores!")
    async def raise_alert(self, message: str) -> str:
        """Alerta SOS: notificação geral + push para todos os dispositivos"""
        actor = self._require_actor()
        _required(message)

        text = f"ALERTA SOS de {actor.name} (Unidade {actor.house_number}): {message.strip()}"
        async with self.store.transaction() as tx:
            await self._notify(tx, text)

        await self._push("all", "ALERTA SOS", text, {"type": "sos", "house_number": actor.house_number})
        logger.warning(f"[GATEWAY] {text}")
        return text

    @mutation(lambda state: {
        PermissionState.GRANTED: ("Notificações ativadas!", ToastKind.SUCCESS),
        PermissionState.DENIED: ("Permissão de notificação negada.", ToastKind.INFO),
    }.get(state, ("Notificações não suportadas neste dispositivo.", ToastKind.INFO)))
    async def register_device(self, token: Optional[str]) -> PermissionState:
        actor = self._require_actor()
        if self.devices is None:
            return PermissionState.UNSUPPORTED
        return await self.devices.register_token(actor.id, token)
