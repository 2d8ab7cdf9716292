import asyncio
from datetime import timedelta

import pytest

from condosync.core import ConflictError, PolicyError, Reason, Role, ValidationError, RemoteError
from condosync.schemas import Area, OccurrenceStatus, ReactionKind, RequestStatus, CommentType
from condosync.sync import ToastKind, ToastQueue, unread_count
from tests.conftest import TODAY, make_cpf

VALID_CPF = "52998224725"


def gateway(sync, actor=None):
    return sync.gateway(actor, ToastQueue(ttl_seconds=60))


def toast_kinds(gw):
    return [t.kind for t in gw.toasts.active()]


# ============== RESERVAS ==============

async def test_scenario_cross_exclusivity_and_area_taken(sync, people):
    day = TODAY + timedelta(days=10)
    r101 = gateway(sync, people["r101"])
    r202 = gateway(sync, people["r202"])

    reservation_id = await r101.create_reservation({"date": day, "area": Area.CHURRASCO_1})
    assert sync.entities.get("reservations", reservation_id).house_number == 101

    with pytest.raises(PolicyError) as cross:
        await r101.create_reservation({"date": day, "area": Area.SALAO_FESTAS})
    assert cross.value.reason == Reason.CROSS_EXCLUSIVITY

    with pytest.raises(ConflictError) as taken:
        await r202.create_reservation({"date": day, "area": Area.CHURRASCO_1})
    assert taken.value.reason == Reason.AREA_TAKEN

    assert len(sync.entities.reservations_on(day)) == 1
    assert toast_kinds(r101) == [ToastKind.SUCCESS, ToastKind.ERROR]
    assert toast_kinds(r202) == [ToastKind.ERROR]


async def test_concurrent_bookings_of_one_slot(sync, people):
    day = TODAY + timedelta(days=3)
    results = await asyncio.gather(
        gateway(sync, people["r101"]).create_reservation({"date": day, "area": Area.CHURRASCO_2}),
        gateway(sync, people["r202"]).create_reservation({"date": day, "area": Area.CHURRASCO_2}),
        return_exceptions=True,
    )
    assert sum(isinstance(r, str) for r in results) == 1
    assert [r.reason for r in results if isinstance(r, ConflictError)] == [Reason.AREA_TAKEN]
    assert len(sync.entities.reservations_on(day)) == 1


async def test_cancel_frees_the_slot(sync, people):
    day = TODAY + timedelta(days=2)
    r101 = gateway(sync, people["r101"])
    reservation_id = await r101.create_reservation({"date": day, "area": Area.SALAO_FESTAS})

    with pytest.raises(PolicyError):
        await gateway(sync, people["r202"]).cancel_reservation(reservation_id)

    await r101.cancel_reservation(reservation_id)
    assert await gateway(sync, people["r202"]).create_reservation({"date": day, "area": Area.SALAO_FESTAS})


async def test_lead_time_exemption(sync, people):
    far = TODAY + timedelta(days=30)
    with pytest.raises(PolicyError) as exc:
        await gateway(sync, people["gestao"]).create_reservation({"date": far, "area": Area.CHURRASCO_1})
    assert exc.value.reason == Reason.LEAD_TIME_EXCEEDED

    reservation_id = await gateway(sync, people["sindico"]).create_reservation(
        {"date": far, "area": Area.CHURRASCO_1, "house_number": 303, "user_name": "Carla"}
    )
    booked = sync.entities.get("reservations", reservation_id)
    assert (booked.house_number, booked.user_name) == (303, "Carla")


async def test_resident_cannot_book_for_other_house(sync, people):
    with pytest.raises(PolicyError):
        await gateway(sync, people["r101"]).create_reservation(
            {"date": TODAY + timedelta(days=1), "area": Area.CHURRASCO_1, "house_number": 202}
        )


# ============== VOTAÇÕES ==============

async def create_voting(sync, people, **extra):
    admin = gateway(sync, people["admin"])
    data = {
        "title": "Nova cor do portão",
        "start_date": TODAY - timedelta(days=1),
        "end_date": TODAY + timedelta(days=5),
        "options": [{"text": "A"}, {"text": "B"}],
        **extra,
    }
    voting_id = await admin.create_voting(data)
    voting = sync.entities.get("votings", voting_id)
    return voting, {o.text: o.id for o in voting.options}


async def test_scenario_one_ballot_per_household(sync, people):
    voting, options = await create_voting(sync, people)

    await gateway(sync, people["r5a"]).cast_vote(voting.id, [options["A"]])

    with pytest.raises(ConflictError) as exc:
        await gateway(sync, people["r5b"]).cast_vote(voting.id, [options["B"]])
    assert exc.value.reason == Reason.DUPLICATE_VOTE

    ballots = [b for b in sync.entities.get("votings", voting.id).votes if b.house_number == 5]
    assert len(ballots) == 1
    assert ballots[0].option_ids == [options["A"]]
    assert ballots[0].user_id == people["r5a"].id


async def test_concurrent_ballots_from_one_household(sync, people):
    voting, options = await create_voting(sync, people)
    results = await asyncio.gather(
        gateway(sync, people["r5a"]).cast_vote(voting.id, [options["A"]]),
        gateway(sync, people["r5b"]).cast_vote(voting.id, [options["B"]]),
        return_exceptions=True,
    )
    assert sum(isinstance(r, ConflictError) for r in results) == 1
    assert len(sync.entities.get("votings", voting.id).votes) == 1


async def test_voting_validation(sync, people):
    admin = gateway(sync, people["admin"])
    with pytest.raises(ValidationError):
        await admin.create_voting({
            "title": "x", "start_date": TODAY, "end_date": TODAY, "options": [{"text": "A"}, {"text": " "}],
        })
    with pytest.raises(ValidationError) as period:
        await admin.create_voting({
            "title": "x", "start_date": TODAY, "end_date": TODAY - timedelta(days=1),
            "options": [{"text": "A"}, {"text": "B"}],
        })
    assert period.value.reason == Reason.INVALID_PERIOD

    with pytest.raises(PolicyError):
        await gateway(sync, people["r101"]).create_voting({
            "title": "x", "start_date": TODAY, "end_date": TODAY, "options": [{"text": "A"}, {"text": "B"}],
        })


async def test_closed_voting_rejects_ballots(sync, people):
    voting, options = await create_voting(
        sync, people, start_date=TODAY - timedelta(days=5), end_date=TODAY - timedelta(days=1)
    )
    with pytest.raises(PolicyError) as exc:
        await gateway(sync, people["r101"]).cast_vote(voting.id, [options["A"]])
    assert exc.value.reason == Reason.VOTING_NOT_ACTIVE


# ============== NOTIFICAÇÕES ==============

async def test_scenario_unread_count_and_mark_all_read(sync, people):
    r101 = people["r101"]
    admin = gateway(sync, people["admin"])

    await admin.create_notice({"title": "Dedetização", "content": "Sábado, 9h"})
    occurrence_id = await gateway(sync, r101).create_occurrence(
        {"phone": "11999990000", "subject": "Vazamento", "description": "Garagem"}
    )
    await admin.respond_occurrence(occurrence_id, "Encanador agendado.")
    other_id = await gateway(sync, people["r202"]).create_occurrence(
        {"phone": "11999990001", "subject": "Barulho", "description": "Após 22h"}
    )
    await admin.respond_occurrence(other_id, "Síndico notificado.")

    notifications = sync.entities.notifications
    expected = sum(1 for n in notifications if n.user_id in ("all", r101.id) and r101.id not in n.read_by)
    assert expected == 2
    assert unread_count(notifications, r101.id) == expected

    gw = gateway(sync, r101)
    assert await gw.mark_all_notifications_read() == 2
    assert unread_count(sync.entities.notifications, r101.id) == 0
    assert await gw.mark_all_notifications_read() == 0
    assert unread_count(sync.entities.notifications, people["r202"].id) == 2


async def test_delete_all_notifications_is_a_single_toast(sync, people):
    admin = gateway(sync, people["admin"])
    for title in ("a", "b", "c"):
        await admin.create_notice({"title": title, "content": "..."})

    gw = gateway(sync, people["r101"])
    assert await gw.delete_all_notifications() == 3
    assert [t.message for t in gw.toasts.active()] == ["3 notificação(ões) removida(s)."]
    assert sync.entities.notifications == []

    assert await gw.delete_all_notifications() == 0
    assert gw.toasts.last.message == "Nenhuma notificação para remover."


async def test_targeted_notification_cannot_be_deleted_by_others(sync, people):
    occurrence_id = await gateway(sync, people["r101"]).create_occurrence(
        {"phone": "1", "subject": "Lâmpada", "description": "Hall"}
    )
    await gateway(sync, people["admin"]).respond_occurrence(occurrence_id, "Trocada.")
    targeted = next(n for n in sync.entities.notifications if n.user_id == people["r101"].id)

    with pytest.raises(PolicyError):
        await gateway(sync, people["r202"]).delete_notification(targeted.id)
    await gateway(sync, people["r101"]).delete_notification(targeted.id)
    assert sync.entities.get("notifications", targeted.id) is None


# ============== PENDÊNCIAS ==============

REQUEST = {"title": "Lâmpada queimada", "description": "Poste da rua 2", "sector": "Ruas", "type": "Elétrica"}


async def test_create_request_notifies_everyone(sync, people):
    gw = gateway(sync, people["r101"])
    request_id = await gw.create_request(REQUEST)

    request = sync.entities.get("requests", request_id)
    assert request.status == RequestStatus.PENDENTE
    assert request.author_name == people["r101"].name
    assert any(n.request_id == request_id and n.user_id == "all" for n in sync.entities.notifications)
    assert len(gw.toasts) == 1


async def test_status_change_with_justification_appends_history(sync, people):
    request_id = await gateway(sync, people["r101"]).create_request(REQUEST)
    manager = gateway(sync, people["gestao"])

    with pytest.raises(ValidationError):
        await manager.change_request_status(request_id, RequestStatus.RECUSADA, "   ")

    await manager.change_request_status(request_id, RequestStatus.EM_ANDAMENTO, "Equipe a caminho")
    request = sync.entities.get("requests", request_id)
    assert request.status == RequestStatus.EM_ANDAMENTO
    assert request.admin_response == "Equipe a caminho"
    history = request.comments[-1]
    assert history.type == CommentType.STATUS_CHANGE
    assert (history.from_status, history.to_status) == (RequestStatus.PENDENTE, RequestStatus.EM_ANDAMENTO)
    assert history.text == 'Alterou o status para "Em Andamento". Justificativa: Equipe a caminho'

    await manager.change_request_status(request_id, RequestStatus.CONCLUIDO)
    request = sync.entities.get("requests", request_id)
    assert len(request.comments) == 1
    messages = [n.message for n in sync.entities.notifications]
    assert 'Status da sugestão "Lâmpada queimada" alterado para Concluído' in messages

    assert toast_kinds(manager) == [ToastKind.ERROR, ToastKind.INFO, ToastKind.INFO]


async def test_resident_cannot_change_status(sync, people):
    request_id = await gateway(sync, people["r101"]).create_request(REQUEST)
    with pytest.raises(PolicyError) as exc:
        await gateway(sync, people["r101"]).change_request_status(request_id, RequestStatus.APROVADA)
    assert exc.value.reason == Reason.FORBIDDEN


async def test_like_toggle_and_comments(sync, people):
    request_id = await gateway(sync, people["r101"]).create_request(REQUEST)
    gw = gateway(sync, people["r202"])

    assert await gw.toggle_like(request_id) is True
    assert await gw.toggle_like(request_id) is False
    assert sync.entities.get("requests", request_id).likes == []

    await gw.add_comment(request_id, "Aqui também")
    request = sync.entities.get("requests", request_id)
    assert request.comments[0].text == "Aqui também"
    assert request.comments[0].type == CommentType.MANUAL


async def test_only_author_or_management_edits_request(sync, people):
    request_id = await gateway(sync, people["r101"]).create_request(REQUEST)
    with pytest.raises(PolicyError):
        await gateway(sync, people["r202"]).delete_request(request_id)
    await gateway(sync, people["r101"]).update_request(request_id, {"priority": "Alta"})
    assert sync.entities.get("requests", request_id).priority.value == "Alta"
    await gateway(sync, people["gestao"]).delete_request(request_id)
    assert sync.entities.get("requests", request_id) is None


# ============== OCORRÊNCIAS ==============

async def test_occurrence_edit_window_closes_after_response(sync, people):
    author = gateway(sync, people["r101"])
    occurrence_id = await author.create_occurrence({"phone": "1", "subject": "Portão", "description": "Travando"})

    await author.update_occurrence(occurrence_id, {"description": "Travando de novo"})
    with pytest.raises(PolicyError):
        await gateway(sync, people["r202"]).update_occurrence(occurrence_id, {"description": "x"})

    await gateway(sync, people["sindico"]).respond_occurrence(occurrence_id, "Técnico chamado.")
    occurrence = sync.entities.get("occurrences", occurrence_id)
    assert occurrence.status == OccurrenceStatus.RESOLVIDO
    assert occurrence.resolved_at is not None

    with pytest.raises(PolicyError) as exc:
        await author.update_occurrence(occurrence_id, {"description": "ainda travando"})
    assert exc.value.reason == Reason.EDIT_WINDOW_CLOSED


async def test_only_admin_deletes_occurrences(sync, people):
    occurrence_id = await gateway(sync, people["r101"]).create_occurrence(
        {"phone": "1", "subject": "x", "description": "y"}
    )
    with pytest.raises(PolicyError):
        await gateway(sync, people["gestao"]).delete_occurrence(occurrence_id)
    await gateway(sync, people["admin"]).delete_occurrence(occurrence_id)
    assert sync.entities.get("occurrences", occurrence_id) is None


# ============== AVISOS E DOCUMENTOS ==============

async def test_notice_reactions_are_exclusive(sync, people):
    notice_id = await gateway(sync, people["sindico"]).create_notice({"title": "Assembleia", "content": "Dia 20"})
    gw = gateway(sync, people["r101"])
    user_id = people["r101"].id

    assert await gw.toggle_notice_reaction(notice_id, ReactionKind.LIKE) == ReactionKind.LIKE
    assert await gw.toggle_notice_reaction(notice_id, ReactionKind.DISLIKE) == ReactionKind.DISLIKE
    notice = sync.entities.get("notices", notice_id)
    assert user_id not in notice.likes and notice.dislikes == [user_id]

    assert await gw.toggle_notice_reaction(notice_id, "dislike") is None
    notice = sync.entities.get("notices", notice_id)
    assert notice.likes == [] and notice.dislikes == []


async def test_document_pinning(sync, people):
    manager = gateway(sync, people["gestao"])
    document_id = await manager.add_document({"title": "Regimento", "file_url": "http://x/r.pdf", "file_name": "r.pdf"})
    assert await manager.toggle_document_pin(document_id) is True
    assert sync.entities.sorted_documents()[0].id == document_id
    assert manager.toasts.last.message == "Documento fixado no topo!"
    assert await manager.toggle_document_pin(document_id) is False

    with pytest.raises(PolicyError):
        await gateway(sync, people["r101"]).add_document({"title": "x", "file_url": "u", "file_name": "f"})


async def test_upload_returns_public_url(sync, people):
    url = await gateway(sync, people["r101"]).upload("foto vazamento.jpg", b"\xff\xd8\xff", "occurrences")
    assert url.startswith("http://condo.test/uploads/occurrences/")
    assert url.endswith("_foto_vazamento.jpg")


# ============== USUÁRIOS ==============

def new_resident(**overrides):
    return {"name": "Diego Lima", "username": "Diego", "cpf": make_cpf("123456789"), "house_number": 404,
            "password": "segredo123", **overrides}


async def test_create_user_creates_login_and_profile(sync, people):
    admin = gateway(sync, people["admin"])
    user = await admin.create_user(new_resident())

    assert user.role == Role.MORADOR
    assert user.username == "diego"
    assert sync.entities.get("users", user.id).house_number == 404
    session = await sync.identity.sign_in("diego@condominio-ps1.local", "segredo123")
    assert session.uid == user.id
    assert any("Diego Lima" in n.message for n in sync.entities.notifications)


@pytest.mark.parametrize("overrides, error, reason", [
    ({"cpf": "123.456.789-00"}, ValidationError, Reason.INVALID_CPF),
    ({"username": "Morador101"}, ConflictError, Reason.DUPLICATE_USERNAME),
    ({"house_number": 202}, ConflictError, Reason.DUPLICATE_HOUSE),
    ({"name": "  "}, ValidationError, Reason.MISSING_FIELD),
])
async def test_create_user_rejections(sync, people, overrides, error, reason):
    admin = gateway(sync, people["admin"])
    with pytest.raises(error) as exc:
        await admin.create_user(new_resident(**overrides))
    assert exc.value.reason == reason
    assert await sync.identity.find_uid("diego@condominio-ps1.local") is None


async def test_duplicate_cpf(sync, people):
    admin = gateway(sync, people["admin"])
    await admin.create_user(new_resident(cpf=VALID_CPF))
    with pytest.raises(ConflictError) as exc:
        await admin.create_user(new_resident(cpf="529.982.247-25", username="outro", house_number=405))
    assert exc.value.reason == Reason.DUPLICATE_CPF


async def test_username_uniqueness_ignores_inner_spaces(sync, people):
    admin = gateway(sync, people["admin"])
    user = await admin.create_user(new_resident(username="Ana Maria", name="ana maria da silva"))
    assert user.username == "anamaria"
    assert user.name == "Ana Maria da Silva"

    with pytest.raises(ConflictError) as exc:
        await admin.create_user(new_resident(username="anamaria", cpf=VALID_CPF, house_number=405))
    assert exc.value.reason == Reason.DUPLICATE_USERNAME


async def test_weak_password_is_reported(sync, people):
    with pytest.raises(RemoteError) as exc:
        await gateway(sync, people["admin"]).create_user(new_resident(password="123"))
    assert exc.value.message == "A senha é muito fraca."


async def test_only_admin_changes_roles(sync, people):
    with pytest.raises(PolicyError):
        await gateway(sync, people["sindico"]).update_user_role(people["r101"].id, Role.GESTAO)
    await gateway(sync, people["admin"]).update_user_role(people["r101"].id, "gestao")
    assert sync.entities.get("users", people["r101"].id).role == Role.GESTAO


async def test_delete_user_keeps_profile_removal_when_login_cleanup_fails(sync, people):
    admin = gateway(sync, people["admin"])
    warning = await admin.delete_user(people["r202"].id)

    assert sync.entities.get("users", people["r202"].id) is None
    assert warning is not None and warning.reason == Reason.AUTH_ACCOUNT_CLEANUP
    assert admin.warnings == [warning]
    assert toast_kinds(admin) == [ToastKind.SUCCESS]


async def test_delete_user_removes_login(sync, people):
    admin = gateway(sync, people["admin"])
    user = await admin.create_user(new_resident())
    assert await admin.delete_user(user.id) is None
    assert await sync.identity.find_uid("diego@condominio-ps1.local") is None


async def test_ensure_admin_runs_once(sync):
    gw = sync.gateway()
    admin = await gw.ensure_admin()
    assert admin.role == Role.ADMIN
    assert await gw.ensure_admin() is None
    assert [u.username for u in sync.entities.users] == ["admin"]
    session = await sync.identity.sign_in("admin@condominio-ps1.local", "admin-secret")
    assert session.uid == admin.id


# ============== SISTEMA ==============

async def test_purge_legacy_data(sync, people):
    await gateway(sync, people["r101"]).create_request(REQUEST)
    await gateway(sync, people["r101"]).create_reservation({"date": TODAY, "area": Area.CHURRASCO_1})

    with pytest.raises(PolicyError):
        await gateway(sync, people["sindico"]).purge_legacy_data()

    assert await gateway(sync, people["admin"]).purge_legacy_data() == 2
    assert sync.entities.requests == [] and sync.entities.reservations == []
    assert len(sync.entities.users) == 7


async def test_sos_alert_broadcasts(sync, people):
    gw = gateway(sync, people["r101"])
    text = await gw.raise_alert("Princípio de incêndio no bloco B")
    assert text.startswith("ALERTA SOS de Morador101 (Unidade 101)")
    assert sync.entities.notifications[0].message == text


async def test_register_device(sync, people):
    gw = gateway(sync, people["r101"])
    assert (await gw.register_device("token-abc")).value == "granted"
    assert (await gw.register_device(None)).value == "denied"
    assert await sync.devices.resolve_tokens(people["r101"].id) == ["token-abc"]


async def test_anonymous_gateway_is_rejected(sync):
    with pytest.raises(PolicyError):
        await sync.gateway().create_request(REQUEST)
