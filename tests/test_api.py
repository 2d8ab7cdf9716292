from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine

from condosync.api.auth import limiter
from condosync.database import create_tables, make_session_factory
from condosync.main import create_app
from condosync.sync import build_context
from tests.conftest import make_cpf


@pytest.fixture
def client(tmp_path, test_settings):
    async def factory():
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
        await create_tables(engine)
        return build_context(make_session_factory(engine), test_settings)

    limiter.enabled = False
    app = create_app(factory)
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = True


def login(client, username, password):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def register(client, username, house, cpf_base):
    response = client.post("/api/auth/register", json={
        "name": username.title(),
        "username": username,
        "cpf": make_cpf(cpf_base),
        "house_number": house,
        "password": "segredo123",
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def condo_today():
    return datetime.now(ZoneInfo("America/Sao_Paulo")).date()


def test_health(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy", "sync": "running"}


def test_admin_is_seeded_and_can_login(client):
    headers = login(client, "admin", "admin-secret")
    me = client.get("/api/auth/me", headers=headers).json()
    assert me["role"] == "admin"


def test_wrong_password(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "errada"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Usuário ou senha incorretos."


def test_missing_token(client):
    assert client.get("/api/users").status_code == 401


def test_register_rejects_invalid_cpf(client):
    response = client.post("/api/auth/register", json={
        "name": "Ana", "username": "ana", "cpf": "111.111.111-11", "house_number": 5, "password": "segredo123",
    })
    assert response.status_code == 422
    assert response.json()["reason"] == "InvalidCpf"


def test_reservation_conflict_over_http(client):
    ana = register(client, "ana", 101, "123456789")
    bruno = register(client, "bruno", 202, "987654321")
    day = (condo_today() + timedelta(days=3)).isoformat()

    created = client.post("/api/reservations", json={"date": day, "area": "churrasco1"}, headers=ana)
    assert created.status_code == 201
    assert created.json()["message"] == "Reserva realizada com sucesso!"

    check = client.get("/api/reservations/check", params={"date": day, "area": "churrasco1"}, headers=bruno)
    assert check.json()["reason"] == "AreaTaken"

    taken = client.post("/api/reservations", json={"date": day, "area": "churrasco1"}, headers=bruno)
    assert taken.status_code == 409
    assert taken.json()["reason"] == "AreaTaken"

    cross = client.post("/api/reservations", json={"date": day, "area": "salao_festas"}, headers=ana)
    assert cross.status_code == 403
    assert cross.json()["reason"] == "CrossExclusivity"

    listed = client.get("/api/reservations", params={"date": day}, headers=bruno).json()
    assert [r["house_number"] for r in listed] == [101]


def test_resident_cannot_change_roles(client):
    ana = register(client, "ana", 101, "123456789")
    admin_id = client.get("/api/auth/me", headers=login(client, "admin", "admin-secret")).json()["id"]
    response = client.patch(f"/api/users/{admin_id}/role", json={"role": "morador"}, headers=ana)
    assert response.status_code == 403
    assert response.json()["reason"] == "Forbidden"


def test_cpf_is_hidden_from_other_residents(client):
    ana = register(client, "ana", 101, "123456789")
    register(client, "bruno", 202, "987654321")
    users = {u["username"]: u for u in client.get("/api/users", headers=ana).json()}
    assert users["ana"]["cpf"] == make_cpf("123456789")
    assert users["bruno"]["cpf"] == ""


def test_notifications_flow(client):
    ana = register(client, "ana", 101, "123456789")
    admin = login(client, "admin", "admin-secret")
    client.post("/api/notices", json={"title": "Assembleia", "content": "Dia 20, 19h"}, headers=admin)

    feed = client.get("/api/notifications", headers=ana).json()
    assert feed["unread"] == 2
    assert all(not item["read"] for item in feed["items"])

    marked = client.post("/api/notifications/read-all", headers=ana).json()
    assert marked["changed"] == 2
    assert client.get("/api/notifications", headers=ana).json()["unread"] == 0

    removed = client.delete("/api/notifications", headers=ana).json()
    assert removed["removed"] == 2
    assert removed["message"] == "2 notificação(ões) removida(s)."


def test_websocket_streams_snapshots(client):
    ana = register(client, "ana", 101, "123456789")
    token = ana["Authorization"].split()[1]

    with client.websocket_connect(f"/api/sync/ws?token={token}") as ws:
        ws.send_json({"collections": ["notices"]})
        initial = ws.receive_json()
        assert initial["type"] == "snapshot"
        assert initial["collection"] == "notices"
        assert initial["documents"] == []

        admin = login(client, "admin", "admin-secret")
        client.post("/api/notices", json={"title": "Piscina", "content": "Fechada"}, headers=admin)

        update = ws.receive_json()
        assert update["version"] > initial["version"]
        assert [d["title"] for d in update["documents"]] == ["Piscina"]


def test_websocket_rejects_bad_token(client):
    from starlette.websockets import WebSocketDisconnect

    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/api/sync/ws?token=invalido") as ws:
            ws.receive_json()
    assert exc.value.code == 4401


def test_websocket_only_streams_own_notifications(client):
    ana = register(client, "ana", 101, "123456789")
    bruno = register(client, "bruno", 202, "987654321")
    admin = login(client, "admin", "admin-secret")

    created = client.post("/api/occurrences", json={
        "phone": "11999990000", "subject": "Privado", "description": "Barulho na unidade vizinha",
    }, headers=ana).json()
    client.post(f"/api/occurrences/{created['id']}/response", json={"response": "Resolvido"}, headers=admin)
    ana_id = client.get("/api/auth/me", headers=ana).json()["id"]

    feed = client.get("/api/notifications", headers=bruno).json()["items"]
    token = bruno["Authorization"].split()[1]
    with client.websocket_connect(f"/api/sync/ws?token={token}") as ws:
        ws.send_text("não é json")
        ws.send_json(["notifications"])
        ws.send_json({"collections": ["notifications"]})
        snapshot = ws.receive_json()

    assert snapshot["collection"] == "notifications"
    assert sorted(d["id"] for d in snapshot["documents"]) == sorted(item["id"] for item in feed)
    assert all(d["user_id"] != ana_id for d in snapshot["documents"])
