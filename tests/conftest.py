from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from condosync.core.config import Settings
from condosync.core.policy import Role
from condosync.database import create_tables, make_session_factory
from condosync.schemas import User
from condosync.sync import build_context

# 12:00 em São Paulo
START = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)
TODAY = date(2026, 3, 10)


class FakeClock:
    """Avança um segundo por leitura (created_at distintos, mesmo dia)"""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_cpf(base: str) -> str:
    """Completa 9 dígitos com os verificadores"""
    digits = [int(d) for d in base]
    for weight in (10, 11):
        total = sum(d * (weight - i) for i, d in enumerate(digits))
        rest = 11 - total % 11
        digits.append(0 if rest >= 10 else rest)
    return "".join(str(d) for d in digits)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        UPLOAD_DIR=str(tmp_path / "uploads"),
        PUBLIC_BASE_URL="http://condo.test",
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="admin-secret",
        SUBSCRIPTION_RETRY_ATTEMPTS=3,
        SUBSCRIPTION_RETRY_BASE_SECONDS=0.01,
        SUBSCRIPTION_RETRY_MAX_SECONDS=0.05,
        PUSH_ENDPOINT_URL=None,
        FCM_PROJECT_ID=None,
        FCM_ACCESS_TOKEN=None,
    )


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'condo.db'}")
    await create_tables(engine)
    yield make_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def sync(session_factory, test_settings, clock):
    context = build_context(session_factory, test_settings, clock=clock)
    await context.start()
    yield context
    await context.stop()


async def add_profile(sync, username: str, house_number: int, role: Role = Role.MORADOR) -> User:
    """Grava um perfil direto no store (sem conta de login)"""
    user = User(
        id=f"user-{username}",
        name=username.title(),
        username=username,
        cpf="",
        house_number=house_number,
        role=role,
        email=f"{username}@condominio-ps1.local",
    )
    await sync.store.create("users", user.model_dump(exclude={"id"}), doc_id=user.id)
    return user


@pytest.fixture
async def people(sync):
    return {
        "admin": await add_profile(sync, "admin", 0, Role.ADMIN),
        "sindico": await add_profile(sync, "sindico", 1, Role.SINDICO),
        "gestao": await add_profile(sync, "gestao", 2, Role.GESTAO),
        "r101": await add_profile(sync, "morador101", 101),
        "r202": await add_profile(sync, "morador202", 202),
        "r5a": await add_profile(sync, "ana5", 5),
        "r5b": await add_profile(sync, "bruno5", 5),
    }
