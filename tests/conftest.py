from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tutorial_portal.api.deps import (
    get_api_key_validator,
    get_clock,
    get_db_session,
    get_webhook_client,
)
from tutorial_portal.api.main import app
from tutorial_portal.core.auth import StaticApiKeyValidator
from tutorial_portal.infrastructure.db.base import Base
from tutorial_portal.infrastructure.db.models import TutorialModel, UserModel, UserRole

from tests.utils import (
    ADMIN_ID,
    API_KEY,
    EMPLOYEE_ID,
    OTHER_EMPLOYEE_ID,
    FrozenClock,
    RecordingWebhookClient,
)

SAO_PAULO = ZoneInfo("America/Sao_Paulo")

USERS = [
    {
        "id": EMPLOYEE_ID,
        "name": "Ana Souza",
        "email": "ana@portal.com.br",
        "department": "Vendas",
        "role": UserRole.EMPLOYEE,
    },
    {
        "id": OTHER_EMPLOYEE_ID,
        "name": "Bruno Lima",
        "email": "bruno@portal.com.br",
        "department": "Suporte",
        "role": UserRole.EMPLOYEE,
    },
    {
        "id": ADMIN_ID,
        "name": "Carla Dias",
        "email": "carla@portal.com.br",
        "department": "Gerência",
        "role": UserRole.ADMIN,
    },
]

TUTORIALS = [
    {
        "id": "t1",
        "name": "Primeiros passos",
        "description": "Onboarding",
        "tag": "onboarding",
        "id_cademi": 101,
    },
    {
        "id": "t2",
        "name": "Notas fiscais",
        "description": "Emissão de NF-e",
        "tag": "fiscal",
        "id_cademi": 102,
    },
    {
        "id": "t3",
        "name": "Relatórios",
        "description": "Exportação de dados",
        "tag": "relatorios",
        "id_cademi": 103,
    },
]


async def seed_reference_data(session: AsyncSession) -> None:
    for user in USERS:
        session.add(UserModel(**user))
    for tutorial in TUTORIALS:
        session.add(TutorialModel(**tutorial))
    await session.commit()


@pytest.fixture()
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await seed_reference_data(session)
    yield factory
    await engine.dispose()


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 3, 10, 9, 30, tzinfo=SAO_PAULO))


@pytest.fixture()
def webhook_client() -> RecordingWebhookClient:
    return RecordingWebhookClient()


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FrozenClock,
    webhook_client: RecordingWebhookClient,
) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app with storage, time and outbound calls replaced."""

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_webhook_client] = lambda: webhook_client
    app.dependency_overrides[get_api_key_validator] = lambda: StaticApiKeyValidator(API_KEY)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
