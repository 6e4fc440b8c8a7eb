"""Test configuration and fixtures"""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from staybook.api.deps import get_reservation_service
from staybook.core.permissions import Principal, UserRole
from staybook.core.security import create_access_token
from staybook.database import Base, create_engine, create_session_factory, get_db
from staybook.main import app
from staybook.models import Accommodation, User
from staybook.services.reservation_service import ReservationService

# Fixed "now" for every lifecycle test: 2025-06-01 00:00 UTC
NOW = datetime(2025, 6, 1, tzinfo=UTC)


@pytest.fixture
async def session_factory(tmp_path):
    """File-backed SQLite so concurrent sessions see each other's commits"""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'staybook.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _add_user(session_factory, role: UserRole, *, is_active: bool = True) -> User:
    async with session_factory() as session:
        user = User(
            id=uuid4(),
            email=f"{role.value}-{uuid4().hex[:8]}@example.com",
            full_name=f"Test {role.value.title()}",
            role=role.value,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        return user


async def _add_accommodation(session_factory, host: User, *, capacity: int = 4, is_deleted: bool = False):
    async with session_factory() as session:
        accommodation = Accommodation(
            id=uuid4(),
            host_id=host.id,
            title="Seaside cottage",
            capacity=capacity,
            is_deleted=is_deleted,
        )
        session.add(accommodation)
        await session.commit()
        return accommodation


def principal_of(user: User) -> Principal:
    return Principal(id=user.id, role=UserRole(user.role))


@pytest.fixture
async def guest(session_factory):
    return await _add_user(session_factory, UserRole.GUEST)


@pytest.fixture
async def other_guest(session_factory):
    return await _add_user(session_factory, UserRole.GUEST)


@pytest.fixture
async def inactive_guest(session_factory):
    return await _add_user(session_factory, UserRole.GUEST, is_active=False)


@pytest.fixture
async def host(session_factory):
    return await _add_user(session_factory, UserRole.HOST)


@pytest.fixture
async def other_host(session_factory):
    return await _add_user(session_factory, UserRole.HOST)


@pytest.fixture
async def admin(session_factory):
    return await _add_user(session_factory, UserRole.ADMIN)


@pytest.fixture
async def accommodation(session_factory, host):
    return await _add_accommodation(session_factory, host)


@pytest.fixture
async def other_accommodation(session_factory, other_host):
    return await _add_accommodation(session_factory, other_host)


@pytest.fixture
async def deleted_accommodation(session_factory, host):
    return await _add_accommodation(session_factory, host, is_deleted=True)


@pytest.fixture
def service(session_factory):
    return ReservationService(session_factory, clock=lambda: NOW, notice_hours=48, retry_attempts=1)


@pytest.fixture
async def client(session_factory, service):
    """HTTP client against the app, wired to the test database and service"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reservation_service] = lambda: service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def access_token_for(user_id) -> str:
    return create_access_token({"sub": str(user_id)})


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token_for(user.id)}"}
