"""Pytest configuration and fixtures for backend tests."""

from typing import AsyncGenerator, Callable
from unittest.mock import patch

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import JSON, StaticPool, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from strength_sync.adapters.garmin_wellness import GarminWellnessAdapter
from strength_sync.api.v1.endpoints.garmin import get_garmin_adapter
from strength_sync.core.config import Settings
from strength_sync.core.database import Base, get_db
from strength_sync.core.security import hash_password
from strength_sync.main import app as main_app
from strength_sync.models import GarminActivity, GarminConnection, User, WorkoutLog


# -------------------------------------------------------------------------
# SQLite JSONB Compatibility - Convert JSONB to JSON for SQLite
# -------------------------------------------------------------------------

@event.listens_for(Base.metadata, "before_create")
def _convert_jsonb_to_json(target, connection, **kw):
    """Convert JSONB columns to JSON for SQLite compatibility."""
    if connection.dialect.name == "sqlite":
        for table in target.tables.values():
            for column in table.columns:
                if isinstance(column.type, JSONB):
                    column.type = JSON()


# -------------------------------------------------------------------------
# Database Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
async def async_engine():
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's implicit transactions break SAVEPOINT; issue BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app(db_session: AsyncSession) -> FastAPI:
    """Create a FastAPI app instance with test database."""

    async def override_get_db():
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# -------------------------------------------------------------------------
# User Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="test@example.com",
        password_hash=hash_password("testpassword123"),
        display_name="Test User",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    user = User(
        email="other@example.com",
        password_hash=hash_password("otherpassword123"),
        display_name="Other User",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_client(
    app: FastAPI,
    test_user: User,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an authenticated HTTP client."""
    session_store = {}

    async def mock_create_session(user_id: int, user_data: dict) -> str:
        session_id = f"test_session_{user_id}"
        session_store[session_id] = {"user_id": user_id, **user_data}
        return session_id

    async def mock_get_session(session_id: str) -> dict | None:
        return session_store.get(session_id)

    async def mock_delete_session(session_id: str) -> bool:
        return session_store.pop(session_id, None) is not None

    # Patch at the location where it's imported, not where it's defined
    with patch("strength_sync.api.v1.endpoints.auth.get_session", mock_get_session):
        with patch("strength_sync.api.v1.endpoints.auth.create_session", mock_create_session):
            with patch("strength_sync.api.v1.endpoints.auth.delete_session", mock_delete_session):
                session_id = await mock_create_session(test_user.id, {"email": test_user.email})

                async with AsyncClient(
                    transport=ASGITransport(app=app),
                    base_url="http://test",
                    cookies={"session_id": session_id},
                ) as ac:
                    yield ac


# -------------------------------------------------------------------------
# Garmin Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
async def garmin_connection(db_session: AsyncSession, test_user: User) -> GarminConnection:
    """Active Garmin connection for the test user."""
    connection = GarminConnection(
        user_id=test_user.id,
        garmin_user_id="garmin-user-1",
        access_token="user-access-token",
        token_secret="user-token-secret",
        is_active=True,
    )
    db_session.add(connection)
    await db_session.commit()
    await db_session.refresh(connection)
    return connection


@pytest.fixture
async def workout_log(db_session: AsyncSession, test_user: User) -> WorkoutLog:
    log = WorkoutLog(user_id=test_user.id, workout_name="Upper body")
    db_session.add(log)
    await db_session.commit()
    await db_session.refresh(log)
    return log


@pytest.fixture
async def garmin_activity_with_callback(
    db_session: AsyncSession,
    test_user: User,
) -> GarminActivity:
    activity = GarminActivity(
        user_id=test_user.id,
        garmin_activity_id="12345",
        activity_type="STRENGTH_TRAINING",
        raw_data={
            "file_callback_url": "https://apis.garmin.com/wellness-api/rest/activityFile?id=cb-12345",
            "files_available": True,
        },
    )
    db_session.add(activity)
    await db_session.commit()
    await db_session.refresh(activity)
    return activity


@pytest.fixture
def fit_file() -> Callable[..., bytes]:
    """Build an activity file holding the given (reps, weight_tenths, category) sets.

    Filler bytes are 0xFF, which has the definition-message bit set, and
    every record is followed by two filler bytes, so only the given sets
    can be picked up by the scanner.
    """

    def _build(*sets: tuple[int, int, int], header: int = 14) -> bytes:
        buffer = bytearray([0xFF] * (header + 2 + 8 * len(sets) + 12))
        buffer[0] = header
        offset = header + 2
        for reps, weight_tenths, category in sets:
            buffer[offset:offset + 6] = bytes(
                [0x00, reps, weight_tenths & 0xFF, weight_tenths >> 8, 0xFF, category]
            )
            offset += 8
        return bytes(buffer)

    return _build


@pytest.fixture
def bench_press_file() -> bytes:
    """One Bench Press set: 8 reps at 70.5 kg."""
    buffer = bytearray([0xFF] * 40)
    buffer[0] = 14
    buffer[20:26] = bytes([0x00, 8, 0xC1, 0x02, 0xFF, 0x00])
    return bytes(buffer)


@pytest.fixture
async def make_adapter() -> AsyncGenerator[Callable[..., GarminWellnessAdapter], None]:
    """Build an adapter whose HTTP calls go to a MockTransport handler."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler, **settings_overrides) -> GarminWellnessAdapter:
        settings = Settings(
            garmin_consumer_key="consumer-key",
            garmin_consumer_secret="consumer-secret",
            **settings_overrides,
        )
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return GarminWellnessAdapter(settings=settings, client=client)

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def override_adapter(app: FastAPI):
    """Route the strength import endpoint through a given adapter."""

    def _override(adapter: GarminWellnessAdapter) -> None:
        app.dependency_overrides[get_garmin_adapter] = lambda: adapter

    return _override
