from types import SimpleNamespace
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import src.domain  # noqa: F401  registers tables on SQLModel.metadata
from src.depends import build_engine, build_session_factory, get_session
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyLedgerTransactionRepository,
    SqlAlchemyLedgerSettingsRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork


@pytest_asyncio.fixture(scope="function")
async def engine():
    """In-memory SQLite database shared by every connection of one test"""
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = build_session_factory(engine)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def repos(db_session):
    """Unit of work plus repositories bound to the test session"""
    return SimpleNamespace(
        uow=SqlAlchemyUnitOfWork(db_session),
        customers=SqlAlchemyCustomerRepository(db_session),
        transactions=SqlAlchemyLedgerTransactionRepository(db_session),
        settings=SqlAlchemyLedgerSettingsRepository(db_session),
    )


@pytest_asyncio.fixture
async def client(engine):
    """Create test client; each request gets its own session on the test database"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)
    Session = build_session_factory(engine)

    async def override_get_session():
        async with Session() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
