from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from taskflow.db.utils import create_session_factory, create_tables
from taskflow.tasks import services
from taskflow.tasks.enums import UserRole
from taskflow.tasks.models import User
from taskflow.web.application import get_app
from tests.helpers import PASSWORD


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """
    Backend for anyio pytest plugin.

    :return: backend name.
    """
    return "asyncio"


@pytest.fixture
async def _engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create engine and databases.

    :yield: new engine.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskflow.sqlite3'}")
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(_engine: AsyncEngine) -> async_sessionmaker:
    return create_session_factory(_engine)


@pytest.fixture
def fastapi_app(session_factory: async_sessionmaker) -> FastAPI:
    """
    Fixture for creating FastAPI app.

    :return: fastapi app with the test database wired in.
    """
    application = get_app()
    application.state.db_session_factory = session_factory
    return application


@pytest.fixture
async def client(fastapi_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Fixture that creates client for requesting server.

    :param fastapi_app: the application.
    :yield: client for the app.
    """
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(
    session_factory: async_sessionmaker,
) -> Callable[..., Awaitable[User]]:
    async def _make_user(name: str, role: UserRole = UserRole.DEVELOPER) -> User:
        async with session_factory() as session:
            user = await services.create_user(
                session,
                name=name,
                email=f"{name.lower().replace(' ', '.')}@fealtyx.com",
                password=PASSWORD,
                role=role,
            )
            await session.commit()
            return user

    return _make_user


@pytest.fixture
async def manager(make_user) -> User:
    return await make_user("Manager", UserRole.MANAGER)


@pytest.fixture
async def dev1(make_user) -> User:
    return await make_user("Dev One")


@pytest.fixture
async def dev2(make_user) -> User:
    return await make_user("Dev Two")
