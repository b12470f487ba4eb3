"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from postdesk.apps.blog.repositories.post_repository import PostRepository
from postdesk.core.database import Database
from postdesk.main import create_app


@pytest_asyncio.fixture
async def database(tmp_path):
    """Isolated SQLite store with the schema in place."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'posts.db'}")
    await db.create_all()
    yield db
    await db.disconnect()


@pytest_asyncio.fixture
async def broken_database(tmp_path):
    """Store whose file can never be opened, so every query fails."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'posts.db'}")
    yield db
    await db.disconnect()


@pytest.fixture
def post_repo(database):
    return PostRepository(database.get_session)


@pytest_asyncio.fixture
async def client(database):
    app = create_app(database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def broken_client(broken_database):
    app = create_app(broken_database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def unreachable_database():
    """Network store with nothing listening on its port."""
    db = Database("postgresql+asyncpg://u:p@127.0.0.1:1/posts")
    yield db
    await db.disconnect()


@pytest_asyncio.fixture
async def unreachable_client(unreachable_database):
    app = create_app(unreachable_database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
