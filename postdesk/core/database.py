from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncGenerator, Optional
from uuid import UUID, uuid4

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlmodel import Column, DateTime, Field, SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession


class Database:
    """Storage handle owning the async engine and its connection pool.

    One instance is created per application and handed to every repository,
    so tests can point repositories at an isolated store.
    """

    def __init__(
        self,
        db_url: str,
        pool_size: int = 5,
        pool_timeout: float = 30.0,
        echo: bool = False,
    ):
        self.url = db_url
        self.engine = create_async_engine(
            db_url, echo=echo, **_pool_options(db_url, pool_size, pool_timeout)
        )

    async def create_all(self) -> None:
        """Create missing tables and indexes. Safe to call on every startup."""
        # models must be imported so their tables are registered on the metadata
        from postdesk.apps.blog.models.post import Post  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def disconnect(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, Any]:
        async with AsyncSession(self.engine, expire_on_commit=False) as session:
            yield session


def _pool_options(db_url: str, pool_size: int, pool_timeout: float = 30.0) -> dict:
    url = make_url(db_url)
    # in-memory sqlite runs on a single static connection
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return {}
    return {"pool_size": pool_size, "max_overflow": 0, "pool_timeout": pool_timeout}


class utcnow(FunctionElement):
    """Current UTC time, evaluated by the database."""

    type = DateTime(timezone=True)
    inherit_cache = True


@compiles(utcnow)
def _utcnow_default(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(utcnow, "postgresql")
def _utcnow_postgresql(element, compiler, **kw):
    return "now()"


@compiles(utcnow, "sqlite")
def _utcnow_sqlite(element, compiler, **kw):
    # CURRENT_TIMESTAMP stops at whole seconds
    return "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"


class BaseModel(SQLModel):
    """Base model with common fields."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Left unset on insert so the column default fills it in
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            index=True,
            server_default=utcnow(),
        ),
    )
