from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel
from sqlalchemy import func, literal_column, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from postdesk.core.result import InvalidInput, NotFound, Ok, Result, StorageFailure

T = TypeVar("T", bound=SQLModel)
R = TypeVar("R", bound=BaseModel)

logger = structlog.get_logger()

# Drivers such as asyncpg raise plain OSError subclasses when the server is
# unreachable; SQLAlchemy only wraps errors raised on an open connection
STORAGE_ERRORS = (SQLAlchemyError, OSError)


class BaseRepository(Generic[T, R]):
    """Single-statement CRUD over one table.

    Every public operation returns a `Result`; engine errors are logged and
    collapsed into `StorageFailure` so callers never see driver exceptions.
    """

    model: Type[T]
    read_schema: Type[R]
    # Columns a partial update may touch
    updatable_fields: Sequence[str] = ()

    def __init__(self, get_session: Callable[..., AsyncSession]):
        self.get_session = get_session

    def _handle_db_error(self, error: Exception, operation: str) -> StorageFailure:
        """Log a database error and turn it into a storage failure."""
        if isinstance(error, IntegrityError):
            detail = f"Database integrity error during {operation}"
        else:
            detail = f"Database error during {operation}"
        logger.error(
            "storage_failure",
            table=self.model.__tablename__,
            operation=operation,
            error=str(error),
        )
        return StorageFailure(detail=detail)

    @staticmethod
    def _parse_id(item_id: Any) -> Optional[UUID]:
        if isinstance(item_id, UUID):
            return item_id
        try:
            return UUID(str(item_id))
        except ValueError:
            return None

    def _to_read(self, obj: T) -> R:
        return self.read_schema.model_validate(obj)

    def _newest_first(self, db: AsyncSession) -> List[Any]:
        order = [self.model.created_at.desc()]  # type: ignore
        # SQLite timestamps stop at milliseconds; rowid keeps insertion order within one
        if db.bind is not None and db.bind.dialect.name == "sqlite":
            order.append(literal_column("rowid").desc())
        return order

    # ----------------- validation hooks ----------------- #
    def _validate_create(self, create_data: Dict[str, Any]) -> Optional[InvalidInput]:
        """Validate data before creation."""
        return None

    def _validate_update(self, update_data: Dict[str, Any]) -> Optional[InvalidInput]:
        """Validate data before update."""
        return None

    # ----------------- CRUD ----------------- #
    async def get(self, item_id: Any) -> Result[R]:
        """Get a single item by ID."""
        parsed_id = self._parse_id(item_id)
        if parsed_id is None:
            return InvalidInput(message=f"Malformed id: {item_id!r}", fields=["id"])

        async with self.get_session() as db:
            try:
                stmt = select(self.model).where(self.model.id == parsed_id)  # type: ignore
                result = await db.exec(stmt)
                obj = result.first()
            except STORAGE_ERRORS as e:
                return self._handle_db_error(e, "get")

        if obj is None:
            return NotFound(message=f"{self.model.__name__} {parsed_id} not found")
        return Ok(self._to_read(obj))

    async def list(self, limit: Optional[int] = None) -> Result[List[R]]:
        """Get items newest first, optionally capped at `limit`."""
        if limit is not None and limit < 1:
            return InvalidInput(message="limit must be a positive integer", fields=["limit"])

        async with self.get_session() as db:
            try:
                stmt = select(self.model).order_by(*self._newest_first(db))
                if limit is not None:
                    stmt = stmt.limit(limit)
                result = await db.exec(stmt)
                items = result.all()
            except STORAGE_ERRORS as e:
                return self._handle_db_error(e, "list")

        return Ok([self._to_read(obj) for obj in items])

    async def create(self, create_data: Dict[str, Any]) -> Result[UUID]:
        """Create a new item and return its generated id."""
        # Identity comes from the model default, the timestamp from the column default
        create_data = {
            key: value
            for key, value in create_data.items()
            if key not in ("id", "created_at")
        }
        invalid = self._validate_create(create_data)
        if invalid is not None:
            return invalid

        async with self.get_session() as db:
            try:
                obj = self.model(**create_data)
                db.add(obj)
                await db.commit()
            except STORAGE_ERRORS as e:
                await db.rollback()
                return self._handle_db_error(e, "create")

        logger.info("item_created", table=self.model.__tablename__, id=str(obj.id))  # type: ignore
        return Ok(obj.id)  # type: ignore

    async def update(self, item_id: Any, update_data: Dict[str, Any]) -> Result[UUID]:
        """Partially update an item in one statement.

        Fields that are missing or None keep their stored value: each column
        is assigned ``COALESCE(:new, column)`` so the engine decides, and
        concurrent updates to different fields cannot overwrite each other.
        """
        parsed_id = self._parse_id(item_id)
        if parsed_id is None:
            return InvalidInput(message=f"Malformed id: {item_id!r}", fields=["id"])

        update_data = {
            key: value
            for key, value in update_data.items()
            if key in self.updatable_fields
        }
        invalid = self._validate_update(update_data)
        if invalid is not None:
            return invalid

        values = {
            name: func.coalesce(update_data.get(name), getattr(self.model, name))
            for name in self.updatable_fields
        }
        stmt = update(self.model).where(self.model.id == parsed_id).values(**values)  # type: ignore

        async with self.get_session() as db:
            try:
                result = await db.exec(stmt)  # type: ignore
                await db.commit()
            except STORAGE_ERRORS as e:
                await db.rollback()
                return self._handle_db_error(e, "update")

        if result.rowcount == 0:
            return NotFound(message=f"{self.model.__name__} {parsed_id} not found")

        logger.info(
            "item_updated",
            table=self.model.__tablename__,
            id=str(parsed_id),
            fields=sorted(k for k, v in update_data.items() if v is not None),
        )
        return Ok(parsed_id)
