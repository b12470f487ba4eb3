from typing import Any, Callable, List, Optional, Type

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from postdesk.core.bases.base_repository import BaseRepository
from postdesk.core.database import Database
from postdesk.core.response.handlers import error_response
from postdesk.core.response.schemas import ErrorDetail
from postdesk.core.result import InvalidInput, NotFound, Ok, StorageFailure

logger = structlog.get_logger()


def get_database(request: Request) -> Database:
    """Storage handle opened by the application lifespan."""
    return request.app.state.db


def failure_response(result: Any) -> JSONResponse:
    """Map a non-Ok repository result to an HTTP error."""
    if isinstance(result, NotFound):
        return error_response(
            error_code="NOT_FOUND",
            message=result.message,
            status_code=status.HTTP_404_NOT_FOUND,
        )
    if isinstance(result, InvalidInput):
        return error_response(
            error_code="VALIDATION_ERROR",
            message=result.message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[
                ErrorDetail(field=name, code="invalid", message=result.message)
                for name in result.fields
            ],
        )
    if isinstance(result, StorageFailure):
        return error_response(
            error_code="STORAGE_ERROR",
            message="Storage failure",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    raise TypeError(f"Unexpected repository result: {result!r}")


class BaseRouter:
    """Base router mapping HTTP verbs onto repository operations.

    The router holds no state of its own; a repository is built per request
    from the shared `Database` handle.
    """

    def __init__(
        self,
        repository_class: Type[BaseRepository],
        create_schema: Type[BaseModel],
        update_schema: Type[BaseModel],
        tags: Optional[List[str]] = None,
        prefix: str = "",
        dependencies: Optional[List[Callable]] = None,
    ):
        self.repository_class = repository_class
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.read_schema = repository_class.read_schema
        self.tags = tags or [self.__class__.__name__.replace("Router", "")]
        self.prefix = prefix

        self.router = APIRouter(
            prefix=self.prefix,
            tags=self.tags,  # type:ignore
            dependencies=dependencies or [],  # type:ignore
        )

        self._register_routes()

    def get_repository(self, database: Database = Depends(get_database)) -> BaseRepository:
        return self.repository_class(database.get_session)

    def _register_routes(self) -> None:
        """Register all CRUD routes."""
        self._register_list()
        self._register_get_by_id()
        self._register_create()
        self._register_update()

    def _register_list(self) -> None:
        """Register GET "" route."""
        @self.router.get(
            "",
            response_model=List[self.read_schema],  # type: ignore
            summary="List items, newest first",
            responses={200: {"description": "Items retrieved successfully"}},
        )
        async def list_items(repository: BaseRepository = Depends(self.get_repository)):
            result = await repository.list()
            if isinstance(result, Ok):
                return result.value
            if isinstance(result, StorageFailure):
                # Listing stays available when storage is not
                logger.warning("listing_degraded", path=self.prefix, detail=result.detail)
                return []
            return failure_response(result)

    def _register_get_by_id(self) -> None:
        """Register GET /{item_id} route."""
        @self.router.get(
            "/{item_id}",
            response_model=self.read_schema,
            summary="Get item by ID",
            responses={
                200: {"description": "Item retrieved successfully"},
                400: {"description": "Malformed ID"},
                404: {"description": "Item not found"},
                500: {"description": "Internal server error"},
            },
        )
        async def get_by_id(item_id: str, repository: BaseRepository = Depends(self.get_repository)):
            result = await repository.get(item_id)
            if isinstance(result, Ok):
                return result.value
            return failure_response(result)

    def _register_create(self) -> None:
        """Register POST "" route."""
        @self.router.post(
            "",
            status_code=status.HTTP_201_CREATED,
            summary="Create new item",
            responses={
                201: {"description": "Item created successfully"},
                400: {"description": "Bad request"},
                500: {"description": "Internal server error"},
            },
        )
        async def create_item(
            item_data: self.create_schema,  # type: ignore
            repository: BaseRepository = Depends(self.get_repository),
        ):
            result = await repository.create(item_data.model_dump())
            if isinstance(result, Ok):
                return {"id": str(result.value)}
            return failure_response(result)

    def _register_update(self) -> None:
        """Register PUT /{item_id} route."""
        @self.router.put(
            "/{item_id}",
            status_code=status.HTTP_204_NO_CONTENT,
            response_class=Response,
            summary="Partially update item",
            responses={
                204: {"description": "Item updated successfully"},
                400: {"description": "Bad request"},
                404: {"description": "Item not found"},
                500: {"description": "Internal server error"},
            },
        )
        async def update_item(
            item_id: str,
            item_data: self.update_schema,  # type: ignore
            repository: BaseRepository = Depends(self.get_repository),
        ):
            result = await repository.update(item_id, item_data.model_dump())
            if isinstance(result, Ok):
                return Response(status_code=status.HTTP_204_NO_CONTENT)
            return failure_response(result)

    def get_router(self) -> APIRouter:
        """Get the FastAPI router instance."""
        return self.router
