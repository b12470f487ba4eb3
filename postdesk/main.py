from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from postdesk.core.bases.base_router import failure_response, get_database
from postdesk.core.config import settings
from postdesk.core.database import Database
from postdesk.core.logging_config import configure_logging
from postdesk.core.response.handlers import global_exception_handler, validation_exception_handler
from postdesk.core.result import Ok, StorageFailure

# Import routers from apps
from postdesk.apps.blog import post_router
from postdesk.apps.blog.repositories.post_repository import HOMEPAGE_LIMIT, PostRepository
from postdesk.apps.blog.schemas.post import PostRead

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables once, then serve
    db: Database = app.state.db
    logger.info("app_starting", database=db.engine.url.render_as_string(hide_password=True))
    await db.create_all()
    yield
    # Shutdown: release pooled connections
    logger.info("app_stopping")
    await db.disconnect()


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application around a storage handle.

    Without an explicit `database` one is created from settings.
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_INFO,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.state.db = database or Database(
        settings.DATABASE_URL,
        pool_size=settings.POOL_SIZE,
        pool_timeout=settings.POOL_TIMEOUT,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/", tags=["Home"], response_model=List[PostRead])
    async def homepage(database: Database = Depends(get_database)):
        """Latest posts for the home page."""
        result = await PostRepository(database.get_session).list_recent(HOMEPAGE_LIMIT)
        if isinstance(result, Ok):
            return result.value
        if isinstance(result, StorageFailure):
            logger.warning("listing_degraded", path="/", detail=result.detail)
            return []
        return failure_response(result)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "message": "Service is running normally"}

    app.include_router(post_router, prefix=settings.API_PREFIX)

    return app


configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "postdesk.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
