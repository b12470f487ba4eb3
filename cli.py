import asyncio
from typing import Optional

import typer
import uvicorn

from postdesk.core.config import settings
from postdesk.core.database import Database
from postdesk.core.logging_config import configure_logging

app = typer.Typer(help="CLI for the post service.")


# ---------------------------
# Commands
# ---------------------------
@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default: PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP server."""
    uvicorn.run(
        "postdesk.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


@app.command()
def init_db(
    database_url: Optional[str] = typer.Option(None, "--database-url", help="Override DATABASE_URL"),
):
    """Create the posts table and its index if they do not exist."""
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    db = Database(
        database_url or settings.DATABASE_URL,
        pool_size=settings.POOL_SIZE,
        pool_timeout=settings.POOL_TIMEOUT,
    )

    async def _run():
        try:
            await db.create_all()
        finally:
            await db.disconnect()

    asyncio.run(_run())
    print(f"✅ Tables ready at {db.engine.url.render_as_string(hide_password=True)}")


# ---------------------------
# Entrypoint
# ---------------------------
if __name__ == "__main__":
    app()
