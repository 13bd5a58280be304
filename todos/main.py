"""Application factory wiring todo persistence into FastAPI."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from todos import db
from todos.logging_utils import configure_logging, reset_username, set_username
from todos.repositories import IdSequence
from todos.repositories.seed_data import SEED_TODO_LISTS
from todos.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.database_url:
        logger.info("DATABASE_URL detected, enabling Postgres persistence")
        try:
            await db.init_db(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
            )
        except Exception:
            logger.exception("Failed to initialize database connection")
            raise
    else:
        logger.info("DATABASE_URL not set, using session todo storage")

    yield

    await db.close_db()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Todo Lists",
        description="Todo list persistence over session or Postgres storage",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def username_middleware(request: Request, call_next):
        username_token = set_username(request.session.get("username"))
        try:
            return await call_next(request)
        finally:
            reset_username(username_token)

    # Added last so the session is decoded before username_middleware runs.
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)
    app.state.id_sequence = IdSequence.above(SEED_TODO_LISTS)
    return app


def get_port() -> int:
    """Return the port the server should bind to."""
    return int(os.getenv("PORT", "8080"))


def main() -> None:
    import uvicorn

    port = get_port()
    logger.info("Starting on 0.0.0.0:%s", port)
    uvicorn.run("todos.main:create_app", factory=True, host="0.0.0.0", port=port, log_level="info")
