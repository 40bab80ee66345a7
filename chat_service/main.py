import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Request, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chat_service.config import Settings, load_settings
from chat_service.database import create_engine, create_session_factory, get_db
from chat_service.logging_config import setup_logging
from chat_service.routers.conversations import router as conversations_router
from chat_service.routers.messages import router as messages_router
from chat_service.routers.users import auth_router
from chat_service.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    # Startup
    engine = None
    if app.state.session_factory is None:
        settings = app.state.settings or load_settings()
        app.state.settings = settings
        setup_logging(settings.log_level)
        engine = create_engine(settings)
        app.state.session_factory = create_session_factory(engine)
        logger.info("Connected to %s database", engine.dialect.name)
    yield
    # Shutdown
    if engine is not None:
        await engine.dispose()
        app.state.session_factory = None


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    request_id = str(uuid.uuid4())
    logger.info("[REQ %s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    logger.info("[REQ %s] %s", request_id, response.status_code)
    response.headers["X-Request-ID"] = request_id
    return response


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """Build the application.

    With a session factory the app uses that store as is; otherwise the
    engine is created from settings (or the environment) at startup.
    """
    version = settings.commit_hash if settings else os.getenv("COMMIT_HASH")
    app = FastAPI(
        title="Chat Service",
        description="Conversations, messages, read receipts and presence",
        version=version or "dev",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory

    app.middleware("http")(log_requests)

    # Include routers
    app.include_router(
        conversations_router, prefix="/api/conversations", tags=["conversations"]
    )
    app.include_router(messages_router, prefix="/api/messages", tags=["messages"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])

    @app.get("/health")
    async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Optional[str]]:
        """Health check endpoint with database connectivity."""
        try:
            # Test database connection
            result = await db.execute(text("SELECT 1"))
            db_status = "connected" if result.scalar() == 1 else "error"
        except Exception:
            logger.exception("Health check could not reach the database")
            db_status = "disconnected"

        return {
            "status": "healthy" if db_status == "connected" else "degraded",
            "database": db_status,
            "environment": app.state.settings.env if app.state.settings else None,
            "version": app.version,
        }

    return app


app = create_app()


# If run directly, start the server
if __name__ == "__main__":
    import uvicorn

    runtime_settings = load_settings()
    uvicorn.run(
        create_app(runtime_settings),
        host=runtime_settings.host,
        port=runtime_settings.port,
    )
