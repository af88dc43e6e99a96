import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

from dotenv import load_dotenv


# .env has to be loaded before settings are first read
PROJECT_DIR = Path(__file__).parent.parent
ENV_PATH = PROJECT_DIR / ".env"
load_dotenv(ENV_PATH)

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import DatabaseError, OperationalError
from starlette.requests import Request

from . import __version__
from .config.logging import setup_logging
from .config.settings import get_settings
from .courses.router import router as courses_router
from .database.engine import engine
from .database.init import init_database
from .database.session import DbSession
from .exceptions import DomainError
from .leaderboard.router import router as leaderboard_router
from .middleware.error_handlers import (
    ErrorCategory,
    ErrorCode,
    format_error_response,
    handle_database_errors,
    handle_domain_errors,
    handle_validation_errors,
    log_error_context,
)
from .progress.router import router as progress_router
from .streaks.router import router as streaks_router
from .xp.router import router as xp_router


setup_logging()
logger = logging.getLogger(__name__)

ROUTERS = (progress_router, courses_router, streaks_router, xp_router, leaderboard_router)


async def _create_tables(retries: int) -> None:
    """Create tables, backing off while the database is still starting."""
    delay = 1.0
    for attempt in range(1, retries + 1):
        try:
            await init_database(engine)
        except OperationalError:
            if attempt == retries:
                logger.exception("Database still unreachable after %d attempts, giving up", retries)
                raise
            logger.warning("Database not reachable (attempt %d/%d), next try in %.0fs", attempt, retries, delay)
            await asyncio.sleep(delay)
            delay *= 2
        else:
            logger.info("Progress store ready")
            return


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables on startup and release the connection pool on shutdown."""
    await _create_tables(get_settings().DB_STARTUP_RETRIES)
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Connection pool closed")


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return await handle_domain_errors(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return await handle_validation_errors(request, exc)

    # Database errors that escaped a unit of work
    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
        return await handle_database_errors(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        error_id = uuid4()
        log_error_context(request, exc, error_id)
        return format_error_response(
            category=ErrorCategory.INTERNAL,
            code=ErrorCode.INTERNAL,
            detail="Internal server error",
            status_code=500,
            metadata={"error_id": str(error_id)},
            suggestions=["Retry the request", "Quote the error_id when reporting the problem"],
        )


def create_app() -> FastAPI:
    """Build the API application."""
    settings = get_settings()

    app = FastAPI(
        title="Progress Engine API",
        description="Learning progress, streaks, XP and leaderboards",
        version=__version__,
        debug=settings.DEBUG,
        # Tests create their own schema per test
        lifespan=lifespan if settings.ENVIRONMENT != "test" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    _install_error_handlers(app)

    @app.get("/health")
    async def health_check(session: DbSession) -> dict[str, str]:
        """Liveness plus a round trip to the store; store failures surface as 503."""
        await session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "ok"}

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from progress_engine.config import env

    uvicorn.run(app, host=env("API_HOST", "127.0.0.1"), port=int(env("API_PORT", "8080")))
