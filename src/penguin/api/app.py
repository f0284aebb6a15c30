"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from penguin import __version__
from penguin.config import get_settings
from penguin.errors import NotDeployed, TokenError, Unauthorized
from penguin.ledger.database import close_db, get_db, init_db
from penguin.services import TokenService
from penguin.utils.locks import LockTimeoutError

logger = logging.getLogger(__name__)


async def ensure_deployed() -> None:
    """Deploy the token from settings unless it already exists."""
    async with get_db() as session:
        service = TokenService(session)
        if not await service.is_deployed():
            config = await service.deploy()
            logger.info(f"Token {config.symbol} deployed, owner {config.owner}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    await init_db()
    await ensure_deployed()
    yield
    # Shutdown
    await close_db()


def _status_for(error: TokenError) -> int:
    if isinstance(error, Unauthorized):
        return 403
    if isinstance(error, NotDeployed):
        return 404
    return 400


async def token_error_handler(request: Request, exc: TokenError) -> JSONResponse:
    return JSONResponse(
        status_code=_status_for(exc),
        content={"error": exc.code, "detail": str(exc)},
    )


async def lock_timeout_handler(request: Request, exc: LockTimeoutError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": "lock_timeout", "detail": str(exc)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Penguin Token API",
        description="Fee-taxed token ledger with trade limits",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TokenError, token_error_handler)
    app.add_exception_handler(LockTimeoutError, lock_timeout_handler)

    # Register routes
    from penguin.api.routers import admin, token
    from penguin.api.routes import health

    app.include_router(health.router, tags=["Health"])
    app.include_router(token.router, tags=["Token"])
    app.include_router(admin.router, tags=["Admin"])

    return app


# Default app instance
app = create_app()
