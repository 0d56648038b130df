"""
Inventario backend — application entry point.

This is the **only** file that assembles the app. All business logic
lives in the `api/`, `services/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.api import api_router
from app.api.v1.deps import get_optional_identity
from app.core.config import settings
from app.core.exceptions import ConfigurationError, register_exception_handlers
from app.core.limiter import limiter
from app.core.security import TokenService
from app.db.init_db import create_tables, seed_first_manager, seed_roles
from app.db.session import async_session_factory, engine
from app.schemas.token import TokenIdentity

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    await create_tables(engine)

    async with async_session_factory() as session:
        await seed_roles(session)
        await seed_first_manager(session)

    logger.info("🚀 %s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    if not settings.JWT_SECRET:
        raise ConfigurationError("JWT_SECRET must be set before the server can start")

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Inventory tracking API: auth, products and goods receipt",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Signing secret lives here for the life of the process
    application.state.token_service = TokenService.from_settings()
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)

    @application.get("/", tags=["health"])
    async def root(identity: TokenIdentity | None = Depends(get_optional_identity)) -> dict:
        return {
            "message": "Backend del proyecto Inventario funcionando",
            "usuario": identity.user_id if identity else None,
        }

    logger.info("CORS enabled for origins: %s", settings.cors_origins)
    return application


app = create_app()
