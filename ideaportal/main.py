"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from ideaportal.core.config import settings
from ideaportal.core.middleware import setup_middleware
from ideaportal.core.rate_limiter import limiter, rate_limit_exceeded_handler
from ideaportal.core.exceptions import PortalError

from ideaportal.api.auth import router as auth_router
from ideaportal.api.campaigns import router as campaigns_router
from ideaportal.api.ideas import router as ideas_router
from ideaportal.api.users import router as users_router
from ideaportal.api.stats import router as stats_router
from ideaportal.api.admin import router as admin_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("idea_portal")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Idea Portal API")
    if settings.AUTO_CREATE_TABLES:
        from ideaportal.db.session import SessionLocal, create_tables
        from ideaportal.db.seeds.seed_defaults import seed_defaults

        create_tables()
        db = SessionLocal()
        try:
            seed_defaults(db)
        finally:
            db.close()
        logger.info("Database schema ready")

    from ideaportal.services.cache_service import cache_service
    if cache_service.health_check():
        logger.info("Redis connected")
    elif settings.CACHE_ENABLED:
        logger.warning("Redis not available, stats will not be cached")

    yield

    logger.info("Shutting down Idea Portal API")


app = FastAPI(
    title="Idea Portal API",
    description="Idea management and innovation portal",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# Business-rule failures travel as success-shaped bodies
@app.exception_handler(PortalError)
async def portal_exception_handler(request: Request, exc: PortalError):
    return JSONResponse(
        status_code=200,
        content={"ok": False, "error": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"ok": False, "error": "invalid_data"},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "internal_error"},
    )


# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(campaigns_router, prefix="/api")
app.include_router(ideas_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
