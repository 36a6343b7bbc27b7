import structlog
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config.settings import settings
from src.core.exceptions import AppError
from src.core.observability import init_observability
from src.core.redis import close_redis
from src.domains.compliance.router import router as compliance_router
from src.domains.notifications.router import router as notifications_router
from src.domains.workouts.router import router as workouts_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    logger.info("app_starting", app_name=settings.APP_NAME, environment=settings.APP_ENV, database_configured=bool(settings.DATABASE_URL))

    # Initialize database tables
    try:
        from src.config.database import init_db
        await init_db()
        logger.info("database_initialized")
    except Exception as e:
        logger.error("database_init_failed", error=str(e), type=type(e).__name__)
        # Re-raise in production to prevent unhealthy startup
        if settings.is_production:
            raise

    yield
    # Shutdown
    logger.info("app_shutting_down", app_name=settings.APP_NAME)
    await close_redis()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors as {"detail", "code"} with the error's status."""
    logger.info(
        "app_error",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Initialize observability (GlitchTip/Sentry)
    init_observability()

    app = FastAPI(
        title=settings.APP_NAME,
        description="FitCoach API: weekly training plans, check-ins and compliance alerts",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
        # Disable automatic trailing slash redirects - they lose Authorization headers
        redirect_slashes=False,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
    )

    app.add_exception_handler(AppError, app_error_handler)

    # Include routers
    app.include_router(workouts_router, prefix=settings.API_V1_PREFIX, tags=["Workouts"])
    app.include_router(compliance_router, prefix=f"{settings.API_V1_PREFIX}/compliance", tags=["Compliance"])
    app.include_router(notifications_router, prefix=f"{settings.API_V1_PREFIX}/notifications", tags=["Notifications"])

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
