"""
# Household Hub API Application

FastAPI entry point for the family configuration service.

## Lifespan

**Startup:**
1. Connect to MongoDB (`db_manager.connect()`, retried with backoff).
2. Create indexes (`db_manager.create_indexes()`). A failure here aborts startup: the
   unique `familyId` index is what keeps each family to a single settings record.

**Shutdown:**
1. Disconnect from MongoDB.

## Running

```bash
uvicorn household_hub.main:app --reload --host 127.0.0.1 --port 8000
```

All family routes are mounted under `settings.API_PREFIX` (default `/v1`).
"""

from contextlib import asynccontextmanager
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from household_hub import __version__
from household_hub.config import settings
from household_hub.database import db_manager
from household_hub.managers.logging_manager import get_logger
from household_hub.routes.family import family_settings_router
from household_hub.utils.error_handling import register_exception_handlers
from household_hub.utils.logging_utils import log_application_lifecycle, log_error_with_context

logger = get_logger(prefix="[MAIN]")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Connect to MongoDB and create indexes before serving; disconnect on shutdown.

    Raises:
        Exception: Any connection or index failure propagates and stops startup.
    """
    startup_start_time = time.time()
    log_application_lifecycle(
        "startup_initiated",
        {
            "app_name": "Household Hub API",
            "version": __version__,
            "environment": "production" if settings.is_production else "development",
            "debug_mode": settings.DEBUG,
        },
    )

    try:
        db_connect_start = time.time()
        logger.info("Initiating database connection...")
        await db_manager.connect()
        log_application_lifecycle(
            "database_connected",
            {
                "connection_duration": f"{time.time() - db_connect_start:.3f}s",
                "database_name": settings.MONGODB_DATABASE,
            },
        )

        indexes_start = time.time()
        logger.info("Creating/verifying database indexes...")
        await db_manager.create_indexes()
        log_application_lifecycle("database_indexes_ready", {"indexes_duration": f"{time.time() - indexes_start:.3f}s"})

    except Exception as e:
        log_application_lifecycle(
            "startup_failed",
            {
                "error": str(e),
                "error_type": type(e).__name__,
                "startup_duration": f"{time.time() - startup_start_time:.3f}s",
            },
        )
        log_error_with_context(e, {"operation": "application_startup"})
        await db_manager.disconnect()
        raise

    logger.info("FastAPI application startup completed in %.3fs", time.time() - startup_start_time)

    yield

    shutdown_start_time = time.time()
    log_application_lifecycle("shutdown_initiated", {})
    try:
        logger.info("Disconnecting from database...")
        await db_manager.disconnect()
    except Exception as e:
        log_error_with_context(e, {"operation": "database_disconnection"})

    log_application_lifecycle(
        "shutdown_completed", {"total_shutdown_duration": f"{time.time() - shutdown_start_time:.3f}s"}
    )


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware, error handlers and routers."""
    app = FastAPI(
        title="Household Hub API",
        description="Per-family feature toggles and AI integration settings.",
        version=__version__,
        lifespan=lifespan,
    )

    if settings.CORS_ENABLED:
        cors_origins = settings.cors_origins_list
        logger.info("Configuring CORS with origins: %s", cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "PUT", "OPTIONS"],
            allow_headers=["*"],
            max_age=3600,
        )

    register_exception_handlers(app)

    routers_config = [
        ("family_settings", family_settings_router, "Family feature toggles and AI settings endpoints"),
    ]
    for router_name, router, description in routers_config:
        app.include_router(router, prefix=settings.API_PREFIX)
        logger.info("Successfully included %s router: %s", router_name, description)

    @app.get("/health", tags=["Health"])
    async def health():
        if not await db_manager.health_check():
            return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "disconnected"})
        return {"status": "healthy", "database": "connected"}

    log_application_lifecycle("routers_configured", {"routers": [name for name, _, _ in routers_config]})
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("household_hub.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG, log_level="info")
