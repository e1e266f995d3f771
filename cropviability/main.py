"""FastAPI application entrypoint — lifespan, routers, middleware."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cropviability import __version__
from cropviability.config import get_settings
from cropviability.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from cropviability.routes import crops, viability
from cropviability.services.phase_catalog import get_phase_catalog

logger = logging.getLogger("cropviability")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Ensure the temperature data folder exists
      3. Load the crop phase catalog (fails fast on a malformed document)
    """
    configure_structured_logging()
    settings = get_settings()

    try:
        data_folder = settings.database_path
        data_folder.mkdir(parents=True, exist_ok=True)
        catalog = get_phase_catalog()
    except Exception as exc:
        logger.exception("startup failure", extra={"error": str(exc)})
        raise

    logger.info(
        "Crop viability API starting",
        extra={
            "log_level": settings.log_level,
            "database_folder": str(data_folder),
            "crops": catalog.crops(),
        },
    )

    yield

    logger.info("Crop viability API shutting down")


app = FastAPI(
    title="Crop Viability API",
    description=(
        "Checks whether a crop can be planted at a city from a given start "
        "date by walking its growth phases over historical daily minimum and "
        "maximum temperatures."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)


# ── Health check ────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Basic health check — verifies the API process is alive."""
    return {
        "status": "ok",
        "service": "crop-viability",
        "version": __version__,
    }


# ── Router registration ────────────────────────────────────────────────────
app.include_router(viability.router, prefix="/api/v1")
app.include_router(crops.router, prefix="/api/v1")
