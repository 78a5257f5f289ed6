from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hostwatch.config import Settings, get_settings, validate_config_on_startup
from hostwatch.routers import monitoring
from hostwatch.services.aggregator import SnapshotError


logger = logging.getLogger(__name__)

VERSION = "0.3.0"

settings = get_settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("hostwatch").setLevel(settings.effective_log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    configure_logging(settings)
    # Raises ConfigurationError so the server does not start with invalid config
    validate_config_on_startup(settings)
    logger.info("Monitor server starting (debug mode: %s)", "ON" if settings.debug else "OFF")

    yield

    logger.info("Shutting down monitor server...")


app = FastAPI(
    title="hostwatch",
    version=VERSION,
    lifespan=lifespan,
)

cors_origins = [
    origin.strip()
    for origin in settings.cors_allowed_origins.split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)

app.include_router(monitoring.router)


@app.exception_handler(SnapshotError)
async def snapshot_error_handler(request: Request, exc: SnapshotError):
    """A sampler failed outright; no partial snapshot is returned."""
    logger.error(f"Error fetching monitoring data: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Failed to fetch monitoring data",
            "details": str(exc),
        },
    )


@app.get("/api/ping")
async def ping():
    """Simple health check for load balancers."""
    return {"status": "ok", "version": VERSION}


def run() -> None:
    uvicorn.run("hostwatch.main:app", host=settings.host, port=settings.port, log_level=settings.effective_log_level.lower())


if __name__ == "__main__":
    run()
