"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from .database import engine, Base, get_db, SessionLocal, DATABASE_URL, is_postgresql
from .api import folders_router, spells_router, characters_router
from .core.config import settings, ConfigurationError
from .core.logging_config import setup_logging
from .core.seeder import seed_root_folder
from .middleware.exception_handler import grimoire_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .exceptions import GrimoireException
from . import models  # noqa: F401  registers tables on Base.metadata

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def init_database() -> None:
    """Create missing tables and make sure the root folder exists."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_root_folder(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the Grimoire API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    for warning in settings.collect_config_warnings():
        logger.warning(warning)

    logger.info(f"Connecting to database: {_mask_url(DATABASE_URL)}")
    init_database()

    yield  # App runs here

    # Shutdown: nothing to clean up currently


# Create FastAPI app
app = FastAPI(
    title="Grimoire API",
    description=(
        "REST API for a tabletop spell catalog. Spells live in a folder "
        "hierarchy; characters learn spells from their own convocations "
        "(Neutral spells are open to everyone)."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

# Middleware stack (outermost first: CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(GrimoireException, grimoire_exception_handler)

app.include_router(folders_router)
app.include_router(spells_router)
app.include_router(characters_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Grimoire API",
        "version": API_VERSION,
        "status": "running",
        "endpoints": {
            "folders": "/api/folders",
            "spells": "/api/spells",
            "characters": "/api/characters",
            "health": "/health",
        },
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint returning database status, uptime, and catalog counts.

    Never raises; returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    counts = {"folders": 0, "spells": 0, "characters": 0}
    try:
        db.execute(text("SELECT 1"))
        for table in counts:
            counts[table] = db.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar() or 0
    except Exception:
        logger.warning("Health check database probe failed", exc_info=True)
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "db_type": "postgresql" if is_postgresql() else "sqlite",
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": API_VERSION,
        "counts": counts,
    }
