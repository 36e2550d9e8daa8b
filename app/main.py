import os
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from contextlib import asynccontextmanager

import portalocker

from app.config import settings
from app.database import engine, Base
from app.logging import log_config
from app.services.scheduler import scheduler_service

from app import models  # noqa: F401  (registers every table on Base.metadata)

# API Routes
from app.api import media, episodes, genres, catalog, scan, stats

logger = logging.getLogger(__name__)
logger = log_config.setup_logging(settings.log_level)

@asynccontextmanager
async def lifespan(app: FastAPI):

    # --- 1. GLOBAL SETUP (Run on ALL Uvicorn Workers) ---
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    settings.cache_dir.mkdir(parents=True, exist_ok=True)
    if settings.database_url.startswith("sqlite:///") and not settings.db_host:
        db_file = settings.database_url.replace("sqlite:///", "", 1)
        if db_file and db_file != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_file)), exist_ok=True)

    # Idempotent; alembic handles changes to existing tables
    Base.metadata.create_all(bind=engine)

    logger = log_config.setup_logging(settings.log_level)
    worker_pid = os.getpid()
    logger.info(f"Worker process PID:{worker_pid} startup (Log Level: {settings.log_level})")

    # --- 2. SINGLETON SETUP (Run ONLY on one worker) ---
    # Only one worker may run the scheduled audit.
    lock_file_path = settings.cache_dir / "scheduler.lock"
    lock_file = open(lock_file_path, "w")
    is_manager = False

    try:
        portalocker.lock(lock_file, portalocker.LOCK_EX | portalocker.LOCK_NB)
        is_manager = True
        logger.info(f"Worker {worker_pid} acquired Manager Lock. Starting Scheduler...")
        scheduler_service.start()
    except portalocker.exceptions.LockException:
        logger.info(f"Worker {worker_pid} could not acquire lock. Skipping singletons.")

    yield

    # --- SHUTDOWN ---
    logger.info(f"Worker {worker_pid} shutting down...")

    if is_manager:
        scheduler_service.stop()
        try:
            portalocker.unlock(lock_file)
        except portalocker.exceptions.LockException as e:
            logger.error(f"Error releasing lock: {e}")

    lock_file.close()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error leaves the API as {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "detail": jsonable_encoder(exc.errors())}
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )


# --- ROUTER REGISTRATION ---
app.include_router(media.router, prefix="/api/media", tags=["media"])
app.include_router(episodes.router, prefix="/api/episodes", tags=["episodes"])
app.include_router(genres.router, prefix="/api/genres", tags=["genres"])
app.include_router(catalog.router, prefix="/api/tmdb", tags=["catalog"])
app.include_router(scan.router, prefix="/api/scan", tags=["scan"])
app.include_router(stats.router, prefix="/api/stats", tags=["stats"])


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "marquee"}
