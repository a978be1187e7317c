"""
FastAPI application entry point for the RosaIQ sync backend.
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import auth, dashboard, devices, firmware, maintenance, sensors, system, users
from .config import settings
from .database import Base, SessionLocal, engine
from .dependencies import get_sweeper
from .errors import SyncError, UnauthorizedError
from .services.auth_service import ensure_admin_account
from .services.retention import start_sweep_scheduler

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare storage on startup and run the retention scheduler while serving."""
    LOGGER.info("%s API starting...", settings.APP_NAME)
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    Path(settings.FIRMWARE_DIR).mkdir(parents=True, exist_ok=True)

    db = SessionLocal()
    try:
        ensure_admin_account(db, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
    finally:
        db.close()

    scheduler = start_sweep_scheduler(
        get_sweeper(),
        SessionLocal,
        settings.RETENTION_SWEEP_INTERVAL_HOURS,
    )
    LOGGER.info("CORS enabled for: %s", settings.cors_origins_list)
    LOGGER.info("Firmware directory: %s", Path(settings.FIRMWARE_DIR).resolve())
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        LOGGER.info("%s API shutting down...", settings.APP_NAME)


# Create FastAPI app
app = FastAPI(
    title=f"{settings.APP_NAME} Sync API",
    description="Device sync, configuration, telemetry and OTA backend for air-quality sensors",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,  # Must be False when using allow_origins=["*"]
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    LOGGER.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.exception_handler(SyncError)
async def handle_sync_error(request: Request, exc: SyncError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    if exc.status_code >= 500:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
        headers=headers,
    )


# Register routers
app.include_router(system.router)
app.include_router(sensors.router)
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(devices.router, prefix="/api/devices")
app.include_router(firmware.router, prefix="/api/firmware")
app.include_router(maintenance.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": f"{settings.APP_NAME} Sync API", "version": settings.APP_VERSION}
