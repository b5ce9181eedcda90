import time
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
import os

# Load env vars
load_dotenv()

from calendar_backend.config import HolidaySyncSettings
from calendar_backend.routes import holidays
from calendar_backend.services.holiday_sync import HolidaySyncEngine
from calendar_backend.services.public_data_client import PublicDataClient
from calendar_backend.services.scheduler import start_scheduler, shutdown_scheduler
from calendar_backend.db import AsyncSessionLocal, init_db, close_db
from calendar_backend.utils.logging_config import setup_logging

# Configure logging (file + console) on import
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def build_holiday_sync_engine() -> HolidaySyncEngine:
    settings = HolidaySyncSettings.from_env()
    if not settings.service_key:
        logger.warning("HOLIDAY_API_SERVICE_KEY is not set; holiday sync will use built-in data")
    return HolidaySyncEngine(PublicDataClient(settings), AsyncSessionLocal, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init_db() creates tables; a missing database is reported, not fatal
    try:
        await init_db()
    except Exception as e:
        err_msg = str(e).lower()
        if "unknown database" in err_msg or "1049" in err_msg or "does not exist" in err_msg:
            logger.warning("Database not found; run scripts/create_tables.py to create it.")
        else:
            raise
    engine = build_holiday_sync_engine()
    app.state.holiday_sync_engine = engine
    start_scheduler(engine)
    logger.info("Application started")
    yield
    # Shutdown
    shutdown_scheduler()
    await close_db()  # Close database connections
    logger.info("Application shutdown")


app = FastAPI(title="Calendar API", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every HTTP request: method, path, status, duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %s %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response

# CORS Configuration
origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
@app.get("/")
async def root():
    return {"message": "Calendar API is running"}

app.include_router(holidays.router)
