"""Main FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

import logfire
from dotenv import load_dotenv
from fastapi import FastAPI

from api.routers import schemas as schemas_router
from core.initialization import initialize_system
from observability.logging import setup_logging

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events (startup/shutdown)."""
    setup_logging()
    logger.info("Starting up Schema Registry API...")
    try:
        logfire.configure(send_to_logfire="if-token-present")
        logfire.instrument_httpx(capture_all=True)
        logger.info("Logfire configured. HTTPX instrumented.")
        settings = initialize_system()
        logger.info(f"System initialized successfully. Registry: {settings.url}")
    except Exception:
        logger.exception("System initialization failed during startup.")
    yield
    logger.info("Shutting down Schema Registry API...")


app = FastAPI(
    title="Schema Registry API",
    description="API for fetching and decoding schema registry subjects.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(schemas_router.router)


@app.get("/", tags=["Status"])
async def read_root():
    """Root endpoint for basic API status check."""
    return {"status": "Schema Registry API is running"}


@app.get("/health", tags=["Status"])
async def health():
    """Health check."""
    return {"status": "ok"}
