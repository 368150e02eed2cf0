"""
Tour Merch API - Main Application Entry Point

Inventory and point-of-sale backend for touring bands:
- Tours, shows and per-show merch sales
- Oversell-safe stock decrements for hard, sized and bundled items
- Immutable show summaries cached in Redis
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from tourmerch.api.middleware import RequestLoggingMiddleware
from tourmerch.api.router import api_router
from tourmerch.core.config import get_settings
from tourmerch.core.logging import get_logger, setup_logging
from tourmerch.core.metrics import metrics_endpoint
from tourmerch.services.cache_service import close_redis, get_cache_stats, get_redis
from tourmerch.services.upload_service import UPLOAD_URL_PREFIX, upload_dir

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        bundle_quantity_policy=settings.BUNDLE_QUANTITY_POLICY,
        bundle_sale_strict=settings.BUNDLE_SALE_STRICT,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without summary cache")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Merchandise inventory and point-of-sale API for touring bands",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(upload_dir())), name="uploads")


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"{settings.APP_NAME} is running",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
