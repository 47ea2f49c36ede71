# FILE: image_broker/app.py
"""
FastAPI application entry point for the image broker
"""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from image_broker import __version__
from image_broker.config import get_settings, load_provider_settings
from image_broker.middleware.body_limit import BodySizeLimitMiddleware
from image_broker.middleware.rate_limit import RateLimitMiddleware
from image_broker.providers.registry import select_provider
from image_broker.routes import generate, health, history, metrics
from image_broker.services.telemetry import init_telemetry

logger = logging.getLogger(__name__)
settings = get_settings()


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    configure_logging()
    logger.info(f"Starting image broker v{__version__}")
    logger.info(f"Provider at startup: {select_provider(load_provider_settings())}")

    init_telemetry()

    app.state.http_client = httpx.AsyncClient(timeout=settings.provider_timeout)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("Shutting down image broker")


app = FastAPI(
    title="Image Broker API",
    description="Validates image generation requests and routes them to an upstream provider",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting
if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware, rpm=settings.rate_limit_rpm)

# Body size limit
app.add_middleware(BodySizeLimitMiddleware, max_size=settings.body_size_limit_mb * 1024 * 1024)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )

# Include routers
app.include_router(generate.router, prefix="/api", tags=["generate"])
app.include_router(history.router, prefix="/api", tags=["history"])
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Image Broker",
        "version": __version__,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "image_broker.app:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.environment == "development"
    )
