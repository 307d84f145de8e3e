"""
rasterflow - FastAPI application
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rasterflow import __version__
from rasterflow.api.exceptions import register_exception_handlers
from rasterflow.api.routers import history, image, system
from rasterflow.config import get_settings
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.memory_tracker import MemoryTracker
from rasterflow.core.operation_history import OperationHistory

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    logger.info("Starting rasterflow server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.system.debug}")

    tracker = MemoryTracker(max_bytes=settings.image.max_memory_bytes)
    image_manager = ImageManager(max_images=settings.image.max_images, tracker=tracker)
    operation_history = OperationHistory(max_size=settings.history.buffer_size)
    storage_path = Path(settings.image.storage_path)
    storage_path.mkdir(parents=True, exist_ok=True)

    logger.info(f"Image storage directory: {storage_path.resolve()}")
    logger.info("All managers initialized successfully")

    # Store managers in app state for access by routers
    app.state.image_manager = image_manager
    app.state.history = operation_history
    app.state.processing = settings.processing
    app.state.storage_path = storage_path
    app.state.config = settings.to_dict()

    yield

    logger.info("Shutting down rasterflow server...")
    image_manager.cleanup()
    if tracker.live_count:
        logger.warning(f"{tracker.live_count} buffer(s) still live at shutdown")
    logger.info("Server shutdown complete")


app = FastAPI(
    title="rasterflow",
    description="Multi-threaded raster image processing",
    version=__version__,
    lifespan=lifespan,
)

if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)

app.include_router(image.router, prefix="/api/image", tags=["Image"])
app.include_router(history.router, prefix="/api/history", tags=["History"])
app.include_router(system.router, prefix="/api/system", tags=["System"])


@app.get("/")
async def root():
    return {
        "name": "rasterflow",
        "status": "running",
        "version": __version__,
        "endpoints": {
            "image": "/api/image",
            "history": "/api/history",
            "system": "/api/system",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "image_manager": getattr(app.state, "image_manager", None) is not None,
            "history": getattr(app.state, "history", None) is not None,
        },
    }


def run():
    """Run the API server with uvicorn"""
    uvicorn.run(
        "rasterflow.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        log_level=settings.system.log_level.lower(),
    )


if __name__ == "__main__":
    run()
