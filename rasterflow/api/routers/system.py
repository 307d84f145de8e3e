"""
System API Router - Status and performance monitoring
"""

import logging
import time
from datetime import datetime

import psutil
from fastapi import APIRouter, Depends

from rasterflow.api.dependencies import get_config, get_history, get_image_manager
from rasterflow.api.exceptions import safe_endpoint
from rasterflow.schemas import PerformanceMetrics, SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Track start time
START_TIME = time.time()


@router.get("/status")
@safe_endpoint
async def get_status(image_manager=Depends(get_image_manager)) -> SystemStatus:
    """Get system status"""
    process = psutil.Process()
    memory_info = process.memory_info()
    virtual_memory = psutil.virtual_memory()

    return SystemStatus(
        status="healthy",
        uptime=time.time() - START_TIME,
        memory_usage={
            "process_mb": memory_info.rss / 1024 / 1024,
            "system_percent": virtual_memory.percent,
            "available_mb": virtual_memory.available / 1024 / 1024,
        },
        image_store=image_manager.get_stats(),
    )


@router.get("/performance")
@safe_endpoint
async def get_performance(history=Depends(get_history)) -> PerformanceMetrics:
    """Get performance metrics"""
    stats = history.get_statistics()

    uptime_minutes = (time.time() - START_TIME) / 60
    ops_per_minute = stats["total"] / uptime_minutes if uptime_minutes > 0 else 0

    return PerformanceMetrics(
        avg_processing_time=stats["avg_time_ms"],
        total_operations=stats["total"],
        success_rate=stats["success_rate"],
        operations_per_minute=round(ops_per_minute, 2),
    )


@router.get("/config")
@safe_endpoint
async def get_configuration(config=Depends(get_config)) -> dict:
    """Get current configuration"""
    return config


@router.get("/health")
async def health_check() -> dict:
    """Simple health check"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
