"""
System API models.
"""

from typing import Any, Dict

from pydantic import BaseModel


class SystemStatus(BaseModel):
    """Process and image store status"""

    status: str
    uptime: float
    memory_usage: Dict[str, float]
    image_store: Dict[str, Any]


class PerformanceMetrics(BaseModel):
    avg_processing_time: float
    total_operations: int
    success_rate: float
    operations_per_minute: float
