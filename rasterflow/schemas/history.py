"""
History API models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class OperationRecordModel(BaseModel):
    """Single executed operation"""

    id: str
    timestamp: str
    image_id: str
    operation: str
    status: str
    params: Dict[str, Any]
    processing_time_ms: int
    shape_before: Optional[List[int]] = None
    shape_after: Optional[List[int]] = None
    error: Optional[str] = None


class HistoryResponse(BaseModel):
    operations: List[OperationRecordModel]
    statistics: Dict[str, Any]
