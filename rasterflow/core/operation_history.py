"""
Operation History - Circular buffer of executed image operations
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import Any, Dict, List, Optional, Tuple

from rasterflow.core.constants import HistoryConstants

logger = logging.getLogger(__name__)

Shape = Tuple[int, int, int]


@dataclass
class OperationRecord:
    """Single operation record"""

    id: str
    timestamp: datetime
    image_id: str
    operation: str
    status: str  # OK/ERROR
    params: Dict[str, Any]
    processing_time_ms: int
    shape_before: Optional[Shape] = None
    shape_after: Optional[Shape] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "image_id": self.image_id,
            "operation": self.operation,
            "status": self.status,
            "params": self.params,
            "processing_time_ms": self.processing_time_ms,
            "shape_before": list(self.shape_before) if self.shape_before else None,
            "shape_after": list(self.shape_after) if self.shape_after else None,
            "error": self.error,
        }


class OperationHistory:
    """Circular buffer for maintaining operation history"""

    def __init__(self, max_size: int = HistoryConstants.DEFAULT_BUFFER_SIZE):
        """
        Initialize Operation History

        Args:
            max_size: Maximum number of records to keep
        """
        self.max_size = max_size
        self.buffer: deque = deque(maxlen=max_size)

        # Statistics
        self.total_operations = 0
        self.ok_count = 0
        self.error_count = 0
        self.total_processing_time = 0
        self.per_operation: Dict[str, int] = {}

        self.lock = RLock()

        logger.info(f"Operation History initialized with max size: {max_size}")

    def add_record(
        self,
        image_id: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        processing_time_ms: int = 0,
        status: str = HistoryConstants.STATUS_OK,
        shape_before: Optional[Shape] = None,
        shape_after: Optional[Shape] = None,
        error: Optional[str] = None,
    ) -> str:
        """
        Add operation record to history

        Args:
            image_id: Image identifier
            operation: Operation name
            params: Operation parameters
            processing_time_ms: Processing time in milliseconds
            status: OK/ERROR
            shape_before: (height, width, channels) before the operation
            shape_after: (height, width, channels) after the operation
            error: Error message for failed operations

        Returns:
            Record ID
        """
        with self.lock:
            record_id = f"op_{uuid.uuid4().hex[:8]}"

            record = OperationRecord(
                id=record_id,
                timestamp=datetime.now(),
                image_id=image_id,
                operation=operation,
                status=status,
                params=params or {},
                processing_time_ms=processing_time_ms,
                shape_before=shape_before,
                shape_after=shape_after,
                error=error,
            )
            self.buffer.append(record)

            self.total_operations += 1
            self.total_processing_time += processing_time_ms
            self.per_operation[operation] = self.per_operation.get(operation, 0) + 1
            if status == HistoryConstants.STATUS_OK:
                self.ok_count += 1
            else:
                self.error_count += 1

            logger.debug(f"Recorded {record_id}: {operation} on {image_id} -> {status}")
            return record_id

    def get_record(self, record_id: str) -> Optional[OperationRecord]:
        """Get specific record by ID"""
        with self.lock:
            for record in self.buffer:
                if record.id == record_id:
                    return record
        return None

    def get_recent(
        self,
        limit: int = 10,
        image_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[OperationRecord]:
        """
        Get recent records, newest first

        Args:
            limit: Maximum number of records to return
            image_id: Only records for this image
            status: Only records with this status (OK/ERROR)
        """
        with self.lock:
            records = list(self.buffer)

        if image_id:
            records = [r for r in records if r.image_id == image_id]
        if status:
            records = [r for r in records if r.status == status]

        records.reverse()
        return records[:limit]

    def get_statistics(self) -> Dict[str, Any]:
        """Get operation statistics"""
        with self.lock:
            if self.total_operations == 0:
                return {
                    "total": 0,
                    "ok": 0,
                    "errors": 0,
                    "success_rate": 0.0,
                    "avg_time_ms": 0,
                    "buffer_usage": 0,
                    "by_operation": {},
                }

            return {
                "total": self.total_operations,
                "ok": self.ok_count,
                "errors": self.error_count,
                "success_rate": round(self.ok_count / self.total_operations * 100, 2),
                "avg_time_ms": round(self.total_processing_time / self.total_operations, 2),
                "buffer_usage": len(self.buffer),
                "buffer_max": self.max_size,
                "by_operation": dict(self.per_operation),
            }

    def clear(self):
        """Clear all history"""
        with self.lock:
            self.buffer.clear()
            self.total_operations = 0
            self.ok_count = 0
            self.error_count = 0
            self.total_processing_time = 0
            self.per_operation.clear()

            logger.info("Operation history cleared")
