"""
History API Router - Operation history
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from rasterflow.api.dependencies import get_history
from rasterflow.api.exceptions import safe_endpoint
from rasterflow.schemas import HistoryResponse, OperationRecordModel

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/recent")
@safe_endpoint
async def get_recent_history(
    limit: int = Query(10, ge=1, le=100),
    image_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, pattern="^(OK|ERROR)$"),
    history=Depends(get_history),
) -> HistoryResponse:
    """Get recent operations, newest first"""
    records = history.get_recent(limit, image_id=image_id, status=status)

    return HistoryResponse(
        operations=[OperationRecordModel(**r.to_dict()) for r in records],
        statistics=history.get_statistics(),
    )


@router.post("/clear")
@safe_endpoint
async def clear_history(history=Depends(get_history)) -> dict:
    """Clear all history"""
    history.clear()

    return {"success": True, "message": "History cleared"}


@router.get("/statistics")
@safe_endpoint
async def get_statistics(history=Depends(get_history)) -> dict:
    """Get operation statistics"""
    return history.get_statistics()


@router.get("/{record_id}")
@safe_endpoint
async def get_record(record_id: str, history=Depends(get_history)) -> OperationRecordModel:
    """Get a single operation record"""
    record = history.get_record(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Operation record not found")

    return OperationRecordModel(**record.to_dict())
