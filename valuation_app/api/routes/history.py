"""
History API routes
Snapshots of the data behind each generated report
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from valuation_app.api.deps import Services, get_services
from valuation_app.schemas.records import (
    DeleteResponse,
    HistoryRecord,
    HistorySummary,
    SaveHistoryRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[HistorySummary])
async def list_history(services: Services = Depends(get_services)):
    return services.history.list()


@router.post("", response_model=HistoryRecord)
async def save_history(request: SaveHistoryRequest, services: Services = Depends(get_services)):
    """Record a snapshot, refreshing the existing one when draftId matches"""
    return services.history.save(
        request.data,
        draft_id=request.draftId,
        property_address=request.propertyAddress,
        if_replace_text=request.ifReplaceText,
        if_replace_image=request.ifReplaceImage,
    )


@router.get("/{draft_id}", response_model=HistoryRecord)
async def get_history(draft_id: str, services: Services = Depends(get_services)):
    record = services.history.get(draft_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"History record {draft_id} not found.")
    return record


@router.delete("/{draft_id}", response_model=DeleteResponse)
async def delete_history(draft_id: str, services: Services = Depends(get_services)):
    return DeleteResponse(deleted=services.history.delete_by_id(draft_id))
