"""
Draft API routes
In-progress inspection forms, one per geocoded property
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from valuation_app.api.deps import Services, get_services
from valuation_app.schemas.records import (
    DeleteResponse,
    Draft,
    DraftSummary,
    SaveDraftRequest,
    SaveDraftResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[DraftSummary])
async def list_drafts(services: Services = Depends(get_services)):
    """List drafts, most recently updated first"""
    return services.drafts.list()


@router.post("", response_model=SaveDraftResponse)
async def save_draft(request: SaveDraftRequest, services: Services = Depends(get_services)):
    """
    Save a draft

    A draft for a property that already has one is merged into it.
    """
    draft = services.drafts.save(request.formData)
    return SaveDraftResponse(draftId=draft.draftId)


@router.get("/{draft_id}", response_model=Draft)
async def get_draft(draft_id: str, services: Services = Depends(get_services)):
    draft = services.drafts.get(draft_id)
    if draft is None:
        raise HTTPException(status_code=404, detail=f"Draft with ID {draft_id} not found.")
    return draft


@router.delete("/{draft_id}", response_model=DeleteResponse)
async def delete_draft(draft_id: str, services: Services = Depends(get_services)):
    return DeleteResponse(deleted=services.drafts.delete_by_id(draft_id))
