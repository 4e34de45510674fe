"""
AI assist API routes
Drafting helpers and PDF extraction backed by Gemini
"""

import logging

from fastapi import APIRouter, Depends

from valuation_app.api.deps import Services, get_services
from valuation_app.schemas.ai import (
    BriefRequest,
    BriefResponse,
    ExtractedPropertyData,
    ExtractPropertyDataRequest,
    MergeDraftRequest,
    NumberToWordsRequest,
    NumberToWordsResponse,
    StatutoryValuation,
    StatutoryValuationRequest,
    ValuationSummaryRequest,
    ValuationSummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/number-to-words", response_model=NumberToWordsResponse)
async def number_to_words(request: NumberToWordsRequest, services: Services = Depends(get_services)):
    return NumberToWordsResponse(words=services.ai.convert_number_to_words(request.number))


@router.post("/valuation-summary", response_model=ValuationSummaryResponse)
async def valuation_summary(request: ValuationSummaryRequest, services: Services = Depends(get_services)):
    summary = services.ai.update_valuation_summary(**request.model_dump())
    return ValuationSummaryResponse(updatedValuationSummary=summary)


@router.post("/construction-brief", response_model=BriefResponse)
async def construction_brief(request: BriefRequest, services: Services = Depends(get_services)):
    return BriefResponse(brief=services.ai.draft_construction_brief(request.notes))


@router.post("/chattels-brief", response_model=BriefResponse)
async def chattels_brief(request: BriefRequest, services: Services = Depends(get_services)):
    return BriefResponse(brief=services.ai.draft_chattels_brief(request.notes))


@router.post("/statutory-valuation", response_model=StatutoryValuation)
async def statutory_valuation(request: StatutoryValuationRequest, services: Services = Depends(get_services)):
    """Look up the council rating valuation for an address"""
    return services.ai.get_statutory_valuation(request.propertyAddress, services.search)


@router.post("/extract", response_model=ExtractedPropertyData)
async def extract_property_data(request: ExtractPropertyDataRequest, services: Services = Depends(get_services)):
    """Extract report fields from the property title and brief information PDFs"""
    data = services.ai.extract_property_data(
        request.propertyTitlePdfDataUri,
        request.briefInformationPdfDataUri,
    )
    return ExtractedPropertyData(data=data)


@router.post("/merge-draft", response_model=ExtractedPropertyData)
async def merge_draft(request: MergeDraftRequest, services: Services = Depends(get_services)):
    """
    Fill the empty fields of a draft from the PDFs

    The merged form data is returned; the draft itself is not saved.
    """
    merged = services.ai.merge_ai_data_with_draft(
        services.drafts,
        request.draftId,
        request.propertyTitlePdfDataUri,
        request.briefInformationPdfDataUri,
    )
    return ExtractedPropertyData(data=merged)
