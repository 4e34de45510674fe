"""AI assist request and response schemas"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class NumberToWordsRequest(BaseModel):
    number: float


class NumberToWordsResponse(BaseModel):
    words: str


class ValuationSummaryRequest(BaseModel):
    valuationDate: str
    marketValue: str
    methodologyUsed: str
    keyAssumptions: str
    currentValuationSummary: str


class ValuationSummaryResponse(BaseModel):
    updatedValuationSummary: str


class BriefRequest(BaseModel):
    notes: str = Field(..., min_length=1)


class BriefResponse(BaseModel):
    brief: str


class StatutoryValuationRequest(BaseModel):
    propertyAddress: str = Field(..., min_length=1)


class StatutoryValuation(BaseModel):
    landValueByWeb: str = "N/A"
    improvementsValueByWeb: str = "N/A"
    ratingValueByWeb: str = "N/A"


class ExtractPropertyDataRequest(BaseModel):
    propertyTitlePdfDataUri: str
    briefInformationPdfDataUri: str


class MergeDraftRequest(ExtractPropertyDataRequest):
    draftId: str


class ExtractedPropertyData(BaseModel):
    data: Dict[str, Any]
