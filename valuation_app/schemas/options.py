"""Configuration collection schemas"""

import uuid
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


class OptionItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    label: str
    option: str


class OptionCard(BaseModel):
    """A card of selectable text options bound to one placeholder"""

    id: str = Field(default_factory=_new_id)
    cardName: str = Field(..., min_length=1)
    placeholder: str = Field(..., min_length=1)
    options: List[OptionItem] = Field(default_factory=list)


class ImageConfig(BaseModel):
    """An image placeholder with its rendered size in pixels"""

    id: str = Field(default_factory=_new_id)
    cardName: str = Field(..., min_length=1)
    placeholder: str = Field(..., min_length=1)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class AiConfig(BaseModel):
    model: str = Field(..., min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    topP: Optional[float] = Field(default=None, ge=0, le=1)
    topK: Optional[int] = Field(default=None, ge=1)
    maxOutputTokens: Optional[int] = Field(default=None, ge=1)


DEFAULT_AI_CONFIG = AiConfig(
    model="gemini-2.5-pro",
    temperature=0.2,
    topP=1,
    topK=1,
    maxOutputTokens=8192,
)


class GlobalContent(BaseModel):
    """Market commentary shared by every report"""

    nzEconomicOverview: str = ""
    globalEconomicOverview: str = ""
    residentialMarket: str = ""
    recentMarketDirection: str = ""
    marketVolatility: str = ""
    localEconomyImpact: str = ""


# Global content field -> template placeholder
GLOBAL_CONTENT_PLACEHOLDERS: Dict[str, str] = {
    "nzEconomicOverview": "Replace_NZEconomic",
    "globalEconomicOverview": "Replace_GlobalEconomic",
    "residentialMarket": "Replace_ResidentialMarket",
    "recentMarketDirection": "Replace_RecentMarketDirection",
    "marketVolatility": "Replace_MarketVolatility",
    "localEconomyImpact": "Replace_LocalEconomyImpact",
}


class ConstructionBrief(BaseModel):
    brief: str = ""
    chattelsBrief: str = ""


CONSTRUCTION_BRIEF_PLACEHOLDER = "Replace_ConstructionBrief"
CHATTELS_BRIEF_PLACEHOLDER = "Replace_Chattels"


class ExtractionPrompts(BaseModel):
    """Prompt document as persisted in prompts.json"""

    system_prompt: str = ""
    user_prompt: str = ""
    extraction_hints_title: str = ""
    extraction_hints: str = ""


class ExtractionConfig(BaseModel):
    """JSON structure and prompts driving property data extraction"""

    jsonStructure: str
    systemPrompt: str = ""
    userPrompt: str = ""
    extractionHintsTitle: str = ""
    extractionHints: str = ""


CommentaryOptions = Dict[str, List[str]]
