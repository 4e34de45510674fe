"""
Configuration API routes
Option collections, AI parameters and shared report content
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends

from valuation_app.api.deps import Services, get_services
from valuation_app.schemas.options import (
    AiConfig,
    ConstructionBrief,
    ExtractionConfig,
    GlobalContent,
    ImageConfig,
    OptionCard,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/commentary-options", response_model=Dict[str, List[str]])
async def get_commentary_options(services: Services = Depends(get_services)):
    return services.config.get_commentary_options()


@router.put("/commentary-options", response_model=Dict[str, List[str]])
async def save_commentary_options(options: Dict[str, List[str]], services: Services = Depends(get_services)):
    return services.config.save_commentary_options(options)


@router.get("/multi-options", response_model=List[OptionCard])
async def get_multi_options(services: Services = Depends(get_services)):
    return services.config.get_multi_options()


@router.put("/multi-options", response_model=List[OptionCard])
async def save_multi_options(cards: List[OptionCard], services: Services = Depends(get_services)):
    return services.config.save_multi_options(cards)


@router.get("/commentary-cards", response_model=List[OptionCard])
async def get_commentary_cards(services: Services = Depends(get_services)):
    return services.config.get_commentary_cards()


@router.put("/commentary-cards", response_model=List[OptionCard])
async def save_commentary_cards(cards: List[OptionCard], services: Services = Depends(get_services)):
    return services.config.save_commentary_cards(cards)


@router.get("/image-options", response_model=List[ImageConfig])
async def get_image_options(services: Services = Depends(get_services)):
    return services.config.get_image_options()


@router.put("/image-options", response_model=List[ImageConfig])
async def save_image_options(options: List[ImageConfig], services: Services = Depends(get_services)):
    return services.config.save_image_options(options)


@router.get("/ai-config", response_model=AiConfig)
async def get_ai_config(services: Services = Depends(get_services)):
    return services.config.get_ai_config()


@router.put("/ai-config", response_model=AiConfig)
async def save_ai_config(config: AiConfig, services: Services = Depends(get_services)):
    """Save model parameters; the next AI call picks them up"""
    saved = services.config.save_ai_config(config)
    services.ai.invalidate_config()
    return saved


@router.get("/global-content", response_model=GlobalContent)
async def get_global_content(services: Services = Depends(get_services)):
    return services.config.get_global_content()


@router.put("/global-content", response_model=GlobalContent)
async def save_global_content(content: GlobalContent, services: Services = Depends(get_services)):
    return services.config.save_global_content(content)


@router.get("/construction-brief", response_model=ConstructionBrief)
async def get_construction_brief(services: Services = Depends(get_services)):
    return services.config.get_construction_brief()


@router.put("/construction-brief", response_model=ConstructionBrief)
async def save_construction_brief(brief: ConstructionBrief, services: Services = Depends(get_services)):
    return services.config.save_construction_brief(brief)


@router.get("/extraction", response_model=ExtractionConfig)
async def get_extraction_config(services: Services = Depends(get_services)):
    """JSON structure and prompts used for PDF extraction"""
    return services.config.get_extraction_config()


@router.put("/extraction", response_model=ExtractionConfig)
async def save_extraction_config(config: ExtractionConfig, services: Services = Depends(get_services)):
    services.config.save_extraction_config(
        config.jsonStructure,
        system_prompt=config.systemPrompt,
        user_prompt=config.userPrompt,
        extraction_hints_title=config.extractionHintsTitle,
        extraction_hints=config.extractionHints,
    )
    return services.config.get_extraction_config()
