"""
Configuration collections edited from the admin screens.

Each collection is one JSON document under json/. Reading a collection that
does not exist yet writes its default first, so the next read finds it.
"""

import json
import logging
from typing import Dict, List

from valuation_app.azure import storage_paths
from valuation_app.schemas.options import (
    DEFAULT_AI_CONFIG,
    AiConfig,
    CommentaryOptions,
    ConstructionBrief,
    ExtractionConfig,
    ExtractionPrompts,
    GlobalContent,
    ImageConfig,
    OptionCard,
)
from valuation_app.services.json_documents import JsonDocument
from valuation_app.services.placeholders import normalize_placeholder
from valuation_app.utils.validation import parse_json_object

logger = logging.getLogger(__name__)

DEFAULT_JSON_STRUCTURE = {
    "Info": {
        "Property Address": "[extracted_Address]",
        "Client Name": "[extracted_ClientName]",
        "Valuation Date": "[extracted_ValuationDate]",
    },
    "Property": {
        "Legal Description": "[extracted_LegalDescription]",
        "Land Area": "[extracted_LandArea]",
        "Capital Value": "[extracted_CapitalValue]",
    },
}


class ConfigStore:
    """Typed access to every configuration document"""

    def __init__(self, object_store):
        self.commentary_options_doc = JsonDocument(
            object_store, storage_paths.COMMENTARY_OPTIONS_DOCUMENT, CommentaryOptions, dict
        )
        self.multi_options_doc = JsonDocument(
            object_store, storage_paths.MULTI_OPTIONS_DOCUMENT, List[OptionCard], list
        )
        self.commentary_cards_doc = JsonDocument(
            object_store, storage_paths.COMMENTARY_CARDS_DOCUMENT, List[OptionCard], list
        )
        self.image_options_doc = JsonDocument(
            object_store, storage_paths.IMAGE_OPTIONS_DOCUMENT, List[ImageConfig], list
        )
        self.ai_config_doc = JsonDocument(
            object_store, storage_paths.AI_CONFIG_DOCUMENT, AiConfig, DEFAULT_AI_CONFIG.model_copy
        )
        self.global_content_doc = JsonDocument(
            object_store, storage_paths.GLOBAL_CONTENT_DOCUMENT, GlobalContent, GlobalContent
        )
        self.construction_brief_doc = JsonDocument(
            object_store, storage_paths.CONSTRUCTION_BRIEF_DOCUMENT, ConstructionBrief, ConstructionBrief
        )
        self.json_structure_doc = JsonDocument(
            object_store, storage_paths.JSON_STRUCTURE_DOCUMENT, Dict[str, object],
            lambda: dict(DEFAULT_JSON_STRUCTURE),
        )
        self.prompts_doc = JsonDocument(
            object_store, storage_paths.PROMPTS_DOCUMENT, ExtractionPrompts, ExtractionPrompts
        )

    # Commentary options: category -> list of sentences

    def get_commentary_options(self) -> CommentaryOptions:
        return self.commentary_options_doc.load()

    def save_commentary_options(self, options: CommentaryOptions) -> CommentaryOptions:
        return self.commentary_options_doc.save(options)

    # Option cards (ids are assigned by the schema defaults)

    def get_multi_options(self) -> List[OptionCard]:
        return self.multi_options_doc.load()

    def save_multi_options(self, cards: List[OptionCard]) -> List[OptionCard]:
        return self.multi_options_doc.save(cards)

    def get_commentary_cards(self) -> List[OptionCard]:
        return self.commentary_cards_doc.load()

    def save_commentary_cards(self, cards: List[OptionCard]) -> List[OptionCard]:
        return self.commentary_cards_doc.save(cards)

    # Image placeholders

    def get_image_options(self) -> List[ImageConfig]:
        return self.image_options_doc.load()

    def save_image_options(self, options: List[ImageConfig]) -> List[ImageConfig]:
        return self.image_options_doc.save(options)

    def image_sizes(self) -> Dict[str, ImageConfig]:
        """Image options keyed by normalized placeholder"""
        return {normalize_placeholder(o.placeholder): o for o in self.get_image_options()}

    # AI model parameters

    def get_ai_config(self) -> AiConfig:
        return self.ai_config_doc.load()

    def save_ai_config(self, config: AiConfig) -> AiConfig:
        return self.ai_config_doc.save(config)

    # Report boilerplate

    def get_global_content(self) -> GlobalContent:
        return self.global_content_doc.load()

    def save_global_content(self, content: GlobalContent) -> GlobalContent:
        return self.global_content_doc.save(content)

    def get_construction_brief(self) -> ConstructionBrief:
        return self.construction_brief_doc.load()

    def save_construction_brief(self, brief: ConstructionBrief) -> ConstructionBrief:
        return self.construction_brief_doc.save(brief)

    # Extraction structure and prompts

    def get_json_structure(self) -> Dict[str, object]:
        return self.json_structure_doc.load()

    def get_extraction_config(self) -> ExtractionConfig:
        structure = self.get_json_structure()
        prompts = self.prompts_doc.load()
        return ExtractionConfig(
            jsonStructure=json.dumps(structure, indent=2),
            systemPrompt=prompts.system_prompt,
            userPrompt=prompts.user_prompt,
            extractionHintsTitle=prompts.extraction_hints_title,
            extractionHints=prompts.extraction_hints,
        )

    def save_extraction_config(
        self,
        json_structure: str,
        system_prompt: str = "",
        user_prompt: str = "",
        extraction_hints_title: str = "",
        extraction_hints: str = "",
    ) -> None:
        """
        Save the extraction structure and prompts

        The structure is parsed before anything is written. The two documents
        are written one after the other; a failure on the second leaves the
        first already updated.

        Raises:
            InvalidInputError: if ``json_structure`` is not a JSON object
        """
        structure = parse_json_object(json_structure)
        self.json_structure_doc.save(structure)
        self.prompts_doc.save(
            ExtractionPrompts(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                extraction_hints_title=extraction_hints_title,
                extraction_hints=extraction_hints,
            )
        )
        logger.info("Extraction config saved")


def card_text(cards: List[OptionCard], selections: Dict[str, List[str]]) -> Dict[str, str]:
    """
    Turn selected option ids into placeholder text

    Args:
        cards: Commentary or multi-option cards
        selections: card id -> selected option ids, in display order

    Returns:
        Normalized placeholder -> selected option texts joined by blank lines
    """
    text: Dict[str, str] = {}
    for card in cards:
        chosen = selections.get(card.id)
        if not chosen:
            continue
        by_id = {o.id: o.option for o in card.options}
        parts = [by_id[i] for i in chosen if i in by_id]
        if parts:
            text[normalize_placeholder(card.placeholder)] = "\n\n".join(parts)
    return text

