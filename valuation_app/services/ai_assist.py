"""
Generative AI helpers for drafting and extracting report text.

The google-genai client is created once when the application starts and passed
in. Model parameters come from the ai-config document and are cached until
``invalidate_config`` is called after that document is saved.
"""

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional

from google.genai import types

from valuation_app.core.exceptions import ExternalServiceError, NotFoundError
from valuation_app.schemas.ai import StatutoryValuation
from valuation_app.schemas.options import AiConfig
from valuation_app.utils.validation import is_filled, parse_data_uri

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")

NUMBER_TO_WORDS_PROMPT = """Convert the following number to its English word representation, capitalized, and append " Dollars" at the end.
Respond with the words only.

Input Number: {number}

Example:
Input: 940000
Output: Nine Hundred Forty Thousand Dollars

Input: 1250500
Output: One Million Two Hundred Fifty Thousand Five Hundred Dollars
"""

VALUATION_SUMMARY_PROMPT = """You are an expert property valuer. You will rewrite the valuation summary based on the updated information provided by the user to make sure it sounds professional and is free of errors.
Respond with the rewritten summary only.

Here is the current valuation summary: {currentValuationSummary}

Here is the updated information:
Valuation Date: {valuationDate}
Market Value: {marketValue}
Methodology Used: {methodologyUsed}
Key Assumptions: {keyAssumptions}"""

BRIEF_PROMPTS = {
    "construction": (
        "You are an expert New Zealand residential property valuer. Turn the inspection notes below into a concise, "
        "professional construction description for a valuation report (foundations, framing, cladding, roofing, "
        "joinery, interior linings). Do not invent details that are not in the notes.\n\nNotes:\n{notes}"
    ),
    "chattels": (
        "You are an expert New Zealand residential property valuer. Turn the inspection notes below into a single "
        "professional sentence listing the chattels included in the valuation. Do not invent items that are not in "
        "the notes.\n\nNotes:\n{notes}"
    ),
}

STATUTORY_VALUATION_SYSTEM_PROMPT = (
    "You are an expert data extractor. Analyze the provided text snippets from a website search and extract the "
    "required valuation figures. The values are typically prefixed with labels like \"Land value\", \"Value of "
    "improvements\", and \"Capital value (rating valuation)\". Return JSON with the keys landValueByWeb, "
    "improvementsValueByWeb and ratingValueByWeb. If a value cannot be found in the snippets, or if the snippets "
    "array is empty, return \"N/A\" for that field."
)

DEFAULT_EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert data analyst in the New Zealand property sector. Extract key data from the two provided PDF "
    "documents. Strictly output all information in the JSON format provided. If a piece of information cannot be "
    "found in the documents, use \"N/A\" in the JSON field."
)


def parse_json_response(text: str) -> Any:
    """Parse a model response that should be JSON, tolerating markdown fences"""
    cleaned = _JSON_FENCE_RE.sub("", (text or "").strip())
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExternalServiceError(f"AI returned invalid JSON: {e}")


def merge_with_structure(draft: Any, extracted: Any, structure: Any) -> Dict[str, Any]:
    """
    Merge AI-extracted data into draft data, field by field of the structure

    Draft values win unless they are empty or "N/A".
    """
    merged: Dict[str, Any] = {}
    draft = draft if isinstance(draft, Mapping) else {}
    extracted = extracted if isinstance(extracted, Mapping) else {}
    for key, sub in structure.items():
        if isinstance(sub, Mapping):
            merged[key] = merge_with_structure(draft.get(key), extracted.get(key), sub)
        else:
            draft_value = draft.get(key)
            merged[key] = draft_value if _has_value(draft_value) else extracted.get(key)
    return merged


def _has_value(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return len(value) > 0
    return is_filled(value)


class AiAssistant:
    """Prompt wrappers over a google-genai client"""

    def __init__(self, client, config_store):
        self.client = client
        self.config_store = config_store
        self._config: Optional[AiConfig] = None

    @property
    def config(self) -> AiConfig:
        if self._config is None:
            self._config = self.config_store.get_ai_config()
        return self._config

    def invalidate_config(self) -> None:
        """Forget cached model parameters so the next call re-reads them"""
        self._config = None
        logger.info("AI config cache invalidated")

    def _generate(self, contents, system_instruction: Optional[str] = None, json_output: bool = False) -> str:
        if self.client is None:
            raise ExternalServiceError("GEMINI_API_KEY is not configured")
        config = self.config
        generation_config = types.GenerateContentConfig(
            temperature=config.temperature,
            top_p=config.topP,
            top_k=config.topK,
            max_output_tokens=config.maxOutputTokens,
            system_instruction=system_instruction,
            response_mime_type="application/json" if json_output else None,
        )
        try:
            resp = self.client.models.generate_content(
                model=config.model,
                contents=contents,
                config=generation_config,
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise ExternalServiceError(f"AI request failed: {e}")
        text = (resp.text or "").strip()
        if not text:
            raise ExternalServiceError("AI returned an empty response")
        return text

    def convert_number_to_words(self, number: float) -> str:
        value = int(number) if float(number).is_integer() else number
        words = self._generate(NUMBER_TO_WORDS_PROMPT.format(number=value)).strip().strip('"')
        if not words.endswith("Dollars"):
            words = f"{words} Dollars"
        return words

    def update_valuation_summary(self, **fields: str) -> str:
        return self._generate(VALUATION_SUMMARY_PROMPT.format(**fields))

    def draft_brief(self, kind: str, notes: str) -> str:
        return self._generate(BRIEF_PROMPTS[kind].format(notes=notes))

    def draft_construction_brief(self, notes: str) -> str:
        return self.draft_brief("construction", notes)

    def draft_chattels_brief(self, notes: str) -> str:
        return self.draft_brief("chattels", notes)

    def get_statutory_valuation(self, property_address: str, search_client) -> StatutoryValuation:
        snippets = search_client.valuation_snippets(property_address)
        payload = json.dumps({"propertyAddress": property_address, "snippets": snippets})
        data = parse_json_response(
            self._generate(payload, system_instruction=STATUTORY_VALUATION_SYSTEM_PROMPT, json_output=True)
        )
        if not isinstance(data, dict):
            raise ExternalServiceError("AI returned an unexpected valuation format")
        return StatutoryValuation(**{
            key: str(data.get(key) or "N/A") for key in StatutoryValuation.model_fields
        })

    def extract_property_data(self, title_pdf_data_uri: str, brief_pdf_data_uri: str) -> Dict[str, Any]:
        """
        Extract report fields from the property title and brief information PDFs

        The output follows the configured JSON structure; fields the model cannot
        find come back as "N/A".
        """
        extraction = self.config_store.get_extraction_config()
        _, title_pdf = parse_data_uri(title_pdf_data_uri)
        _, brief_pdf = parse_data_uri(brief_pdf_data_uri)

        instructions = [extraction.userPrompt] if extraction.userPrompt else []
        if extraction.extractionHints:
            instructions.append(f"{extraction.extractionHintsTitle or 'Extraction hints'}:\n{extraction.extractionHints}")
        instructions.append(f"Output JSON Format:\n```json\n{extraction.jsonStructure}\n```")
        instructions.append("File 1 is the Property Title, File 2 is the Brief Information.")

        contents = [
            types.Part.from_bytes(data=title_pdf, mime_type="application/pdf"),
            types.Part.from_bytes(data=brief_pdf, mime_type="application/pdf"),
            "\n\n".join(instructions),
        ]
        data = parse_json_response(
            self._generate(
                contents,
                system_instruction=extraction.systemPrompt or DEFAULT_EXTRACTION_SYSTEM_PROMPT,
                json_output=True,
            )
        )
        if not isinstance(data, dict):
            raise ExternalServiceError("AI returned an unexpected extraction format")
        return data

    def merge_ai_data_with_draft(self, draft_store, draft_id: str, title_pdf_data_uri: str, brief_pdf_data_uri: str) -> Dict[str, Any]:
        """Extract data from the PDFs and fill the gaps of an existing draft"""
        draft = draft_store.get(draft_id)
        if draft is None:
            raise NotFoundError(f"Draft with ID {draft_id} not found.")
        extracted = self.extract_property_data(title_pdf_data_uri, brief_pdf_data_uri)
        structure = self.config_store.get_json_structure()
        form_data = draft.formData.model_dump()
        form_data["data"] = {
            **form_data.get("data", {}),
            **merge_with_structure(form_data.get("data", {}), extracted, structure),
        }
        return form_data
