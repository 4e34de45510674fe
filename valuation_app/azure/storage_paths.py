"""
Helpers for mapping documents and assets to Azure Blob Storage keys.

Every persisted object lives in a single container:
  json/<collection>.json          JSON documents (drafts, history, config)
  templates/<fileName>.docx       report templates
  images/<generatedName>.<ext>    images referenced by placeholder tags
  reports/<generatedName>.docx    generated reports
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import PurePosixPath

from valuation_app.core.exceptions import InvalidInputError

JSON_PREFIX = "json"
TEMPLATES_PREFIX = "templates"
IMAGES_PREFIX = "images"
REPORTS_PREFIX = "reports"

DRAFTS_DOCUMENT = "drafts.json"
HISTORY_DOCUMENT = "history.json"
COMMENTARY_OPTIONS_DOCUMENT = "commentary-options.json"
MULTI_OPTIONS_DOCUMENT = "multi-options.json"
COMMENTARY_CARDS_DOCUMENT = "commentary-cards.json"
IMAGE_OPTIONS_DOCUMENT = "image-options.json"
AI_CONFIG_DOCUMENT = "ai-config.json"
GLOBAL_CONTENT_DOCUMENT = "global-content.json"
CONSTRUCTION_BRIEF_DOCUMENT = "construction-brief.json"
JSON_STRUCTURE_DOCUMENT = "json-structure.json"
PROMPTS_DOCUMENT = "prompts.json"


def ensure_safe_name(name: str) -> str:
    """Reject caller-supplied file names that could escape their folder."""
    if not name or not name.strip():
        raise InvalidInputError("File name must not be empty")
    if "/" in name or "\\" in name or ".." in name:
        raise InvalidInputError(f"Invalid file name: {name}")
    return name


def json_document_key(document: str) -> str:
    return str(PurePosixPath(JSON_PREFIX, document))


def template_blob_key(file_name: str) -> str:
    return str(PurePosixPath(TEMPLATES_PREFIX, ensure_safe_name(file_name)))


def image_blob_key(file_name: str) -> str:
    return str(PurePosixPath(IMAGES_PREFIX, ensure_safe_name(file_name)))


def report_blob_key(file_name: str) -> str:
    return str(PurePosixPath(REPORTS_PREFIX, ensure_safe_name(file_name)))


def _normalise_report_base(base_name: str) -> str:
    """Return a safe file stem preserving readability."""
    cleaned = re.sub(r"[^\w\s\-]", "", base_name or "").strip()
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.replace(" ", "_") or "report"


def build_report_file_name(base_name: str, now: datetime | None = None) -> str:
    """
    Construct the file name for a generated report.

    The name combines the sanitised property address (or template stem) with a
    UTC timestamp so repeated generations for one property never collide:
      12_Test_St_20250101T093000000000Z.docx
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y%m%dT%H%M%S%fZ")
    return f"{_normalise_report_base(base_name)}_{stamp}.docx"
