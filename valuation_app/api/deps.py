"""Service wiring shared by the route modules"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import HTTPException, Request, status

from valuation_app.core.config import Settings
from valuation_app.services.ai_assist import AiAssistant
from valuation_app.services.config_store import ConfigStore
from valuation_app.services.document_renderer import DocumentRenderer
from valuation_app.services.geocoding import GeocodingClient
from valuation_app.services.record_stores import DraftStore, HistoryStore
from valuation_app.services.report_service import ReportService
from valuation_app.services.template_repository import TemplateRepository
from valuation_app.services.web_search import WebSearchClient

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Every service a request handler may need, built once per process"""

    drafts: DraftStore
    history: HistoryStore
    templates: TemplateRepository
    config: ConfigStore
    renderer: DocumentRenderer
    reports: ReportService
    ai: AiAssistant
    search: WebSearchClient


def build_services(
    settings: Settings,
    object_store,
    genai_client: Optional[Any] = None,
    geocoder: Optional[GeocodingClient] = None,
    search_client: Optional[WebSearchClient] = None,
) -> Services:
    """
    Construct the service graph around one object store

    Args:
        settings: Application settings
        object_store: Storage adapter (AzureBlobService in production)
        genai_client: google-genai client, or None when AI is not configured
        geocoder: Geocoding client override
        search_client: Web search client override
    """
    config = ConfigStore(object_store)
    history = HistoryStore(object_store)
    templates = TemplateRepository(object_store)
    renderer = DocumentRenderer(settings.DEFAULT_IMAGE_WIDTH, settings.DEFAULT_IMAGE_HEIGHT)
    return Services(
        drafts=DraftStore(object_store, geocoder or GeocodingClient()),
        history=history,
        templates=templates,
        config=config,
        renderer=renderer,
        reports=ReportService(templates, config, history, renderer),
        ai=AiAssistant(genai_client, config),
        search=search_client or WebSearchClient(),
    )


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is not configured (set AZURE_STORAGE_CONNECTION_STRING)",
        )
    return services
