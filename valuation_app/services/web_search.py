"""Google Custom Search lookup feeding the statutory valuation prompt"""

import logging
from typing import List, Optional

import httpx

from valuation_app.core.config import settings
from valuation_app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

MAX_SNIPPETS = 5


class WebSearchClient:
    """Searches council websites for a property's rating valuation"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        search_engine_id: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.search_engine_id = search_engine_id if search_engine_id is not None else settings.SEARCH_ENGINE_ID
        self.http_client = http_client or httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS)

    def valuation_snippets(self, property_address: str) -> List[str]:
        """
        Return up to five result snippets for "<address> valuation"

        Raises:
            ExternalServiceError: if search is not configured, the request
                fails, or nothing is found
        """
        if not self.api_key or not self.search_engine_id:
            raise ExternalServiceError("Google API Key or Search Engine ID is not configured.")

        params = {
            "key": self.api_key,
            "cx": self.search_engine_id,
            "q": f"{property_address} valuation",
            "siteSearch": settings.STATUTORY_SEARCH_SITE,
        }
        try:
            resp = self.http_client.get(settings.CUSTOM_SEARCH_API_URL, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            try:
                detail = e.response.json().get("error", {}).get("message", detail)
            except ValueError:
                pass
            logger.error(f"Custom Search API error: {detail}")
            raise ExternalServiceError(f"Web search failed: {detail}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Custom Search API request failed: {e}")
            raise ExternalServiceError(f"Web search failed: {e}")

        items = data.get("items") or []
        if not items:
            raise ExternalServiceError(f'Web search failed: No results found for the address "{property_address}".')

        snippets = [item.get("snippet") or item.get("title") or "" for item in items]
        return [s for s in snippets if s][:MAX_SNIPPETS]
