"""
Google Geocoding lookup used to de-duplicate drafts by property.

Drafts are keyed by the Google place id of their address. When Google knows
nothing about an address, a deterministic key derived from the normalized
address string is used instead so repeated saves still land on one draft.
"""

import hashlib
import logging
from typing import Optional

import httpx

from valuation_app.core.config import settings
from valuation_app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "fallback_"


def fallback_place_id(address: str) -> str:
    """Stable key for addresses the geocoder returns no results for."""
    normalized = address.lower().strip()
    return FALLBACK_PREFIX + hashlib.md5(normalized.encode("utf-8")).hexdigest()


class GeocodingClient:
    """Resolves property addresses to Google place ids"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        api_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.api_url = api_url or settings.GEOCODE_API_URL
        self.http_client = http_client or httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS)

    def place_id_for(self, address: str) -> str:
        """
        Resolve an address to a place id

        Args:
            address: Free-form property address

        Returns:
            Google place id, or a ``fallback_<md5>`` key on zero results

        Raises:
            ExternalServiceError: if the API key is missing, the request fails,
                or Google reports any status other than OK / ZERO_RESULTS
        """
        if not self.api_key:
            raise ExternalServiceError("GOOGLE_MAPS_API_KEY is not configured")

        try:
            resp = self.http_client.get(self.api_url, params={"address": address, "key": self.api_key})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Geocoding request failed with status {e.response.status_code}")
            raise ExternalServiceError(
                f"Geocoding API request failed with status {e.response.status_code}: {e.response.text}"
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to call Geocoding API: {e}")
            raise ExternalServiceError(f"Failed to call Geocoding API: {e}")

        status = data.get("status")
        results = data.get("results") or []
        if status == "OK" and results:
            place_id = results[0].get("place_id")
            if place_id:
                return place_id

        if status == "ZERO_RESULTS":
            logger.warning(f"No geocoding results for: {address[:40]}, using address hash")
            return fallback_place_id(address)

        raise ExternalServiceError(f"Geocoding failed: {status} - {data.get('error_message') or 'No results'}")
