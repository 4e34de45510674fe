"""Tests for the geocoding client"""
import httpx
import pytest

from valuation_app.core.exceptions import ExternalServiceError
from valuation_app.services.geocoding import GeocodingClient, fallback_place_id


def _geocoder(payload, status_code=200, seen=None, api_key="test-key"):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return GeocodingClient(api_key=api_key, http_client=http_client, api_url="https://geocode.test/json")


def test_returns_first_place_id():
    seen = []
    geocoder = _geocoder({"status": "OK", "results": [{"place_id": "ChIJ123"}, {"place_id": "ChIJ456"}]}, seen=seen)

    assert geocoder.place_id_for("12 Test St") == "ChIJ123"
    assert seen[0].url.params["address"] == "12 Test St"
    assert seen[0].url.params["key"] == "test-key"


def test_zero_results_uses_address_hash():
    geocoder = _geocoder({"status": "ZERO_RESULTS", "results": []})

    place_id = geocoder.place_id_for("Unknown Road")
    assert place_id == fallback_place_id("Unknown Road")
    assert place_id.startswith("fallback_")


def test_fallback_ignores_case_and_surrounding_space():
    assert fallback_place_id("  12 Test St ") == fallback_place_id("12 test st")


def test_error_status_is_reported():
    geocoder = _geocoder({"status": "REQUEST_DENIED", "error_message": "bad key"})

    with pytest.raises(ExternalServiceError) as exc:
        geocoder.place_id_for("12 Test St")
    assert "REQUEST_DENIED" in str(exc.value)


def test_http_error_is_reported():
    geocoder = _geocoder({"error": "boom"}, status_code=500)

    with pytest.raises(ExternalServiceError):
        geocoder.place_id_for("12 Test St")


def test_missing_api_key_fails_before_any_request():
    seen = []
    geocoder = _geocoder({"status": "OK"}, seen=seen, api_key="")

    with pytest.raises(ExternalServiceError):
        geocoder.place_id_for("12 Test St")
    assert seen == []
