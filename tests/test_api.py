"""HTTP-level tests for the valuation API"""
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from valuation_app.main import app
from valuation_app.utils.validation import DOCX_MIME_TYPE, parse_data_uri
from tests.helpers import PNG_BYTES, build_docx, docx_text

FORM = {"data": {"Info": {"Property Address": "12 Test St", "Client Name": "Jane Doe"}}}


@pytest.mark.asyncio
async def test_health_and_root(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}

    response = await client.get("/")
    assert response.json()["status"] == "ok"
    assert "X-Correlation-ID" in response.headers

    response = await client.get("/api/v1/", headers={"X-Correlation-ID": "abc-123"})
    assert response.json()["endpoints"]["reports"] == "/api/v1/reports"
    assert response.headers["X-Correlation-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_service_unavailable_without_storage():
    app.dependency_overrides.clear()
    app.state.services = None
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/v1/drafts")
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_draft_lifecycle(client: AsyncClient):
    response = await client.post("/api/v1/drafts", json={"formData": FORM})
    assert response.status_code == 200
    draft_id = response.json()["draftId"]

    # Same property, differently formatted address: merged into the same draft
    update = {"data": {"Info": {"Property Address": "12 TEST ST", "Valuation Date": "1 Jan 2025"}}}
    response = await client.post("/api/v1/drafts", json={"formData": update})
    assert response.json()["draftId"] == draft_id

    response = await client.get("/api/v1/drafts")
    drafts = response.json()
    assert len(drafts) == 1
    assert drafts[0]["propertyAddress"] == "12 TEST ST"
    assert "formData" not in drafts[0]

    response = await client.get(f"/api/v1/drafts/{draft_id}")
    info = response.json()["formData"]["data"]["Info"]
    assert info["Valuation Date"] == "1 Jan 2025"

    response = await client.delete(f"/api/v1/drafts/{draft_id}")
    assert response.json() == {"deleted": True}
    response = await client.get(f"/api/v1/drafts/{draft_id}")
    assert response.status_code == 404
    response = await client.delete(f"/api/v1/drafts/{draft_id}")
    assert response.json() == {"deleted": False}


@pytest.mark.asyncio
async def test_draft_without_address_is_rejected(client: AsyncClient):
    response = await client.post("/api/v1/drafts", json={"formData": {"data": {"Info": {}}}})
    assert response.status_code == 422
    assert "Property Address" in response.json()["detail"]


@pytest.mark.asyncio
async def test_history_lifecycle(client: AsyncClient):
    response = await client.post("/api/v1/history", json={"draftId": "d-1", "data": FORM["data"], "ifReplaceText": True})
    record = response.json()
    assert record["draftId"] == "d-1"
    assert record["propertyAddress"] == "12 Test St"

    response = await client.post("/api/v1/history", json={"draftId": "d-1", "data": {"Extra": {"x": "y"}}})
    refreshed = response.json()
    assert refreshed["createdAt"] == record["createdAt"]
    assert refreshed["ifReplaceText"] is False
    assert set(refreshed["data"]) == {"Info", "Extra"}

    response = await client.get("/api/v1/history")
    assert [r["draftId"] for r in response.json()] == ["d-1"]

    response = await client.get("/api/v1/history/d-1")
    assert response.status_code == 200
    response = await client.delete("/api/v1/history/d-1")
    assert response.json() == {"deleted": True}
    response = await client.get("/api/v1/history/d-1")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_template_upload_list_delete(client: AsyncClient):
    files = {"file": ("Standard.docx", build_docx(["{%Replace_Address}"]), DOCX_MIME_TYPE)}
    response = await client.post("/api/v1/templates", files=files)
    assert response.status_code == 200
    assert response.json()["name"] == "Standard.docx"

    response = await client.get("/api/v1/templates")
    assert [t["name"] for t in response.json()] == ["Standard.docx"]

    response = await client.delete("/api/v1/templates/Standard.docx")
    assert response.json() == {"deleted": True}
    response = await client.get("/api/v1/templates")
    assert response.json() == []


@pytest.mark.asyncio
async def test_template_must_be_docx(client: AsyncClient):
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    response = await client.post("/api/v1/templates", files=files)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_image_upload_and_fetch(client: AsyncClient):
    response = await client.post("/api/v1/images", files={"file": ("front.png", PNG_BYTES, "image/png")})
    assert response.status_code == 200
    body = response.json()
    assert body["name"].endswith(".png")
    assert body["url"].startswith("https://storage.test/")

    response = await client.get("/api/v1/images")
    assert response.json() == [body]

    response = await client.get(f"/api/v1/images/{body['name']}")
    assert response.status_code == 200
    assert response.content == PNG_BYTES
    assert response.headers["content-type"] == "image/png"

    response = await client.get("/api/v1/images/missing.png")
    assert response.status_code == 404

    response = await client.post("/api/v1/images", files={"file": ("plan.tiff", b"II*", "image/tiff")})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_generate_and_download_report(client: AsyncClient, services):
    services.templates.upload_template("Standard.docx", build_docx(["Address: {%Replace_Address}", "Front: {%Image1}"]))
    image_name = services.templates.upload_image("front.png", PNG_BYTES)

    response = await client.post("/api/v1/reports", json={
        "templateFileName": "Standard.docx",
        "data": FORM["data"],
        "images": [{"placeholder": "{%Image1}", "imageName": image_name}],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["imagesReplaced"] == 1
    assert body["reportName"].startswith("12_Test_St_")
    _, content = parse_data_uri(body["generatedDocxDataUri"])
    assert "Address: 12 Test St" in docx_text(content)

    response = await client.get("/api/v1/reports")
    assert [r["name"] for r in response.json()] == [body["reportName"]]

    response = await client.get(f"/api/v1/reports/{body['reportName']}")
    assert response.status_code == 200
    assert response.headers["content-type"] == DOCX_MIME_TYPE
    assert "attachment" in response.headers["content-disposition"]

    response = await client.get(f"/api/v1/history/{body['draftId']}")
    assert response.json()["ifReplaceImage"] is True


@pytest.mark.asyncio
async def test_generate_report_failures(client: AsyncClient, services):
    response = await client.post("/api/v1/reports", json={"templateFileName": "Missing.docx"})
    assert response.status_code == 404

    services.templates.upload_template("Photo.docx", build_docx(["Front: {%Image1}"]))
    response = await client.post("/api/v1/reports", json={"templateFileName": "Photo.docx"})
    assert response.status_code == 422
    body = response.json()
    assert "Image1" in body["detail"]
    assert len(body["attempts"]) == 3


@pytest.mark.asyncio
async def test_ai_config_update_reaches_assistant(client: AsyncClient, services):
    response = await client.get("/api/v1/config/ai-config")
    assert response.json()["model"] == "gemini-2.5-pro"
    services.ai.config

    response = await client.put("/api/v1/config/ai-config", json={"model": "gemini-2.5-flash", "temperature": 0.4})
    assert response.status_code == 200
    assert services.ai._config is None
    assert services.ai.config.model == "gemini-2.5-flash"

    response = await client.put("/api/v1/config/ai-config", json={"model": "gemini-2.5-flash", "temperature": 5})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_extraction_config_round_trip(client: AsyncClient):
    payload = {"jsonStructure": '{"Info": {"Property Address": ""}}', "systemPrompt": "Be precise"}
    response = await client.put("/api/v1/config/extraction", json=payload)
    assert response.status_code == 200
    assert response.json()["systemPrompt"] == "Be precise"
    assert '"Property Address"' in response.json()["jsonStructure"]

    response = await client.put("/api/v1/config/extraction", json={"jsonStructure": "{not json"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_option_cards_get_ids(client: AsyncClient):
    cards = [{"cardName": "Chattels", "placeholder": "[Replace_Chattels]",
              "options": [{"label": "Standard", "option": "Fixed floor coverings"}]}]
    response = await client.put("/api/v1/config/multi-options", json=cards)
    saved = response.json()
    assert saved[0]["id"]
    assert saved[0]["options"][0]["id"]

    response = await client.get("/api/v1/config/multi-options")
    assert response.json() == saved


@pytest.mark.asyncio
async def test_number_to_words_endpoint(client: AsyncClient, genai_client):
    genai_client.models.generate_content.return_value = SimpleNamespace(text="Five Hundred Thousand")

    response = await client.post("/api/v1/ai/number-to-words", json={"number": 500000})
    assert response.status_code == 200
    assert response.json() == {"words": "Five Hundred Thousand Dollars"}


@pytest.mark.asyncio
async def test_ai_failure_is_bad_gateway(client: AsyncClient, genai_client):
    genai_client.models.generate_content.side_effect = RuntimeError("quota exceeded")

    response = await client.post("/api/v1/ai/construction-brief", json={"notes": "weatherboard, iron roof"})
    assert response.status_code == 502
