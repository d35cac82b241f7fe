"""Endpoint tests for POST /api/upload-resume with a scripted AI client."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.api.main import create_app
from app.config import ServerConfig
from app.schemas.resume import EXTRACTED_DATA_DEFAULTS, empty_extracted_data
from app.utils.exceptions import GeminiAPIError
from tests.conftest import (
    BAD_KEY,
    QUOTA,
    VALID_REPLY,
    ScriptedAIClient,
    make_config,
    make_docx,
    overloaded,
)

URL = "/api/upload-resume"
RESUME_TEXT = b"Jane Doe\njane@example.com\nLed a team of five engineers building Python services."


def _upload(client: TestClient, name: str, content: bytes, content_type: str):
    return client.post(URL, files={"file": (name, content, content_type)})


def _app_client(replies=None, configured=True, max_retries=3):
    ai = ScriptedAIClient(replies, configured=configured)
    return TestClient(create_app(make_config(max_retries), ai_client=ai)), ai


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_invalid_type_is_rejected_without_extraction(client: TestClient, ai_client: ScriptedAIClient) -> None:
    response = _upload(client, "resume.exe", b"MZ...", "application/x-msdownload")

    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]
    assert "application/x-msdownload (exe)" in response.json()["detail"]
    assert ai_client.calls == []


def test_missing_file_field(client: TestClient) -> None:
    response = client.post(URL, data={"other": "value"})

    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


def test_text_resume_success(client: TestClient, ai_client: ScriptedAIClient) -> None:
    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["aiProcessed"] is True
    assert body["fileName"] == "resume.txt"
    assert body["extractedData"]["name"] == "Jane Doe"
    assert "message" not in body
    assert "parseError" not in body

    prompt, inline = ai_client.calls[0]
    assert "Led a team of five engineers" in prompt
    assert '"secondaryEducation"' in prompt
    assert inline is None


def test_pdf_is_sent_inline(client: TestClient, ai_client: ScriptedAIClient) -> None:
    response = _upload(client, "resume.pdf", b"%PDF-1.4 fake", "application/pdf")

    assert response.status_code == 200
    prompt, inline = ai_client.calls[0]
    assert prompt.startswith("Extract all information from this resume PDF")
    assert inline.mime_type == "application/pdf"


def test_image_with_generic_mime_uses_extension(client: TestClient, ai_client: ScriptedAIClient) -> None:
    response = _upload(client, "scan.PNG", b"\x89PNG fake", "application/octet-stream")

    assert response.status_code == 200
    prompt, inline = ai_client.calls[0]
    assert "resume image" in prompt
    assert inline.mime_type == "image/png"


def test_docx_with_generic_mime_is_extracted(client: TestClient, ai_client: ScriptedAIClient) -> None:
    docx = make_docx("Jane Doe - Senior Backend Engineer at Acme Corp since 2019.", "Skills: Python, Kafka")

    response = _upload(client, "resume.docx", docx, "application/octet-stream")

    assert response.status_code == 200
    assert response.json()["aiProcessed"] is True
    prompt, _ = ai_client.calls[0]
    assert "raw-text extraction from DOCX/DOC format" in prompt
    assert "Senior Backend Engineer at Acme Corp" in prompt


def test_unreadable_document_falls_back_to_manual_entry(client: TestClient, ai_client: ScriptedAIClient) -> None:
    response = _upload(client, "resume.doc", b"\x00\x01\x02\x03\x04", "application/msword")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["aiProcessed"] is False
    assert body["parseError"] is True
    assert body["message"].startswith("Document parsing failed:")
    assert body["extractedData"] == empty_extracted_data()
    assert ai_client.calls == []


def test_missing_api_key_is_server_error() -> None:
    client, ai = _app_client(configured=False)

    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 500
    assert response.json()["detail"] == "AI processing not configured. Please check API key configuration."
    assert ai.calls == []


def test_three_overloads_then_success_uses_four_attempts() -> None:
    client, ai = _app_client([overloaded(), overloaded(), overloaded(), VALID_REPLY])

    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 200
    assert response.json()["aiProcessed"] is True
    assert len(ai.calls) == 4


def test_persistent_overload_returns_retry_fallback() -> None:
    client, ai = _app_client([overloaded()])

    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 200
    body = response.json()
    assert len(ai.calls) == 4
    assert body["success"] is True
    assert body["aiProcessed"] is False
    assert body["retryRecommended"] is True
    assert body["estimatedRetryTime"] == "2-3 minutes"
    assert '"resume.txt"' in body["message"]
    assert body["extractedData"] == empty_extracted_data()


def test_quota_exhaustion_is_not_retried() -> None:
    client, ai = _app_client([GeminiAPIError(QUOTA, 429)])

    body = _upload(client, "resume.txt", RESUME_TEXT, "text/plain").json()

    assert len(ai.calls) == 1
    assert body["quotaExceeded"] is True
    assert body["retryRecommended"] is False


def test_invalid_api_key_is_unauthorized() -> None:
    client, _ = _app_client([GeminiAPIError(BAD_KEY, 400)])

    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "AI service configuration error. Please contact support."


def test_other_ai_errors_fall_back() -> None:
    client, _ = _app_client([GeminiAPIError("[500 Internal Server Error] An internal error has occurred.", 500)])

    body = _upload(client, "resume.txt", RESUME_TEXT, "text/plain").json()

    assert body["success"] is True
    assert body["aiProcessed"] is False
    assert body["error"] == "AI processing failed - manual entry available"


def test_unparseable_reply_is_server_error() -> None:
    client, _ = _app_client(["Sorry, I cannot help with that."])

    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["error"] == "Failed to parse AI response - no valid JSON found"
    assert detail["rawResponse"] == "Sorry, I cannot help with that."


def test_malformed_object_with_nested_object_is_server_error() -> None:
    reply = '{"name": "Jane Doe", "skills": ["Python"] "location": {"city": "Pune"}}'
    client, _ = _app_client([reply])

    response = _upload(client, "resume.txt", RESUME_TEXT, "text/plain")

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["error"] == "Failed to parse AI response"
    assert detail["rawResponse"] == reply


def test_reply_is_normalized() -> None:
    client, _ = _app_client(['```json\n{"name": "Jane", "skills": "Python", "dob": null}\n```'])

    data = _upload(client, "resume.txt", RESUME_TEXT, "text/plain").json()["extractedData"]

    assert data["skills"] == []
    assert data["dob"] is None
    for key in EXTRACTED_DATA_DEFAULTS:
        assert key in data


def test_unexpected_failure_still_returns_fallback(monkeypatch) -> None:
    client, ai = _app_client()
    services = client.app.state.services

    def explode(upload):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(services.resume_service, "build_model_request", explode)

    body = _upload(client, "resume.txt", RESUME_TEXT, "text/plain").json()

    assert body["success"] is True
    assert body["aiProcessed"] is False
    assert body["error"] == "AI processing failed, manual entry required"


def test_configured_rate_limit_applies_per_app() -> None:
    limited_config = make_config()
    limited_config.server = ServerConfig(upload_rate_limit="1/minute", rate_limit_enabled=True)
    limited = TestClient(create_app(limited_config, ai_client=ScriptedAIClient()))
    unlimited, _ = _app_client()

    assert _upload(limited, "resume.txt", RESUME_TEXT, "text/plain").status_code == 200
    assert _upload(limited, "resume.txt", RESUME_TEXT, "text/plain").status_code == 429
    for _ in range(3):
        assert _upload(unlimited, "resume.txt", RESUME_TEXT, "text/plain").status_code == 200
