"""Shared fixtures: a test config, a scripted AI client and a TestClient."""

from __future__ import annotations

from io import BytesIO
from typing import List, Optional, Union

import pytest
from docx import Document
from fastapi.testclient import TestClient

from app.api.main import create_app
from app.config import Config, GeminiConfig, RetryConfig, ServerConfig
from app.utils.exceptions import GeminiAPIError

OVERLOADED = "[503 Service Unavailable] The model is overloaded. Please try again later."
QUOTA = "[429 Too Many Requests] Resource has been exhausted (e.g. check quota)."
BAD_KEY = "[400 Bad Request] API key not valid. Please pass a valid API key."

VALID_REPLY = (
    '{"name": "Jane Doe", "email": "jane@example.com", "phone": "555-0100", '
    '"skills": ["Python", "Team Leadership"], "experience": [], "education": [], '
    '"summary": "Backend engineer."}'
)


def overloaded() -> GeminiAPIError:
    return GeminiAPIError(OVERLOADED, 503)


class ScriptedAIClient:
    """Stands in for GeminiClient: replays queued replies or errors in order."""

    def __init__(self, replies: Optional[List[Union[str, Exception]]] = None, configured: bool = True):
        self.replies = list(replies or [VALID_REPLY])
        self.configured = configured
        self.calls = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate_content(self, prompt, inline_data=None):
        self.calls.append((prompt, inline_data))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_config(max_retries: int = 3) -> Config:
    return Config(
        gemini=GeminiConfig(api_key="test-key"),
        retry=RetryConfig(max_retries=max_retries, base_delay_seconds=0.0),
        server=ServerConfig(rate_limit_enabled=False),
    )


def make_docx(*paragraphs: str) -> bytes:
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def config() -> Config:
    return make_config()


@pytest.fixture
def ai_client() -> ScriptedAIClient:
    return ScriptedAIClient()


@pytest.fixture
def client(config: Config, ai_client: ScriptedAIClient) -> TestClient:
    return TestClient(create_app(config, ai_client=ai_client))
