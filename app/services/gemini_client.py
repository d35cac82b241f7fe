"""
Gemini Client

Thin async wrapper over the Gemini ``generateContent`` REST endpoint.
Constructed once by the app factory and injected into ResumeService.
"""

import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from app.config import GeminiConfig
from app.utils.exceptions import ConfigurationError, GeminiAPIError
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class InlineData:
    """Binary attachment (PDF or image) sent alongside the prompt."""
    mime_type: str
    data: str  # base64

    @classmethod
    def from_bytes(cls, content: bytes, mime_type: str) -> "InlineData":
        return cls(mime_type=mime_type, data=base64.b64encode(content).decode("ascii"))


class GeminiClient:
    """Calls Gemini and returns the text of the first candidate."""

    def __init__(self, config: GeminiConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}/models/{self.config.model}:generateContent"

    async def generate_content(self, prompt: str, inline_data: Optional[InlineData] = None) -> str:
        """
        Send one prompt (plus optional inline file) and return the reply text.

        Raises:
            ConfigurationError: no API key configured
            GeminiAPIError: HTTP error, transport failure or empty reply
        """
        if not self.config.api_key:
            raise ConfigurationError("Gemini API key not configured", "gemini")

        parts: List[Dict[str, Any]] = [{"text": prompt}]
        if inline_data is not None:
            parts.append({
                "inline_data": {
                    "mime_type": inline_data.mime_type,
                    "data": inline_data.data,
                }
            })

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    headers={
                        "x-goog-api-key": self.config.api_key,
                        "Content-Type": "application/json",
                    },
                    json={"contents": [{"parts": parts}]},
                )
        except httpx.HTTPError as e:
            raise GeminiAPIError(f"Gemini request failed: {type(e).__name__}: {e}")

        if response.is_error:
            raise GeminiAPIError(self._error_message(response), response.status_code)

        text = self._first_candidate_text(response.json())
        if not text:
            raise GeminiAPIError("Gemini returned no content", response.status_code)

        logger.info(f"[Gemini] Raw AI response length: {len(text)}")
        logger.debug(f"[Gemini] Raw AI response preview: {text[:200]}...")
        return text

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        # Keep the status code in the message; retry and fallback decisions match on it
        detail = response.text[:500]
        try:
            body = response.json()
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                detail = body["error"].get("message") or detail
        except ValueError:
            pass
        return f"[{response.status_code} {response.reason_phrase}] {detail}"

    @staticmethod
    def _first_candidate_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                logger.warning(f"[Gemini] Prompt blocked: {block_reason}")
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
