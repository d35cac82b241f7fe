"""
Service-level exceptions.

Services raise these; the API layer decides whether they become an HTTP
error or a manual-entry fallback result.
"""

from typing import Optional


class ServiceError(Exception):
    """Base error carrying the component that raised it."""

    def __init__(self, message: str, component: str = "service"):
        super().__init__(message)
        self.message = message
        self.component = component

    def __str__(self) -> str:
        return self.message


class ConfigurationError(ServiceError):
    """Required configuration (e.g. the Gemini API key) is missing."""

    def __init__(self, message: str, component: str = "config"):
        super().__init__(message, component)


class GeminiAPIError(ServiceError):
    """The Gemini API rejected a request or returned an unusable reply."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, "gemini")
        self.status_code = status_code


class DocumentUnreadableError(ServiceError):
    """No usable text could be recovered from an uploaded document."""

    def __init__(self, message: str):
        super().__init__(message, "document_extraction")


class AIResponseParseError(ServiceError):
    """The model reply did not contain a JSON object."""

    def __init__(self, message: str, raw_response: str, details: str):
        super().__init__(message, "response_parser")
        self.raw_response = raw_response
        self.details = details


class InvalidCredentialsError(ServiceError):
    """The AI service rejected our API key."""

    def __init__(self, message: str):
        super().__init__(message, "gemini")
