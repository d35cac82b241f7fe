"""
Résumé upload related Pydantic schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_serializer

# Keys every extractedData payload carries, even when the AI step fails
EXTRACTED_DATA_DEFAULTS: Dict[str, Any] = {
    "name": "",
    "email": "",
    "phone": "",
    "skills": [],
    "experience": [],
    "education": [],
    "summary": "",
}


def empty_extracted_data() -> Dict[str, Any]:
    """Fresh skeleton for manual form entry."""
    return {key: (list(value) if isinstance(value, list) else value)
            for key, value in EXTRACTED_DATA_DEFAULTS.items()}


class UploadResult(BaseModel):
    """
    Body of a successful (HTTP 200) upload.

    ``success`` is true even when the AI step failed; ``aiProcessed`` and
    the optional flags tell the UI whether to pre-fill or ask for manual
    entry. Unset optional fields are left out of the JSON.
    """
    success: bool = True
    fileName: str
    extractedData: Dict[str, Any] = Field(default_factory=empty_extracted_data)
    aiProcessed: bool = False
    message: Optional[str] = None
    parseError: Optional[bool] = None
    retryRecommended: Optional[bool] = None
    estimatedRetryTime: Optional[str] = None
    quotaExceeded: Optional[bool] = None
    error: Optional[str] = None

    @model_serializer(mode="wrap")
    def omit_unset_flags(self, handler):
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


__all__ = ["UploadResult", "EXTRACTED_DATA_DEFAULTS", "empty_extracted_data"]
