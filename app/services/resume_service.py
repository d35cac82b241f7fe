"""
Résumé Processing Service

Validates an uploaded résumé, turns it into a Gemini request (inline file
or extracted text), calls the model with retry/backoff and repairs the
JSON reply. AI-side failures never abort the upload: they come back as a
success-shaped result with empty fields for manual entry.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from app.config import Config
from app.schemas.resume import UploadResult, empty_extracted_data
from app.services import document_extraction
from app.services.gemini_client import InlineData
from app.services.prompt_service import build_binary_prompt, build_text_prompt
from app.services.response_parser import parse_model_reply
from app.utils.exceptions import (
    ConfigurationError,
    DocumentUnreadableError,
    InvalidCredentialsError,
)
from app.utils.logger import get_logger
from app.utils.retry import exponential_backoff, is_transient_error, retry_async

logger = get_logger(__name__)

PDF = "pdf"
IMAGE = "image"
TEXT = "text"
WORD = "word"

WORD_DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass(frozen=True)
class UploadedResume:
    """One uploaded file; lives for a single request."""
    file_name: str
    content_type: str
    content: bytes

    @property
    def extension(self) -> str:
        return Path(self.file_name).suffix.lower().lstrip(".")


class ResumeService:
    """Service for turning résumé files into structured data"""

    ALLOWED_MIME_TYPES = {
        "application/pdf": PDF,
        "application/msword": WORD,
        WORD_DOCX_MIME: WORD,
        "text/plain": TEXT,
        "image/jpeg": IMAGE,
        "image/jpg": IMAGE,
        "image/png": IMAGE,
    }
    ALLOWED_EXTENSIONS = {
        "pdf": PDF,
        "doc": WORD,
        "docx": WORD,
        "txt": TEXT,
        "jpeg": IMAGE,
        "jpg": IMAGE,
        "png": IMAGE,
    }
    # Gemini wants canonical MIME types for inline data
    INLINE_MIME_BY_EXTENSION = {
        "pdf": "application/pdf",
        "jpeg": "image/jpeg",
        "jpg": "image/jpeg",
        "png": "image/png",
    }

    def __init__(
        self,
        config: Config,
        ai_client,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config
        self.ai_client = ai_client
        self._sleep = sleep

    def validate_file(self, filename: str, content_type: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Accept the file if either its MIME type or its extension is allowed.

        Returns:
            Tuple of (is_valid, error_message)
        """
        content_type = content_type or ""
        extension = Path(filename).suffix.lower().lstrip(".")
        if content_type in self.ALLOWED_MIME_TYPES or extension in self.ALLOWED_EXTENSIONS:
            return True, None
        return False, (
            "Invalid file type. Supported formats: PDF, DOC, DOCX, TXT, JPEG, JPG, PNG. "
            f"Received: {content_type} ({extension})"
        )

    def detect_kind(self, upload: UploadedResume) -> str:
        """Pick the processing branch: declared MIME first, then the extension."""
        kind = self.ALLOWED_MIME_TYPES.get(upload.content_type)
        if kind is None and upload.content_type.startswith("image/"):
            kind = IMAGE
        if kind is None:
            kind = self.ALLOWED_EXTENSIONS.get(upload.extension)
        if kind is None:
            raise ValueError(f"Unsupported file type: {upload.content_type} ({upload.extension})")
        return kind

    def _inline_mime_type(self, upload: UploadedResume, kind: str) -> str:
        declared = upload.content_type
        if declared == "application/pdf" or (declared.startswith("image/") and declared != "image/jpg"):
            return declared
        default = "application/pdf" if kind == PDF else "image/jpeg"
        return self.INLINE_MIME_BY_EXTENSION.get(upload.extension, default)

    def build_model_request(self, upload: UploadedResume) -> Tuple[str, Optional[InlineData]]:
        """
        Build the prompt and optional inline attachment for one file.

        Raises:
            DocumentUnreadableError: a Word document yielded no usable text
        """
        kind = self.detect_kind(upload)

        if kind in (PDF, IMAGE):
            inline = InlineData.from_bytes(upload.content, self._inline_mime_type(upload, kind))
            return build_binary_prompt(is_pdf=kind == PDF), inline

        if kind == TEXT:
            return build_text_prompt(document_extraction.decode_plain_text(upload.content)), None

        if upload.content_type == "application/octet-stream":
            logger.info(f"[ResumeService] Detected {upload.extension.upper()} file with generic MIME type")
        logger.info("[ResumeService] Processing DOCX/DOC file with layered extraction...")
        document = document_extraction.extract_document_text(upload.content)
        return build_text_prompt(document.text, extraction_method=document.method), None

    async def _generate(self, prompt: str, inline: Optional[InlineData]) -> str:
        retry = self.config.retry
        return await retry_async(
            lambda: self.ai_client.generate_content(prompt, inline),
            max_retries=retry.max_retries,
            is_transient=is_transient_error,
            backoff=exponential_backoff(retry.base_delay_seconds),
            sleep=self._sleep,
            label="AI request",
        )

    @staticmethod
    def normalize_extracted_data(data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in the skeleton keys and force ``skills`` to a list."""
        if not isinstance(data.get("skills"), list):
            logger.warning("[ResumeService] Skills array missing or invalid, providing fallback")
            data["skills"] = []
        for key, default in empty_extracted_data().items():
            if data.get(key) is None:
                data[key] = default
        return data

    async def process_upload(self, upload: UploadedResume) -> UploadResult:
        """
        Run the full extraction for one accepted file.

        Raises:
            ConfigurationError: Gemini API key missing
            InvalidCredentialsError: Gemini rejected the API key
            AIResponseParseError: the model reply held no JSON object
        """
        logger.info(
            f"[ResumeService] Processing file: name={upload.file_name}, "
            f"type={upload.content_type}, size={len(upload.content)} bytes"
        )
        if not self.ai_client.is_configured:
            logger.error("[ResumeService] Gemini API key not found")
            raise ConfigurationError("AI processing not configured. Please check API key configuration.")

        try:
            prompt, inline = self.build_model_request(upload)
        except DocumentUnreadableError as e:
            logger.error(f"[ResumeService] Document parsing error: {e}")
            return unreadable_document_result(upload.file_name, str(e))

        try:
            reply = await self._generate(prompt, inline)
        except Exception as e:
            logger.error(f"[ResumeService] Gemini AI error: {e}")
            return ai_failure_result(upload.file_name, e)

        extracted = self.normalize_extracted_data(parse_model_reply(reply))
        logger.info(
            f"[ResumeService] ✅ Parsed AI response for {upload.file_name}: "
            f"{len(extracted.get('skills', []))} skills, "
            f"{len(extracted.get('education') or [])} education entries"
        )
        return UploadResult(
            success=True,
            fileName=upload.file_name,
            extractedData=extracted,
            aiProcessed=True,
        )


def unreadable_document_result(file_name: str, reason: str) -> UploadResult:
    return UploadResult(
        fileName=file_name,
        aiProcessed=False,
        parseError=True,
        message=(
            f"Document parsing failed: {reason.rstrip('.')}. Please fill the form manually "
            "or try converting your document to PDF format."
        ),
    )


def ai_failure_result(file_name: str, error: BaseException) -> UploadResult:
    """
    Map a model failure to a manual-entry result.

    Raises:
        InvalidCredentialsError: the failure points at a bad API key
    """
    message = str(error).lower()

    if "overloaded" in message or "503" in message:
        return UploadResult(
            fileName=file_name,
            aiProcessed=False,
            parseError=True,
            message=(
                f'AI service is temporarily overloaded due to high demand. Your file "{file_name}" '
                "was uploaded successfully. Please fill the form manually, or try uploading again "
                "in 2-3 minutes for auto-parsing."
            ),
            retryRecommended=True,
            estimatedRetryTime="2-3 minutes",
        )

    if "quota" in message or "limit" in message:
        return UploadResult(
            fileName=file_name,
            aiProcessed=False,
            parseError=True,
            message=(
                f'AI service quota exceeded for today. Your file "{file_name}" was uploaded '
                "successfully. Please fill the form manually. Auto-parsing will be available "
                "again tomorrow."
            ),
            retryRecommended=False,
            quotaExceeded=True,
        )

    if "api key" in message or "unauthorized" in message:
        raise InvalidCredentialsError("Invalid or missing API key") from error

    return UploadResult(
        fileName=file_name,
        aiProcessed=False,
        parseError=True,
        message="AI processing encountered an error. File uploaded successfully - please fill the form manually.",
        error="AI processing failed - manual entry available",
    )


def processing_failure_result(file_name: str) -> UploadResult:
    """Last-resort result for unexpected handler errors."""
    return UploadResult(
        fileName=file_name,
        aiProcessed=False,
        parseError=True,
        message="File uploaded successfully, but AI processing failed. Please fill the form manually.",
        error="AI processing failed, manual entry required",
    )
