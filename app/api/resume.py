from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from slowapi import Limiter

from app.schemas.resume import UploadResult
from app.services.resume_service import (
    ResumeService,
    UploadedResume,
    processing_failure_result,
)
from app.utils.exceptions import (
    AIResponseParseError,
    ConfigurationError,
    InvalidCredentialsError,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_resume_service(request: Request) -> ResumeService:
    return request.app.state.services.resume_service


def create_router(limiter: Limiter, upload_rate_limit: str) -> APIRouter:
    """Résumé upload endpoints, rate limited by the app's own limiter."""
    router = APIRouter(prefix="/api", tags=["Resume"])

    @router.post("/upload-resume", response_model=UploadResult)
    @limiter.limit(upload_rate_limit)
    async def upload_resume(request: Request, file: Optional[UploadFile] = File(None)):
        """
        Upload a résumé and extract structured data with Gemini.

        AI-side failures still return 200 with ``aiProcessed: false`` and an
        empty ``extractedData`` skeleton so the user can fill the form manually.
        """
        if file is None or not file.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No file uploaded"
            )

        resume_service = get_resume_service(request)
        file_name = file.filename
        content_type = file.content_type or ""

        is_valid, error_msg = resume_service.validate_file(file_name, content_type)
        if not is_valid:
            logger.warning(f"[API] Rejected upload {file_name}: {error_msg}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_msg
            )

        try:
            content = await file.read()
            upload = UploadedResume(file_name=file_name, content_type=content_type, content=content)
            return await resume_service.process_upload(upload)

        except ConfigurationError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e)
            )
        except InvalidCredentialsError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={
                    "error": "AI service configuration error. Please contact support.",
                    "details": str(e),
                }
            )
        except AIResponseParseError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "error": e.message,
                    "rawResponse": e.raw_response,
                    "details": e.details,
                }
            )
        except Exception as e:
            logger.error(f"[API] Upload error for {file_name}: {e}", exc_info=True)
            return processing_failure_result(file_name)

    return router
