"""
Upload client for the résumé endpoint.

Posts one or many files to ``/api/upload-resume`` and keeps a per-file
progress map for UI polling. Progress is a local animation while the
request is outstanding; the server reports none.
"""

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from app.utils.logger import get_logger

logger = get_logger(__name__)

PROGRESS_CAP = 90
PROGRESS_RESET_DELAY = 2.0


class UploadError(Exception):
    """The upload endpoint answered with a non-OK status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class ResumeFile:
    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ResumeFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            file_name=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


def _error_message(body: Any) -> str:
    """Pull a readable message out of an error body (``error`` or FastAPI ``detail``)."""
    if isinstance(body, dict):
        if body.get("error"):
            return str(body["error"])
        detail = body.get("detail")
        if isinstance(detail, dict) and detail.get("error"):
            return str(detail["error"])
        if isinstance(detail, str) and detail:
            return detail
    return "Upload failed"


class ResumeUploadClient:
    """
    Async counterpart of the upload hook used by the frontend.

    Either pass ``base_url`` or a ready ``http_client`` (tests hand in one
    backed by ``httpx.MockTransport`` or ``httpx.ASGITransport``).

    The progress map is cleared ``progress_reset_delay`` seconds after an
    upload finishes. That timer lives on the running event loop, so a
    short-lived loop such as a single ``asyncio.run`` call should pass
    ``progress_reset_delay=0`` to clear it as soon as the upload returns.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        endpoint: str = "/api/upload-resume",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
        progress_reset_delay: float = PROGRESS_RESET_DELAY,
    ):
        self.endpoint = endpoint
        self._http_client = http_client
        self._base_url = base_url
        self._timeout = timeout
        self._progress_reset_delay = progress_reset_delay
        self._reset_handle: Optional[asyncio.TimerHandle] = None

        self.is_uploading = False
        self.upload_progress: Dict[str, int] = {}

    async def _post(self, client: httpx.AsyncClient, file: ResumeFile) -> httpx.Response:
        return await client.post(
            self.endpoint,
            files={"file": (file.file_name, file.content, file.content_type)},
        )

    async def _with_client(self, func):
        if self._http_client is not None:
            return await func(self._http_client)
        async with httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout) as client:
            return await func(client)

    async def _animate_progress(self, file_name: str, step: int, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            current = self.upload_progress.get(file_name, 0)
            self.upload_progress[file_name] = min(current + step, PROGRESS_CAP)

    def _clear_progress(self) -> None:
        self.upload_progress = {}

    def _schedule_progress_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        if self._progress_reset_delay <= 0:
            self._clear_progress()
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self._progress_reset_delay, self._clear_progress)

    async def _upload(self, client: httpx.AsyncClient, file: ResumeFile, step: int, interval: float) -> Dict[str, Any]:
        ticker = asyncio.create_task(self._animate_progress(file.file_name, step, interval))
        try:
            response = await self._post(client, file)
        finally:
            ticker.cancel()
        self.upload_progress[file.file_name] = 100

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            raise UploadError(_error_message(body), response.status_code)
        if not isinstance(body, dict):
            raise UploadError("Upload failed: response was not a JSON object", response.status_code)
        return body

    async def upload_single_file(self, file: ResumeFile) -> Dict[str, Any]:
        """
        Upload one file and return the endpoint's result.

        Manual-entry fallbacks (``aiProcessed: false``) are returned as-is.

        Raises:
            UploadError: non-OK response
            httpx.HTTPError: transport failure
        """
        self.is_uploading = True
        if self._reset_handle is not None:
            self._reset_handle.cancel()
        self.upload_progress = {file.file_name: 0}
        try:
            return await self._with_client(lambda client: self._upload(client, file, 10, 0.5))
        except Exception as e:
            logger.error(f"[UploadClient] Upload error for {file.file_name}: {e}")
            raise
        finally:
            self.is_uploading = False
            self._schedule_progress_reset()

    async def upload_multiple_files(self, files: Sequence[ResumeFile]) -> List[Dict[str, Any]]:
        """
        Upload files concurrently; results come back in input order.

        A failing file yields ``{"success": False, "fileName", "extractedData": {}, "error"}``
        in its slot instead of aborting the batch.
        """
        self.is_uploading = True
        if self._reset_handle is not None:
            self._reset_handle.cancel()
        self.upload_progress = {file.file_name: 0 for file in files}

        async def upload_one(client: httpx.AsyncClient, file: ResumeFile) -> Dict[str, Any]:
            try:
                return await self._upload(client, file, 5, 0.3)
            except Exception as e:
                logger.warning(f"[UploadClient] Upload failed for {file.file_name}: {e}")
                return {
                    "success": False,
                    "fileName": file.file_name,
                    "extractedData": {},
                    "error": str(e) or "Upload failed",
                }

        async def upload_all(client: httpx.AsyncClient) -> List[Dict[str, Any]]:
            return list(await asyncio.gather(*(upload_one(client, f) for f in files)))

        try:
            return await self._with_client(upload_all)
        finally:
            self.is_uploading = False
            self._schedule_progress_reset()
