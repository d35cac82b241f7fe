"""Async client for the résumé upload endpoint."""

from app.client.upload_client import ResumeFile, ResumeUploadClient, UploadError

__all__ = ["ResumeFile", "ResumeUploadClient", "UploadError"]
