"""
Pydantic schemas for request/response validation.
"""
from uploader.schemas.upload import (
    UploadRequest,
    UploadCredential,
    ReadCredential,
    DownloadRequest,
    DownloadResponse,
)

__all__ = [
    "UploadRequest",
    "UploadCredential",
    "ReadCredential",
    "DownloadRequest",
    "DownloadResponse",
]
