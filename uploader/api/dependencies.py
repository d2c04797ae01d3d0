"""
FastAPI dependencies for the storage components.

Tests override these via app.dependency_overrides to inject fakes.
"""
from typing import Awaitable, Callable, Optional, Union

from fastapi import Request

from uploader.config import settings
from uploader.storage import CredentialIssuer, CredentialReader, get_s3_client
from uploader.validation import UploadPolicy

DownloadHook = Callable[[str], Union[Awaitable[None], None]]


def get_upload_policy() -> UploadPolicy:
    """Authoritative upload policy, built from settings."""
    return UploadPolicy.create(settings.allowed_types, settings.max_file_size)


def get_credential_issuer() -> CredentialIssuer:
    return CredentialIssuer(get_s3_client())


def get_credential_reader() -> CredentialReader:
    return CredentialReader(get_s3_client(), timeout=settings.download_timeout)


def get_download_hook(request: Request) -> Optional[DownloadHook]:
    """Optional callback (sync or async) run after a successful download (set via create_app)."""
    return getattr(request.app.state, "on_download", None)
