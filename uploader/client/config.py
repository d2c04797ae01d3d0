"""
Client configuration.

Assembled once when the uploader is constructed. Precedence, field by
field: explicit constructor argument > UPLOADER_* environment variable >
default. Nothing is re-merged per call.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

from uploader.config import parse_allowed_types
from uploader.constants import ALLOWED_FILE_TYPES, MAX_FILE_SIZE
from uploader.validation import UploadPolicy


class UploaderConfig(BaseSettings):
    """
    Settings for the client-side upload library.

    Attributes:
        api_base_url: Base URL of the upload API ("" for same-origin/relative)
        upload_endpoint: Path of the credential endpoint
        download_endpoint: Path of the download endpoint
        allowed_file_types: Comma-separated MIME types, or "*"
        max_file_size: Advisory size limit in bytes
        request_timeout: Timeout in seconds for API calls
        transfer_timeout: Timeout in seconds for the storage POST
    """
    api_base_url: str = ""
    upload_endpoint: str = "/api/upload"
    download_endpoint: str = "/api/download"
    allowed_file_types: str = ",".join(ALLOWED_FILE_TYPES)
    max_file_size: int = MAX_FILE_SIZE
    request_timeout: float = 30.0
    transfer_timeout: float = 300.0

    model_config = SettingsConfigDict(
        env_prefix="UPLOADER_",
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    @property
    def upload_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}{self.upload_endpoint}"

    @property
    def download_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}{self.download_endpoint}"

    def policy(self) -> UploadPolicy:
        """Advisory policy for fail-fast checks before any network call."""
        return UploadPolicy.create(parse_allowed_types(self.allowed_file_types), self.max_file_size)
