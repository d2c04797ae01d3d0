"""
HTTP client for the upload API (credential requests and downloads).
"""
import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as SchemaValidationError

from uploader.client.config import UploaderConfig
from uploader.errors import CredentialError, UpstreamError
from uploader.schemas.upload import DownloadResponse, UploadCredential, UploadRequest

logger = logging.getLogger(__name__)


@dataclass
class DownloadedObject:
    """Object bytes returned by the download endpoint."""
    content: bytes
    size: int
    content_type: Optional[str] = None
    metadata: Any = field(default_factory=dict)


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Pull a human-readable message out of an error response (JSON or plain text)."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or fallback
    if isinstance(payload, dict):
        for name in ("message", "detail", "error"):
            if isinstance(payload.get(name), str):
                return payload[name]
    return fallback


class UploadApiClient:
    """Talks to the upload API on behalf of the orchestrator."""

    def __init__(self, config: UploaderConfig, http_client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            config: Client configuration (base URL, endpoints, timeouts)
            http_client: Shared httpx client; a short-lived one is created per call if omitted
        """
        self.config = config
        self._http_client = http_client

    async def _post_json(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(url, json=payload)
        async with httpx.AsyncClient(timeout=self.config.request_timeout) as client:
            return await client.post(url, json=payload)

    async def request_credential(self, request: UploadRequest) -> UploadCredential:
        """
        Ask the API for a presigned POST.

        Args:
            request: Declared file name, type and size

        Returns:
            UploadCredential to hand to the TransferEngine

        Raises:
            CredentialError: On transport failure, non-2xx response, or a
                response body that is not a credential
        """
        try:
            response = await self._post_json(self.config.upload_url, request.model_dump(by_alias=True))
        except httpx.HTTPError as e:
            raise CredentialError(f"Failed to get upload URL: {e}") from e

        if not response.is_success:
            raise CredentialError(_error_message(response, "Failed to get upload URL"))

        try:
            return UploadCredential.model_validate(response.json())
        except (ValueError, SchemaValidationError) as e:
            raise CredentialError(f"Invalid upload credential response: {e}") from e

    async def download(self, object_key: str, metadata: Any = None) -> DownloadedObject:
        """
        Download an object through the API.

        Raises:
            UpstreamError: On transport failure, non-2xx response or a malformed body
        """
        payload = {"s3Key": object_key, "metadata": {} if metadata is None else metadata}
        try:
            response = await self._post_json(self.config.download_url, payload)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to download file: {e}") from e

        if not response.is_success:
            raise UpstreamError(_error_message(response, "Failed to download file"))

        try:
            body = DownloadResponse.model_validate(response.json())
            content = base64.b64decode(body.buffer, validate=True)
        except (ValueError, SchemaValidationError) as e:
            raise UpstreamError(f"Invalid download response: {e}") from e

        return DownloadedObject(
            content=content,
            size=body.size,
            content_type=body.content_type,
            metadata=body.metadata,
        )
