"""
Read path: signed GET URLs and whole-object fetches.

fetch_object buffers the entire object in memory. That is fine for the
small audio files this service accepts, but it is not a way to serve
very large objects (no range or streaming support).
"""
import time
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from uploader.constants import READ_CREDENTIAL_EXPIRATION
from uploader.errors import InvalidArgument, UpstreamError
from uploader.schemas.upload import ReadCredential
from uploader.storage.s3_client import S3Client
from uploader.utils.logging import log_object_fetched, log_storage_failure
from uploader.utils.metrics import storage_failures_total

logger = logging.getLogger(__name__)


@dataclass
class StoredObject:
    """Object bytes plus what the storage backend told us about them."""
    content: bytes
    size: int
    content_type: Optional[str] = None


class CredentialReader:
    """Issues read credentials and fetches objects through them."""

    def __init__(
        self,
        s3_client: S3Client,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            s3_client: Storage client used for signing
            http_client: Shared httpx client; a short-lived one is created per fetch if omitted
            timeout: Timeout in seconds for per-fetch clients
        """
        self.s3 = s3_client
        self._http_client = http_client
        self._timeout = timeout

    def sign_read(self, object_key: str) -> ReadCredential:
        """
        Mint a read-only URL for one object, valid for one hour.

        Raises:
            UpstreamError: If signing fails
        """
        try:
            url = self.s3.generate_presigned_read_url(object_key, READ_CREDENTIAL_EXPIRATION)
        except UpstreamError:
            storage_failures_total.labels(operation="presign_get").inc()
            raise
        return ReadCredential(url=url)

    async def fetch_object(self, object_key: str) -> StoredObject:
        """
        Fetch an object's bytes via a freshly signed read URL.

        Args:
            object_key: The S3 object key

        Returns:
            StoredObject with the full body, its size and content type
            (None when the response carries no Content-Type header)

        Raises:
            InvalidArgument: If object_key is empty
            UpstreamError: If signing fails, the request fails, or storage
                responds with a non-2xx status
        """
        if not object_key:
            raise InvalidArgument("S3 key is required")

        credential = self.sign_read(object_key)
        start_time = time.time()

        try:
            if self._http_client is not None:
                response = await self._http_client.get(credential.url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(credential.url)
        except httpx.HTTPError as e:
            storage_failures_total.labels(operation="fetch").inc()
            log_storage_failure(
                logger,
                operation="fetch",
                error=str(e),
                object_key=object_key,
                include_traceback=True,
            )
            raise UpstreamError(f"Failed to fetch file from storage: {e}") from e

        if not response.is_success:
            storage_failures_total.labels(operation="fetch").inc()
            log_storage_failure(
                logger,
                operation="fetch",
                error=f"HTTP {response.status_code}",
                object_key=object_key,
            )
            raise UpstreamError(f"Failed to fetch file from storage: {response.status_code} {response.reason_phrase}")

        content = response.content
        content_type = response.headers.get('content-type') or None

        log_object_fetched(
            logger,
            object_key=object_key,
            size_bytes=len(content),
            content_type=content_type,
            duration_ms=(time.time() - start_time) * 1000,
        )

        return StoredObject(content=content, size=len(content), content_type=content_type)
