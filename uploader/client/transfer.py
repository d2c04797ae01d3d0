"""
Multipart transfer to S3 using a presigned POST credential.

The form is encoded up front so its total length is known, then
streamed in chunks; progress is reported as each chunk is handed to the
transport. Completion is signalled by `transfer` returning, not by
progress reaching 100.
"""
import logging
from typing import AsyncIterator, Callable, Optional

import httpx

from uploader.client.files import DEFAULT_CONTENT_TYPE
from uploader.constants import TRANSFER_SUCCESS_STATUS
from uploader.errors import TransferError
from uploader.schemas.upload import UploadCredential

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

CHUNK_SIZE = 64 * 1024


def progress_percent(sent: int, total: int) -> int:
    """Whole-number percentage of `total` sent, clamped to [0, 100]."""
    if total <= 0:
        return 100
    return max(0, min(100, round(sent / total * 100)))


class TransferEngine:
    """Posts a file to storage with the fields of a presigned POST."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 300.0,
        chunk_size: int = CHUNK_SIZE,
    ):
        self._http_client = http_client
        self._timeout = timeout
        self._chunk_size = chunk_size

    @staticmethod
    def encode_form(
        content: bytes,
        credential: UploadCredential,
        file_name: str,
        content_type: str,
    ) -> httpx.Request:
        """
        Build the multipart form: credential fields in issued order, file last.

        S3 ignores any form field that follows the file, so the order matters.
        """
        return httpx.Request(
            "POST",
            credential.url,
            data=credential.fields,
            files={"file": (file_name, content, content_type)},
        )

    async def _progress_stream(
        self,
        body: bytes,
        on_progress: Optional[ProgressCallback],
    ) -> AsyncIterator[bytes]:
        total = len(body)
        last_reported = -1
        for offset in range(0, total, self._chunk_size):
            chunk = body[offset:offset + self._chunk_size]
            yield chunk
            if on_progress is not None:
                progress = progress_percent(offset + len(chunk), total)
                if progress > last_reported:
                    last_reported = progress
                    on_progress(progress)

    async def transfer(
        self,
        content: bytes,
        credential: UploadCredential,
        on_progress: Optional[ProgressCallback] = None,
        file_name: str = "file",
        content_type: Optional[str] = None,
    ) -> None:
        """
        Upload `content` to storage.

        Args:
            content: File bytes
            credential: Presigned POST from the upload API
            on_progress: Called with integer percentages, non-decreasing
            file_name: Filename reported in the multipart part
            content_type: MIME type of the part (defaults to the credential's Content-Type field)

        Raises:
            TransferError: On transport failure or any status other than 204
        """
        part_type = content_type or credential.fields.get("Content-Type") or DEFAULT_CONTENT_TYPE
        form = self.encode_form(content, credential, file_name, part_type)
        body = form.read()
        headers = {
            "Content-Type": form.headers["Content-Type"],
            "Content-Length": str(len(body)),
        }
        stream = self._progress_stream(body, on_progress)

        try:
            if self._http_client is not None:
                response = await self._http_client.post(credential.url, content=stream, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(credential.url, content=stream, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Transfer of {credential.key} failed: {e}")
            raise TransferError(f"Upload failed: {e}") from e

        if response.status_code != TRANSFER_SUCCESS_STATUS:
            logger.warning(f"Transfer of {credential.key} rejected with HTTP {response.status_code}")
            raise TransferError(
                f"Upload failed with status {response.status_code}",
                status_code=response.status_code
            )

        logger.debug(f"Transferred {len(content)} bytes to {credential.key}")
