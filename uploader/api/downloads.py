"""
Download endpoint: fetch an uploaded object and return it in-band.

The object is read through a signed GET URL and returned base64
encoded, together with the content type storage reported and any
metadata the caller passed in.
"""
import base64
import inspect
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError as SchemaValidationError

from uploader.api.dependencies import DownloadHook, get_credential_reader, get_download_hook
from uploader.errors import InvalidArgument, UpstreamError
from uploader.schemas.upload import DownloadRequest, DownloadResponse
from uploader.storage import CredentialReader
from uploader.utils.metrics import download_bytes_total, downloads_total

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=DownloadResponse)
async def download_object(
    request: Request,
    reader: CredentialReader = Depends(get_credential_reader),
    on_download: Optional[DownloadHook] = Depends(get_download_hook)
):
    """
    Fetch an object by key.

    Request body: {"s3Key": str, "metadata": object (optional)}

    Returns 200 {buffer, size, contentType, metadata}; 400 if the key is
    missing; 404 if the object has no bytes; 500 on storage failure.
    """
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON in request body"
        )

    if not isinstance(body, dict) or not body.get("s3Key"):
        downloads_total.labels(status="bad_request").inc()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing S3 key"
        )

    try:
        download_request = DownloadRequest.model_validate(body)
    except SchemaValidationError:
        downloads_total.labels(status="bad_request").inc()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid download request"
        )

    try:
        stored = await reader.fetch_object(download_request.s3_key)
    except InvalidArgument as e:
        downloads_total.labels(status="bad_request").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except UpstreamError as e:
        downloads_total.labels(status="error").inc()
        logger.error(f"Error downloading {download_request.s3_key}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    if not stored.content:
        downloads_total.labels(status="not_found").inc()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found"
        )

    if on_download is not None:
        result = on_download(download_request.s3_key)
        if inspect.isawaitable(result):
            await result

    downloads_total.labels(status="ok").inc()
    download_bytes_total.inc(stored.size)

    return DownloadResponse(
        buffer=base64.b64encode(stored.content).decode("ascii"),
        size=stored.size,
        content_type=stored.content_type,
        metadata=download_request.metadata,
    )
