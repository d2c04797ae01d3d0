"""
Upload endpoint for presigned POST generation.

Implements the direct-to-storage upload flow:
1. POST /upload - Declare file name/type/size, get a presigned POST back
2. Client POSTs the file straight to S3 with the returned form fields

Why this approach?
- Backend never handles file bytes (no bandwidth/memory issues)
- Bucket stays private - only presigned credentials can write to it
- S3 enforces the size/type conditions even if the client lies

The body is parsed by hand rather than as a typed FastAPI body so that
malformed JSON and missing fields answer 400, not 422.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError as SchemaValidationError

from uploader.api.dependencies import get_credential_issuer, get_upload_policy
from uploader.errors import UpstreamError, ValidationError
from uploader.schemas.upload import UploadCredential, UploadRequest
from uploader.storage import CredentialIssuer
from uploader.validation import UploadPolicy

router = APIRouter()


@router.post("", response_model=UploadCredential)
@router.post("/presigned-url", response_model=UploadCredential)
async def create_upload_credential(
    request: Request,
    policy: UploadPolicy = Depends(get_upload_policy),
    issuer: CredentialIssuer = Depends(get_credential_issuer)
):
    """
    Generate a presigned POST for a direct upload to S3.

    Request body: {"fileName": str, "fileType": str, "fileSize": int}

    The declared type and size are checked against the server's own
    policy regardless of any client-side check.

    Returns 200 {url, fields, key}; 400 for malformed JSON, missing
    fields, disallowed type or oversized file; 500 if signing fails.
    """
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON in request body"
        )

    try:
        upload_request = UploadRequest.model_validate(body)
    except SchemaValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )

    try:
        return issuer.issue(upload_request, policy)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    except UpstreamError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )
