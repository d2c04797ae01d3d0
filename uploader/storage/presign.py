"""
Presigned POST credential issuance.

Flow:
1. Client declares file name, type and size
2. Backend re-validates the declaration against its own policy
3. Backend mints a fresh object key under uploads/<uuid>/
4. Backend signs a POST policy whose conditions S3 enforces at upload time
5. Client POSTs the file straight to S3 with the returned fields

The policy conditions come from the server's policy, never from the
client's declaration: a client that lies about its size still hits the
content-length-range condition at S3.
"""
import time
import uuid
import logging
from typing import Any, List

from uploader.constants import OBJECT_KEY_PREFIX, UPLOAD_CREDENTIAL_EXPIRATION
from uploader.errors import UpstreamError, ValidationError
from uploader.schemas.upload import UploadCredential, UploadRequest
from uploader.storage.s3_client import S3Client
from uploader.utils.logging import log_credential_issued, log_upload_rejected
from uploader.utils.metrics import (
    content_family,
    storage_failures_total,
    upload_credentials_issued_total,
    upload_rejections_total,
)
from uploader.validation import UploadPolicy, validate_upload

logger = logging.getLogger(__name__)

AUDIO_TYPE_PREFIX = 'audio/'


class CredentialIssuer:
    """
    Issues write credentials for direct-to-storage uploads.

    Responsibilities:
    - Authoritative validation of upload requests
    - Unique object key generation
    - Policy conditions for the presigned POST
    """

    def __init__(self, s3_client: S3Client):
        self.s3 = s3_client

    @staticmethod
    def generate_object_key(file_name: str) -> str:
        """
        Generate a unique object key for the upload.

        Pattern: uploads/{uuid}/{file_name}

        The file name is used verbatim. A name containing '/' produces
        extra path segments below the uuid; it cannot escape the
        uploads/<uuid>/ namespace, but it is not sanitized either.

        Args:
            file_name: Client-declared file name

        Returns:
            Object key string
        """
        return f"{OBJECT_KEY_PREFIX}/{uuid.uuid4()}/{file_name}"

    @staticmethod
    def build_conditions(file_type: str, policy: UploadPolicy) -> List[Any]:
        """
        Build the POST policy conditions.

        Always bounds the content length by the policy's max size. Audio
        uploads get a Content-Type prefix condition; any other type is
        pinned with an exact match (S3 rejects form fields that no
        condition covers).

        Args:
            file_type: Declared MIME type
            policy: Server-side upload policy

        Returns:
            List of conditions in boto3's format
        """
        conditions: List[Any] = [['content-length-range', 0, policy.max_size_bytes]]
        if file_type.startswith(AUDIO_TYPE_PREFIX):
            conditions.append(['starts-with', '$Content-Type', AUDIO_TYPE_PREFIX])
        else:
            conditions.append({'Content-Type': file_type})
        return conditions

    def issue(self, request: UploadRequest, policy: UploadPolicy) -> UploadCredential:
        """
        Validate an upload request and mint a presigned POST for it.

        Args:
            request: Declared file name, type and size
            policy: Authoritative server-side policy

        Returns:
            UploadCredential (url, ordered form fields, object key)

        Raises:
            ValidationError: If the policy rejects the declared type/size
            UpstreamError: If storage is unavailable or signing fails
        """
        result = validate_upload(request, policy)
        if not result.ok:
            upload_rejections_total.labels(reason=result.reason.value).inc()
            log_upload_rejected(
                logger,
                reason=result.reason.value,
                content_type=request.file_type,
                size_bytes=request.file_size,
            )
            raise ValidationError(result.message, reason=result.reason.value)

        object_key = self.generate_object_key(request.file_name)
        start_time = time.time()

        try:
            presigned = self.s3.generate_presigned_post(
                object_key=object_key,
                fields={'Content-Type': request.file_type},
                conditions=self.build_conditions(request.file_type, policy),
                expiration=UPLOAD_CREDENTIAL_EXPIRATION,
            )
        except UpstreamError:
            storage_failures_total.labels(operation="presign_post").inc()
            raise

        upload_credentials_issued_total.labels(content_family=content_family(request.file_type)).inc()
        log_credential_issued(
            logger,
            object_key=object_key,
            content_type=request.file_type,
            size_bytes=request.file_size,
            duration_ms=(time.time() - start_time) * 1000,
        )

        return UploadCredential(
            url=presigned['url'],
            fields={name: str(value) for name, value in presigned['fields'].items()},
            key=object_key,
        )
