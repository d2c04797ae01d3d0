"""
AWS S3 / S3-compatible storage client.

Uses boto3 to mint short-lived credentials for a private bucket:
- presigned POST policies for direct browser/mobile uploads
- presigned GET URLs for reads

Signing is a local computation (no request is made to S3), but boto3
can still fail on bad credentials/configuration; those failures are
raised as UpstreamError so callers never see botocore types.
"""
import logging
from typing import Any, Dict, List, Optional
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from uploader.config import Settings, settings as default_settings
from uploader.errors import UpstreamError
from uploader.utils.logging import log_storage_failure

logger = logging.getLogger(__name__)


class S3Client:
    """
    Thin boto3 wrapper bound to a single bucket.

    Construction never raises: if storage settings are missing the client
    stays unconfigured and every signing call raises UpstreamError.
    """

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize the boto3 client from settings.

        Args:
            config: Settings to read from (defaults to the global settings)
        """
        self._settings = config or default_settings
        self._client = None
        self._configured = False

        if not all([
            self._settings.aws_region,
            self._settings.aws_access_key_id,
            self._settings.aws_secret_access_key,
            self._settings.aws_s3_bucket,
        ]):
            logger.warning(
                "S3 storage not configured. "
                "Set AWS_REGION, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY and AWS_S3_BUCKET."
            )
            return

        client_config = Config(signature_version='s3v4')
        if self._settings.aws_s3_endpoint:
            # S3-compatible stores (MinIO, R2) generally need path-style URLs
            client_config = Config(signature_version='s3v4', s3={'addressing_style': 'path'})

        try:
            self._client = boto3.client(
                's3',
                endpoint_url=self._settings.aws_s3_endpoint,
                region_name=self._settings.aws_region,
                aws_access_key_id=self._settings.aws_access_key_id,
                aws_secret_access_key=self._settings.aws_secret_access_key,
                config=client_config,
            )
            self._configured = True
            logger.info(f"S3 client initialized for bucket: {self.bucket}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize S3 client: {e}")

    @property
    def is_configured(self) -> bool:
        """Check if the S3 client is properly configured."""
        return self._configured and self._client is not None

    @property
    def bucket(self) -> Optional[str]:
        """Get configured bucket name."""
        return self._settings.aws_s3_bucket

    def _require_client(self, operation: str):
        if not self.is_configured:
            log_storage_failure(logger, operation=operation, error="storage not configured")
            raise UpstreamError("Storage service not configured")
        return self._client

    def generate_presigned_post(
        self,
        object_key: str,
        fields: Dict[str, str],
        conditions: List[Any],
        expiration: int,
    ) -> Dict[str, Any]:
        """
        Generate a presigned POST policy for a direct upload.

        Args:
            object_key: The S3 object key to write
            fields: Pre-filled form fields (e.g. Content-Type)
            conditions: Policy conditions S3 enforces at submission time
            expiration: Policy lifetime in seconds

        Returns:
            Dict with "url" and "fields" (fields include key, policy and signature)

        Raises:
            UpstreamError: If storage is not configured or signing fails
        """
        client = self._require_client("presign_post")

        try:
            presigned = client.generate_presigned_post(
                Bucket=self.bucket,
                Key=object_key,
                Fields=fields,
                Conditions=conditions,
                ExpiresIn=expiration,
            )
        except (ClientError, BotoCoreError) as e:
            log_storage_failure(
                logger,
                operation="presign_post",
                error=str(e),
                object_key=object_key,
                include_traceback=True,
            )
            raise UpstreamError(f"Failed to generate upload credential: {e}") from e

        logger.debug(f"Generated presigned POST for {object_key}")
        return presigned

    def generate_presigned_read_url(self, object_key: str, expiration: int) -> str:
        """
        Generate a presigned GET URL for reading an object.

        The bucket stays private; the URL grants read access to this one
        object until it expires.

        Args:
            object_key: The S3 object key
            expiration: URL lifetime in seconds

        Returns:
            Presigned URL string

        Raises:
            UpstreamError: If storage is not configured or signing fails
        """
        client = self._require_client("presign_get")

        try:
            url = client.generate_presigned_url(
                ClientMethod='get_object',
                Params={
                    'Bucket': self.bucket,
                    'Key': object_key,
                },
                ExpiresIn=expiration,
            )
        except (ClientError, BotoCoreError) as e:
            log_storage_failure(
                logger,
                operation="presign_get",
                error=str(e),
                object_key=object_key,
                include_traceback=True,
            )
            raise UpstreamError(f"Failed to generate read credential: {e}") from e

        logger.debug(f"Generated presigned read URL for {object_key} (expires in {expiration}s)")
        return url


# Singleton instance
_s3_client: Optional[S3Client] = None


def get_s3_client() -> S3Client:
    """
    Get the singleton S3 client instance.

    Returns:
        S3Client instance (may or may not be configured)
    """
    global _s3_client
    if _s3_client is None:
        _s3_client = S3Client()
    return _s3_client
