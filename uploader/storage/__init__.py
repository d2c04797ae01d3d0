"""
Storage module for S3-compatible object storage.

This module brokers direct uploads from clients using presigned POSTs.
The backend never receives upload bytes - files go directly to the bucket.
"""
from uploader.storage.s3_client import get_s3_client, S3Client
from uploader.storage.presign import CredentialIssuer
from uploader.storage.reader import CredentialReader, StoredObject

__all__ = ["get_s3_client", "S3Client", "CredentialIssuer", "CredentialReader", "StoredObject"]
