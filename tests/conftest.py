"""
Test configuration and fixtures.

No network: presigning uses a real boto3 client with dummy credentials
(signing is local), and the bucket is an in-memory fake served through
httpx.MockTransport.
"""
import os

# Set test environment before any imports
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_S3_BUCKET"] = "test-bucket"
os.environ["ENVIRONMENT"] = "test"

from typing import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI

from uploader.config import Settings
from uploader.storage import CredentialIssuer, CredentialReader, S3Client
from uploader.validation import UploadPolicy

from storage_fake import FakeStorage, RoutingTransport

API_BASE_URL = "http://test"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        aws_region="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        aws_s3_bucket="test-bucket",
    )


@pytest.fixture
def s3_client(test_settings: Settings) -> S3Client:
    return S3Client(test_settings)


@pytest.fixture
def audio_policy() -> UploadPolicy:
    return UploadPolicy.create(["audio/mpeg", "audio/wav"], 5 * 1024 * 1024)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
async def storage_http(storage: FakeStorage) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=storage.transport) as client:
        yield client


@pytest.fixture
def app(s3_client: S3Client, audio_policy: UploadPolicy, storage_http: httpx.AsyncClient) -> FastAPI:
    """FastAPI app wired to the dummy-credential S3 client and the fake bucket."""
    from uploader.main import create_app
    from uploader.api.dependencies import (
        get_credential_issuer,
        get_credential_reader,
        get_upload_policy,
    )

    application = create_app()
    application.dependency_overrides[get_upload_policy] = lambda: audio_policy
    application.dependency_overrides[get_credential_issuer] = lambda: CredentialIssuer(s3_client)
    application.dependency_overrides[get_credential_reader] = lambda: CredentialReader(s3_client, http_client=storage_http)
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=API_BASE_URL) as ac:
        yield ac


@pytest.fixture
async def routed_http(app: FastAPI, storage: FakeStorage) -> AsyncGenerator[httpx.AsyncClient, None]:
    """One httpx client reaching both the API (host "test") and the fake bucket."""
    async with httpx.AsyncClient(transport=RoutingTransport(app, storage)) as ac:
        yield ac
