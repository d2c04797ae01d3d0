"""
Tests for the client library building blocks: config, API client, transfer engine.
"""
import base64
import json

import httpx
import pytest

from uploader.client import SelectedFile, TransferEngine, UploadApiClient, UploaderConfig
from uploader.client.transfer import progress_percent
from uploader.errors import CredentialError, TransferError, UpstreamError
from uploader.schemas.upload import UploadCredential, UploadRequest

from storage_fake import parse_multipart

CREDENTIAL = UploadCredential(
    url="https://test-bucket.s3.amazonaws.com/",
    fields={
        "Content-Type": "audio/mpeg",
        "key": "uploads/0b7c4a36-3f4e-4d8a-9a51-7d0f4a0e1c11/take-1.mp3",
        "x-amz-algorithm": "AWS4-HMAC-SHA256",
        "policy": "eyJjb25kaXRpb25zIjogW119",
        "x-amz-signature": "abc123",
    },
    key="uploads/0b7c4a36-3f4e-4d8a-9a51-7d0f4a0e1c11/take-1.mp3",
)


def api_client(handler, **config) -> UploadApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UploadApiClient(UploaderConfig(api_base_url="http://api.local", **config), http_client=http)


class TestUploaderConfig:
    """Tests for configuration precedence."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("UPLOADER_API_BASE_URL", raising=False)
        config = UploaderConfig()
        assert config.upload_url == "/api/upload"
        assert config.download_url == "/api/download"
        assert config.max_file_size == 5 * 1024 * 1024

    def test_environment_overrides_default(self, monkeypatch):
        monkeypatch.setenv("UPLOADER_API_BASE_URL", "https://env.example")
        assert UploaderConfig().upload_url == "https://env.example/api/upload"

    def test_explicit_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("UPLOADER_API_BASE_URL", "https://env.example")
        config = UploaderConfig(api_base_url="https://explicit.example/", upload_endpoint="/v2/upload")
        assert config.upload_url == "https://explicit.example/v2/upload"

    def test_config_is_frozen(self):
        config = UploaderConfig()
        with pytest.raises(Exception):
            config.max_file_size = 1

    def test_policy_from_wildcard(self):
        policy = UploaderConfig(allowed_file_types="*", max_file_size=10).policy()
        assert policy.accepts_any_type
        assert policy.max_size_bytes == 10


class TestSelectedFile:
    """Tests for local file handling."""

    def test_from_path_guesses_type(self, tmp_path):
        path = tmp_path / "take-1.mp3"
        path.write_bytes(b"ID3")
        selected = SelectedFile.from_path(path)

        assert selected.name == "take-1.mp3"
        assert selected.content_type == "audio/mpeg"
        assert selected.size == 3

    def test_unknown_extension_falls_back(self, tmp_path):
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"x")
        assert SelectedFile.from_path(path).content_type == "application/octet-stream"


class TestUploadApiClient:
    """Tests for credential requests and downloads."""

    @pytest.mark.asyncio
    async def test_request_credential(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=CREDENTIAL.model_dump())

        credential = await api_client(handler).request_credential(
            UploadRequest(file_name="take-1.mp3", file_type="audio/mpeg", file_size=3)
        )

        assert credential == CREDENTIAL
        assert seen["url"] == "http://api.local/api/upload"
        assert seen["body"] == {"fileName": "take-1.mp3", "fileType": "audio/mpeg", "fileSize": 3}

    @pytest.mark.asyncio
    async def test_error_detail_is_surfaced(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"detail": "File too large (max 5MB)"})

        with pytest.raises(CredentialError) as exc_info:
            await api_client(handler).request_credential(
                UploadRequest(file_name="a.mp3", file_type="audio/mpeg", file_size=3)
            )
        assert exc_info.value.message == "File too large (max 5MB)"

    @pytest.mark.asyncio
    async def test_plain_text_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="Internal Server Error")

        with pytest.raises(CredentialError) as exc_info:
            await api_client(handler).request_credential(
                UploadRequest(file_name="a.mp3", file_type="audio/mpeg", file_size=3)
            )
        assert exc_info.value.message == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused")

        with pytest.raises(CredentialError):
            await api_client(handler).request_credential(
                UploadRequest(file_name="a.mp3", file_type="audio/mpeg", file_size=3)
            )

    @pytest.mark.asyncio
    async def test_download_decodes_buffer(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"s3Key": "uploads/x/a.mp3", "metadata": {"k": "v"}}
            return httpx.Response(200, json={
                "buffer": base64.b64encode(b"\x00bytes").decode(),
                "size": 6,
                "contentType": "audio/mpeg",
                "metadata": {"k": "v"},
            })

        downloaded = await api_client(handler).download("uploads/x/a.mp3", metadata={"k": "v"})

        assert downloaded.content == b"\x00bytes"
        assert downloaded.content_type == "audio/mpeg"
        assert downloaded.metadata == {"k": "v"}

    @pytest.mark.asyncio
    async def test_download_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "File not found"})

        with pytest.raises(UpstreamError):
            await api_client(handler).download("uploads/x/a.mp3")


class TestTransferEngine:
    """Tests for the multipart transfer to storage."""

    def test_progress_percent(self):
        assert progress_percent(0, 200) == 0
        assert progress_percent(1, 200) == 0
        assert progress_percent(199, 200) == 100
        assert progress_percent(200, 200) == 100
        assert progress_percent(0, 0) == 100

    @pytest.mark.asyncio
    async def test_fields_in_order_and_file_last(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["parts"] = parse_multipart(request.headers["content-type"], request.content)
            captured["length"] = request.headers.get("content-length")
            return httpx.Response(204)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            await TransferEngine(http_client=http).transfer(
                b"audio-bytes", CREDENTIAL, file_name="take-1.mp3", content_type="audio/mpeg"
            )

        names = [name for name, _, _ in captured["parts"]]
        assert names == list(CREDENTIAL.fields) + ["file"]
        assert captured["parts"][-1][1] == b"audio-bytes"
        assert captured["parts"][-1][2] == "audio/mpeg"
        assert captured["length"] is not None

    @pytest.mark.asyncio
    async def test_progress_is_bounded_and_non_decreasing(self):
        progress = []

        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(204))) as http:
            engine = TransferEngine(http_client=http, chunk_size=1024)
            await engine.transfer(bytes(50_000), CREDENTIAL, on_progress=progress.append)

        assert progress
        assert all(0 <= value <= 100 for value in progress)
        assert progress == sorted(progress)
        assert len(progress) == len(set(progress))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 201, 400, 403, 500])
    async def test_non_204_is_transfer_error(self, status_code):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(status_code))) as http:
            with pytest.raises(TransferError) as exc_info:
                await TransferEngine(http_client=http).transfer(b"x", CREDENTIAL)

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_transport_failure_is_transfer_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection reset")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            with pytest.raises(TransferError):
                await TransferEngine(http_client=http).transfer(b"x", CREDENTIAL)
