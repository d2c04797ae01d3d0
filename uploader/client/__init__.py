"""
Client library: validate, request a presigned POST, upload straight to storage.
"""
from uploader.client.api_client import DownloadedObject, UploadApiClient
from uploader.client.config import UploaderConfig
from uploader.client.files import SelectedFile
from uploader.client.orchestrator import OrchestratorState, TransferOutcome, UploadOrchestrator
from uploader.client.transfer import TransferEngine

__all__ = [
    "DownloadedObject",
    "UploadApiClient",
    "UploaderConfig",
    "SelectedFile",
    "OrchestratorState",
    "TransferOutcome",
    "UploadOrchestrator",
    "TransferEngine",
]
