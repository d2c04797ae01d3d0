"""
Client-side upload state machine.

    IDLE --start--> VALIDATING --ok--> REQUESTING_CREDENTIAL --ok--> TRANSFERRING --ok--> COMPLETED
                       |                       |                          |
                       +-----------------------+--------------------------+--fail--> FAILED
    any state --reset()--> IDLE

One upload in flight per orchestrator: start() is a no-op while a
credential request or transfer is running. In-flight I/O is never
cancelled; reset() only detaches the caller from its outcome.
"""
import enum
import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError as SchemaValidationError

from uploader.client.api_client import UploadApiClient
from uploader.client.config import UploaderConfig
from uploader.client.files import SelectedFile
from uploader.client.transfer import ProgressCallback, TransferEngine
from uploader.errors import (
    CredentialError,
    ErrorKind,
    TransferError,
    UploaderError,
    ValidationError,
)
from uploader.schemas.upload import UploadRequest
from uploader.utils.logging import log_transfer_event
from uploader.validation import validate_upload

logger = logging.getLogger(__name__)

CompleteCallback = Callable[[str], None]
ErrorCallback = Callable[[UploaderError], None]


class OrchestratorState(str, enum.Enum):
    """Lifecycle state of an UploadOrchestrator."""
    IDLE = "idle"
    VALIDATING = "validating"
    REQUESTING_CREDENTIAL = "requesting_credential"
    TRANSFERRING = "transferring"
    COMPLETED = "completed"
    FAILED = "failed"


BUSY_STATES = frozenset({OrchestratorState.REQUESTING_CREDENTIAL, OrchestratorState.TRANSFERRING})


@dataclass(frozen=True)
class TransferOutcome:
    """Terminal outcome of one upload attempt: success with a key, or failure."""
    object_key: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, object_key: str) -> "TransferOutcome":
        return cls(object_key=object_key)

    @classmethod
    def failure(cls, error: UploaderError) -> "TransferOutcome":
        return cls(error_kind=error.kind, message=error.message)


class UploadOrchestrator:
    """
    Validate -> request credential -> transfer, with single-flight and reset.

    Outcomes are delivered both push-style (on_complete / on_error
    callbacks) and pull-style (start() returns on success and raises the
    error on failure). Callbacks run inline on the event loop and must
    not block.
    """

    def __init__(
        self,
        config: Optional[UploaderConfig] = None,
        api_client: Optional[UploadApiClient] = None,
        transfer_engine: Optional[TransferEngine] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            config: Client configuration; built from env/defaults if omitted
            api_client: Upload API client (defaults to one built from config)
            transfer_engine: Storage transfer engine (defaults to one built from config)
            on_complete: Called with the object key when an upload completes
            on_error: Called with the error when an upload fails
            on_progress: Called with transfer progress percentages
        """
        self.config = config or UploaderConfig()
        self._policy = self.config.policy()
        self._api = api_client or UploadApiClient(self.config)
        self._transfer = transfer_engine or TransferEngine(timeout=self.config.transfer_timeout)
        self._on_complete = on_complete
        self._on_error = on_error
        self._on_progress = on_progress

        self._state = OrchestratorState.IDLE
        self._outcome: Optional[TransferOutcome] = None
        # Bumped by every start() and reset(); an attempt whose number is
        # no longer current has been reset and must stay silent.
        self._attempt = 0

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def is_uploading(self) -> bool:
        return self._state in BUSY_STATES

    @property
    def outcome(self) -> Optional[TransferOutcome]:
        """Outcome of the last finished attempt (None while idle or in flight)."""
        return self._outcome

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt

    def _validate(self, file: SelectedFile) -> UploadRequest:
        try:
            request = file.to_request()
        except SchemaValidationError as e:
            raise ValidationError(f"Invalid file: a name, a type and a non-empty body are required ({e.error_count()} errors)")

        result = validate_upload(request, self._policy)
        if not result.ok:
            raise ValidationError(result.message, reason=result.reason.value)
        return request

    def _progress_for(self, attempt: int) -> Optional[ProgressCallback]:
        if self._on_progress is None:
            return None

        def report(progress: int) -> None:
            if self._is_current(attempt):
                self._on_progress(progress)

        return report

    def _fail(self, attempt: int, error: UploaderError, started_at: float) -> bool:
        """Record a failure; returns False if the attempt was reset meanwhile."""
        if not self._is_current(attempt):
            return False

        self._state = OrchestratorState.FAILED
        self._outcome = TransferOutcome.failure(error)
        log_transfer_event(
            logger,
            "upload_failed",
            duration_ms=(time.time() - started_at) * 1000,
            error=error.message,
            error_kind=error.kind.value,
        )
        if self._on_error is not None:
            self._on_error(error)
        return True

    async def start(self, file: SelectedFile) -> None:
        """
        Upload a file.

        No-op while a credential request or transfer is already running.

        Args:
            file: File to upload

        Raises:
            ValidationError: Rejected before any network call
            CredentialError: The upload API did not issue a credential
            TransferError: Storage did not accept the upload
        """
        if self.is_uploading:
            logger.debug(f"Upload already in progress ({self._state.value}), ignoring start()")
            return

        self._attempt += 1
        attempt = self._attempt
        started_at = time.time()
        self._outcome = None
        log_transfer_event(logger, "upload_started", size_bytes=file.size, file_name=file.name)

        self._state = OrchestratorState.VALIDATING
        try:
            request = self._validate(file)
        except ValidationError as e:
            self._fail(attempt, e, started_at)
            raise

        self._state = OrchestratorState.REQUESTING_CREDENTIAL
        try:
            credential = await self._api.request_credential(request)
        except Exception as e:
            error = e if isinstance(e, CredentialError) else CredentialError(f"Failed to get upload URL: {e}")
            if self._fail(attempt, error, started_at):
                if error is e:
                    raise
                raise error from e
            return

        if not self._is_current(attempt):
            return

        self._state = OrchestratorState.TRANSFERRING
        try:
            await self._transfer.transfer(
                file.content,
                credential,
                on_progress=self._progress_for(attempt),
                file_name=file.name,
                content_type=file.content_type,
            )
        except Exception as e:
            error = e if isinstance(e, TransferError) else TransferError(f"Upload failed: {e}")
            if self._fail(attempt, error, started_at):
                if error is e:
                    raise
                raise error from e
            return

        if not self._is_current(attempt):
            return

        self._state = OrchestratorState.COMPLETED
        self._outcome = TransferOutcome.success(credential.key)
        log_transfer_event(
            logger,
            "upload_completed",
            object_key=credential.key,
            size_bytes=file.size,
            duration_ms=(time.time() - started_at) * 1000,
        )
        if self._on_complete is not None:
            self._on_complete(credential.key)

    def reset(self) -> None:
        """
        Return to IDLE from any state. Idempotent.

        Never fires on_complete or on_error: an attempt still in flight
        runs to completion, but its outcome is discarded.
        """
        if self._state is not OrchestratorState.IDLE:
            log_transfer_event(logger, "upload_reset", previous_state=self._state.value)
        self._attempt += 1
        self._state = OrchestratorState.IDLE
        self._outcome = None
