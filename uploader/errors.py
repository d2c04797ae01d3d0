"""
Error taxonomy shared by the server and the client library.

Every error carries a machine-readable kind so callers can branch on
it without isinstance checks (e.g. to decide whether to offer a retry).
"""
import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Kind of failure surfaced to callers."""
    VALIDATION = "validation"            # type/size rejected, user-correctable
    CREDENTIAL = "credential"            # write/read credential request failed
    TRANSFER = "transfer"                # binary POST to storage failed
    UPSTREAM = "upstream"                # storage backend sign/fetch failure
    INVALID_ARGUMENT = "invalid_argument"


class UploaderError(Exception):
    """Base class for all uploader errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    @property
    def retryable(self) -> bool:
        return self.kind in (ErrorKind.CREDENTIAL, ErrorKind.TRANSFER, ErrorKind.UPSTREAM)


class ValidationError(UploaderError):
    """Declared file type or size is not acceptable under the policy."""
    kind = ErrorKind.VALIDATION


class CredentialError(UploaderError):
    """The upload endpoint refused or failed to issue a credential."""
    kind = ErrorKind.CREDENTIAL


class TransferError(UploaderError):
    """The storage backend did not accept the multipart upload."""
    kind = ErrorKind.TRANSFER

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(UploaderError):
    """The storage backend failed to sign a credential or serve an object."""
    kind = ErrorKind.UPSTREAM


class InvalidArgument(UploaderError):
    """A required identifier was empty or missing."""
    kind = ErrorKind.INVALID_ARGUMENT
