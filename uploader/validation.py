"""
Upload policy and the validator shared by client and server.

The client runs it only to avoid a wasted round trip; the server runs it
again on every credential request and its answer is the one that counts.
"""
import enum
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Union

from uploader.constants import ALLOW_ANY_TYPE, BYTES_PER_MB
from uploader.schemas.upload import UploadRequest


class RejectionReason(str, enum.Enum):
    """Why an upload request was rejected."""
    UNSUPPORTED_TYPE = "unsupported type"
    TOO_LARGE = "too large"


@dataclass(frozen=True)
class UploadPolicy:
    """
    Which files may be uploaded.

    Attributes:
        allowed_types: frozenset of MIME types, or the "*" wildcard
        max_size_bytes: inclusive upper bound on the declared file size
    """
    allowed_types: Union[FrozenSet[str], str]
    max_size_bytes: int

    @classmethod
    def create(cls, allowed_types: Union[Iterable[str], str], max_size_bytes: int) -> "UploadPolicy":
        """Build a policy from a list of types or the wildcard marker."""
        if isinstance(allowed_types, str):
            if allowed_types != ALLOW_ANY_TYPE:
                raise ValueError(f"Expected a list of MIME types or '{ALLOW_ANY_TYPE}', got {allowed_types!r}")
            return cls(allowed_types=ALLOW_ANY_TYPE, max_size_bytes=max_size_bytes)
        return cls(allowed_types=frozenset(allowed_types), max_size_bytes=max_size_bytes)

    @property
    def accepts_any_type(self) -> bool:
        return self.allowed_types == ALLOW_ANY_TYPE

    @property
    def max_size_mb(self) -> int:
        return self.max_size_bytes // BYTES_PER_MB

    def describe_types(self) -> str:
        if self.accepts_any_type:
            return ALLOW_ANY_TYPE
        return ", ".join(sorted(self.allowed_types))


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of `validate_upload`: ok, or rejected with a reason."""
    ok: bool
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    @classmethod
    def accepted(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str) -> "ValidationResult":
        return cls(ok=False, reason=reason, message=message)


def validate_upload(request: UploadRequest, policy: UploadPolicy) -> ValidationResult:
    """
    Check a declared file type/size against a policy.

    Args:
        request: Declared file name, type and size
        policy: Policy to enforce

    Returns:
        ValidationResult; type is checked before size
    """
    if not policy.accepts_any_type and request.file_type not in policy.allowed_types:
        return ValidationResult.rejected(
            RejectionReason.UNSUPPORTED_TYPE,
            f"File type not supported. Allowed types: {policy.describe_types()}"
        )

    if request.file_size > policy.max_size_bytes:
        return ValidationResult.rejected(
            RejectionReason.TOO_LARGE,
            f"File too large (max {policy.max_size_mb}MB)"
        )

    return ValidationResult.accepted()
