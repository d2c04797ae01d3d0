"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- object_key
- content_type
- size_bytes
- duration_ms

Usage:
    from uploader.utils.logging import configure_logging, log_credential_issued

    configure_logging('uploader-api', 'INFO')
    log_credential_issued(logger, object_key='uploads/<uuid>/a.mp3', content_type='audio/mpeg')
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (uploader-api or uploader-client)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(levelname)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Console handler (container logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    object_key: Optional[str] = None,
    content_type: Optional[str] = None,
    size_bytes: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        object_key: Optional storage object key
        content_type: Optional MIME type
        size_bytes: Optional size in bytes
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if object_key:
        extra["object_key"] = object_key
    if content_type:
        extra["content_type"] = content_type
    if size_bytes is not None:
        extra["size_bytes"] = size_bytes
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Write path

def log_credential_issued(
    logger: logging.Logger,
    object_key: str,
    content_type: str,
    size_bytes: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log issuance of a presigned POST credential.

    Args:
        logger: Logger instance
        object_key: Key the credential writes to (required)
        content_type: Declared MIME type (required)
        size_bytes: Declared file size
        duration_ms: Optional signing duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="credential_issued",
        object_key=object_key,
        content_type=content_type,
        size_bytes=size_bytes,
        duration_ms=duration_ms,
        **kwargs
    )
    logger.info(f"Upload credential issued: {object_key}", extra=extra)


def log_upload_rejected(
    logger: logging.Logger,
    reason: str,
    content_type: Optional[str] = None,
    size_bytes: Optional[int] = None,
    **kwargs
):
    """
    Log a rejected upload request (validation failure).

    Args:
        logger: Logger instance
        reason: Rejection reason (required)
        content_type: Declared MIME type
        size_bytes: Declared file size
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_rejected",
        content_type=content_type,
        size_bytes=size_bytes,
        reason=reason,
        **kwargs
    )
    logger.warning(f"Upload rejected: {reason}", extra=extra)


# Read path

def log_object_fetched(
    logger: logging.Logger,
    object_key: str,
    size_bytes: int,
    content_type: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a successful whole-object fetch."""
    extra = _build_log_extra(
        event="object_fetched",
        object_key=object_key,
        content_type=content_type,
        size_bytes=size_bytes,
        duration_ms=duration_ms,
        **kwargs
    )
    logger.info(f"Object fetched: {object_key} ({size_bytes} bytes)", extra=extra)


# Failures

def log_storage_failure(
    logger: logging.Logger,
    operation: str,
    error: str,
    object_key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log a storage backend failure event.

    Args:
        logger: Logger instance
        operation: Operation name (presign_post, presign_get, fetch) (required)
        error: Error message (required)
        object_key: Optional object key
        duration_ms: Optional duration in milliseconds
        include_traceback: Whether to include stack trace (default: False)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_failure",
        object_key=object_key,
        duration_ms=duration_ms,
        operation=operation,
        error=str(error),
        **kwargs
    )

    message = f"Storage failure: {operation} - {error}"

    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


# Client side

def log_transfer_event(
    logger: logging.Logger,
    event: str,
    object_key: Optional[str] = None,
    size_bytes: Optional[int] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
    **kwargs
):
    """
    Log a client-side upload lifecycle event.

    Args:
        logger: Logger instance
        event: Event name (upload_started, upload_completed, upload_failed, upload_reset)
        object_key: Optional object key
        size_bytes: Optional payload size
        duration_ms: Optional duration in milliseconds
        error: Error message for failures
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event=event,
        object_key=object_key,
        size_bytes=size_bytes,
        duration_ms=duration_ms,
        **kwargs
    )
    if error:
        extra["error"] = str(error)
        logger.warning(f"Upload {event}: {error}", extra=extra)
    else:
        logger.info(f"Upload {event}", extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
