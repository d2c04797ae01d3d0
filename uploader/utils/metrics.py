"""
Prometheus metrics definitions for the upload API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Write path
upload_credentials_issued_total = Counter(
    'upload_credentials_issued_total',
    'Total presigned POST credentials issued',
    ['content_family']  # major MIME type, or other
)

upload_rejections_total = Counter(
    'upload_rejections_total',
    'Total upload requests rejected by policy',
    ['reason']
)

# Read path
downloads_total = Counter(
    'downloads_total',
    'Total object downloads served in-band',
    ['status']
)

download_bytes_total = Counter(
    'download_bytes_total',
    'Total bytes returned by the download endpoint'
)

# Storage backend
storage_failures_total = Counter(
    'storage_failures_total',
    'Total storage backend failures',
    ['operation']
)


KNOWN_CONTENT_FAMILIES = frozenset({'audio', 'video', 'image', 'text', 'application'})


def content_family(content_type: str) -> str:
    """Major MIME type, used as a low-cardinality label. Unrecognized families collapse to "other"."""
    if not content_type:
        return 'unknown'
    family = content_type.split('/', 1)[0].strip().lower()
    return family if family in KNOWN_CONTENT_FAMILIES else 'other'
