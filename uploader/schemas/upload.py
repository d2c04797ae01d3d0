"""
Pydantic schemas for the upload and download endpoints.

Wire names are camelCase (what browser and mobile clients send);
attributes are snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class UploadRequest(BaseModel):
    """Declared properties of a file the client wants to upload."""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", min_length=1, description="Original file name")
    file_type: str = Field(..., alias="fileType", min_length=1, description="MIME type, e.g. 'audio/mpeg'")
    # Zero is treated like a missing size
    file_size: int = Field(..., alias="fileSize", gt=0, description="File size in bytes")


class UploadCredential(BaseModel):
    """Presigned POST: target URL plus the form fields to submit with the file."""
    url: str = Field(..., description="Storage URL to POST the multipart form to")
    fields: Dict[str, str] = Field(..., description="Form fields, in submission order")
    key: str = Field(..., description="Object key the file will be stored under")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://my-bucket.s3.amazonaws.com/",
                "fields": {
                    "Content-Type": "audio/mpeg",
                    "key": "uploads/550e8400-e29b-41d4-a716-446655440000/take-1.mp3",
                    "x-amz-algorithm": "AWS4-HMAC-SHA256",
                    "policy": "eyJleHBpcmF0aW9uIjog...",
                    "x-amz-signature": "c0ffee..."
                },
                "key": "uploads/550e8400-e29b-41d4-a716-446655440000/take-1.mp3"
            }
        }
    )


class ReadCredential(BaseModel):
    """Signed GET URL for a single object."""
    url: str


class DownloadRequest(BaseModel):
    """Request schema for fetching an object through the backend."""
    model_config = ConfigDict(populate_by_name=True)

    s3_key: str = Field(..., alias="s3Key", min_length=1, description="Object key returned at upload time")
    metadata: Any = Field(default_factory=dict, description="Opaque caller metadata, echoed back as sent")


class DownloadResponse(BaseModel):
    """Object bytes returned in-band, base64 encoded."""
    model_config = ConfigDict(populate_by_name=True)

    buffer: str = Field(..., description="Base64-encoded object bytes")
    size: int
    content_type: Optional[str] = Field(None, alias="contentType")
    metadata: Any = Field(default_factory=dict)
