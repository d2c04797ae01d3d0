"""
Local file representation for the client library.
"""
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from uploader.schemas.upload import UploadRequest

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class SelectedFile:
    """A file chosen for upload: name, declared MIME type and bytes."""
    name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "SelectedFile":
        """
        Read a file from disk.

        Args:
            path: File to read
            content_type: MIME type; guessed from the extension if omitted
        """
        path = Path(path)
        if content_type is None:
            content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            content=path.read_bytes(),
        )

    def to_request(self) -> UploadRequest:
        return UploadRequest(file_name=self.name, file_type=self.content_type, file_size=self.size)
