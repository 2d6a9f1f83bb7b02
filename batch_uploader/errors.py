"""Exception types raised by batch_uploader."""
from typing import Optional


class UploadError(RuntimeError):
    """Base class for upload failures."""


class TransportError(UploadError):
    """Raised when the upload endpoint fails or reports non-success."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
