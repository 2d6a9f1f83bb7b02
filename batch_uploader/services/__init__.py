"""Services for batch_uploader module."""
from .api_client import HTTPUploadTransport
from .validator import FileValidator, format_file_size

__all__ = [
    "HTTPUploadTransport",
    "FileValidator",
    "format_file_size",
]
