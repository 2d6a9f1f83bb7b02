"""
Validator Service - Single Responsibility: screen files before upload.

Pure checks over a single candidate; no I/O.
"""
from typing import Iterable, Optional

from ..models import (
    DEFAULT_ALLOWED_TYPES,
    DEFAULT_MAX_FILE_SIZE,
    UploadCandidate,
    UploadConfig,
    ValidationOutcome,
)


_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size: int) -> str:
    """Human readable size, base 1024, at most two decimals."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    idx = 0
    while value >= 1024 and idx < len(_SIZE_UNITS) - 1:
        value /= 1024
        idx += 1
    value = round(value, 2)
    # drop trailing zeros: 10.0 -> 10, 1.50 -> 1.5
    rendered = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {_SIZE_UNITS[idx]}"


class FileValidator:
    """
    Size and media-type validator.

    Implements IFileValidator protocol.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_FILE_SIZE,
        allowed_types: Optional[Iterable[str]] = None,
    ):
        """
        Initialize validator.

        Args:
            max_size: Largest accepted payload in bytes
            allowed_types: Accepted media types (default: documents, images, archives)
        """
        self._max_size = max_size
        self._allowed_types = frozenset(allowed_types or DEFAULT_ALLOWED_TYPES)

    @classmethod
    def from_config(cls, config: UploadConfig) -> "FileValidator":
        return cls(max_size=config.max_file_size, allowed_types=config.allowed_types)

    @property
    def max_size(self) -> int:
        return self._max_size

    def validate(self, candidate: UploadCandidate) -> ValidationOutcome:
        if candidate.size > self._max_size:
            return ValidationOutcome.reject(
                candidate,
                f"File size exceeds maximum allowed size of {format_file_size(self._max_size)}",
            )

        if candidate.media_type not in self._allowed_types:
            return ValidationOutcome.reject(
                candidate,
                f"File type {candidate.media_type} is not allowed",
            )

        return ValidationOutcome.accept(candidate)
