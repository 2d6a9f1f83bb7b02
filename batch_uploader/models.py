"""
Models for batch_uploader.

Immutable dataclasses shared by the validator, the transport and the
orchestrator.
"""
import mimetypes
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union


MB = 1024 * 1024

DEFAULT_API_URL = "http://localhost:5000/api/v1"
DEFAULT_TIMEOUT = 10.0
DEFAULT_BATCH_SIZE = 5
DEFAULT_MAX_FILE_SIZE = 10 * MB

DEFAULT_ALLOWED_TYPES = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "application/zip",
    "application/x-zip-compressed",
)

# mimetypes misses some of these on minimal systems
_FALLBACK_MIMES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".txt": "text/plain",
    ".zip": "application/zip",
    ".webp": "image/webp",
}


class FileCategory(Enum):
    """Category tag sent with every upload."""
    DOCUMENT = "DOCUMENT"
    PHOTO = "PHOTO"
    PLAN = "PLAN"
    SPEC = "SPEC"
    PERMIT = "PERMIT"
    CONTRACT = "CONTRACT"
    INVOICE = "INVOICE"
    OTHER = "OTHER"


class ErrorKind(Enum):
    """Where an error string came from."""
    VALIDATION = "validation"
    CEILING = "ceiling"
    TRANSPORT = "transport"


def guess_media_type(filename: str) -> str:
    """Guess a media type from the file extension."""
    mimetype, _ = mimetypes.guess_type(filename)
    if mimetype:
        return mimetype
    return _FALLBACK_MIMES.get(Path(filename).suffix.lower(), "application/octet-stream")


@dataclass(frozen=True)
class UploadCandidate:
    """A user-selected file awaiting validation and upload."""
    filename: str
    media_type: str
    data: bytes = field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "UploadCandidate":
        path = Path(path)
        return cls(
            filename=path.name,
            media_type=media_type or guess_media_type(path.name),
            data=path.read_bytes(),
        )


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of screening one candidate."""
    candidate: UploadCandidate
    accepted: bool
    reason: Optional[str] = None

    @property
    def rejected(self) -> bool:
        return not self.accepted

    @classmethod
    def accept(cls, candidate: UploadCandidate):
        return cls(candidate=candidate, accepted=True)

    @classmethod
    def reject(cls, candidate: UploadCandidate, reason: str):
        return cls(candidate=candidate, accepted=False, reason=reason or "Invalid file")


@dataclass(frozen=True)
class UploadMetadata:
    """Metadata attached to every transport call of a run."""
    category: FileCategory
    project_id: Optional[str] = None
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()


SuccessHook = Callable[[list], Union[None, Awaitable[None]]]
ErrorHook = Callable[[str], Union[None, Awaitable[None]]]
ProgressHook = Callable[[int], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class UploadOptions:
    """Immutable configuration for the runs of one orchestrator."""
    category: FileCategory
    project_id: Optional[str] = None
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    max_files: Optional[int] = None  # None or 0: no ceiling
    on_success: Optional[SuccessHook] = field(default=None, compare=False)
    on_error: Optional[ErrorHook] = field(default=None, compare=False)
    on_progress: Optional[ProgressHook] = field(default=None, compare=False)

    def __post_init__(self):
        if self.max_files is not None and self.max_files < 0:
            raise ValueError(f"max_files must be >= 0, got {self.max_files}")
        if not isinstance(self.category, FileCategory):
            object.__setattr__(self, "category", FileCategory(str(self.category).upper()))
        object.__setattr__(self, "tags", tuple(self.tags or ()))

    def metadata(self) -> UploadMetadata:
        return UploadMetadata(
            category=self.category,
            project_id=self.project_id,
            description=self.description,
            tags=self.tags,
        )


@dataclass(frozen=True)
class UploadedFile:
    """Descriptor of a file stored by the server."""
    id: str
    original_filename: str
    mime_type: Optional[str] = None
    file_size: int = 0
    category: Optional[str] = None
    project_id: Optional[str] = None
    storage_path: Optional[str] = None
    uploaded_by: Optional[str] = None
    uploaded_at: Optional[str] = None
    version_number: int = 1
    tags: Tuple[str, ...] = ()
    description: Optional[str] = None
    checksum: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UploadedFile":
        if not isinstance(payload, Mapping) or "id" not in payload:
            raise ValueError(f"Not an uploaded file descriptor: {payload!r}")
        return cls(
            id=str(payload["id"]),
            original_filename=payload.get("original_filename") or "",
            mime_type=payload.get("mime_type"),
            file_size=int(payload.get("file_size") or 0),
            category=payload.get("category"),
            project_id=payload.get("project_id"),
            storage_path=payload.get("storage_path"),
            uploaded_by=payload.get("uploaded_by"),
            uploaded_at=payload.get("uploaded_at"),
            version_number=int(payload.get("version_number") or 1),
            tags=tuple(payload.get("tags") or ()),
            description=payload.get("description"),
            checksum=payload.get("checksum"),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class UploadIssue:
    """An error string together with its kind."""
    kind: ErrorKind
    message: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for the transport, validator and batcher."""
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    batch_size: int = DEFAULT_BATCH_SIZE
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_types: Tuple[str, ...] = DEFAULT_ALLOWED_TYPES

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be > 0, got {self.max_file_size}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "UploadConfig":
        """Build config from BATCH_UPLOAD_* variables, defaults for the rest."""
        env = os.environ if environ is None else environ
        kwargs: Dict[str, Any] = {}
        if env.get("BATCH_UPLOAD_API_URL"):
            kwargs["api_url"] = env["BATCH_UPLOAD_API_URL"]
        if env.get("BATCH_UPLOAD_TIMEOUT"):
            kwargs["timeout"] = float(env["BATCH_UPLOAD_TIMEOUT"])
        if env.get("BATCH_UPLOAD_BATCH_SIZE"):
            kwargs["batch_size"] = int(env["BATCH_UPLOAD_BATCH_SIZE"])
        if env.get("BATCH_UPLOAD_MAX_FILE_SIZE"):
            kwargs["max_file_size"] = int(env["BATCH_UPLOAD_MAX_FILE_SIZE"])
        return cls(**kwargs)
