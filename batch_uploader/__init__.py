"""
batch_uploader - Validate, batch and upload user-selected files.

Follows SOLID principles:
- Single Responsibility: validator, batcher and dispatcher are separate
- Dependency Injection: transport and validator injected into orchestrator
- Interface Segregation: small protocols in ``protocols``

Usage:
    from batch_uploader import BatchUploadOrchestrator, UploadOptions, FileCategory

    options = UploadOptions(
        category=FileCategory.PHOTO,
        project_id="project-1",
        tags=("site", "day-3"),
        max_files=20,
        on_progress=lambda percent: print(f"{percent}%"),
    )

    async with BatchUploadOrchestrator(options, token=access_token) as uploader:
        uploader.subscribe(render)
        result = await uploader.upload_files(candidates)

    if not result.success:
        print(uploader.state.errors)
"""
from .errors import TransportError, UploadError
from .models import (
    ErrorKind,
    FileCategory,
    UploadCandidate,
    UploadConfig,
    UploadedFile,
    UploadIssue,
    UploadMetadata,
    UploadOptions,
    ValidationOutcome,
)
from .orchestrator import BatchUploadOrchestrator, RunOutcome, RunResult, UploadState, make_batches
from .services import FileValidator, HTTPUploadTransport

__version__ = "0.1.0"
__all__ = [
    # Main
    "BatchUploadOrchestrator",
    "RunOutcome",
    "RunResult",
    "UploadState",
    "make_batches",
    # Models
    "ErrorKind",
    "FileCategory",
    "UploadCandidate",
    "UploadConfig",
    "UploadedFile",
    "UploadIssue",
    "UploadMetadata",
    "UploadOptions",
    "ValidationOutcome",
    # Errors
    "TransportError",
    "UploadError",
    # Services
    "FileValidator",
    "HTTPUploadTransport",
]
