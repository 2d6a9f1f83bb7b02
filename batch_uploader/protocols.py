"""
Protocols (Interfaces) for Dependency Inversion.

The orchestrator only talks to these; concrete services live in
``batch_uploader.services``.
"""
from typing import List, Protocol, Sequence, runtime_checkable

from .models import UploadCandidate, UploadedFile, UploadMetadata, ValidationOutcome


@runtime_checkable
class IFileValidator(Protocol):
    """Interface for per-file acceptance rules."""

    def validate(self, candidate: UploadCandidate) -> ValidationOutcome:
        """Accept or reject one candidate. Must not perform I/O."""
        ...


@runtime_checkable
class IUploadTransport(Protocol):
    """Interface for the remote upload endpoints."""

    async def upload_file(
        self,
        candidate: UploadCandidate,
        metadata: UploadMetadata,
    ) -> UploadedFile:
        """Upload a single file."""
        ...

    async def upload_files(
        self,
        candidates: Sequence[UploadCandidate],
        metadata: UploadMetadata,
    ) -> List[UploadedFile]:
        """Upload several files in one request, results in input order."""
        ...
