"""Orchestrator data models."""
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from ..models import ErrorKind, UploadedFile, UploadIssue


class RunOutcome(Enum):
    """Terminal state of one orchestration run."""
    SUCCESS = "success"
    PARTIAL = "partial"  # Uploads ok but some files were rejected
    FAILED = "failed"
    EMPTY = "empty"
    CANCELLED = "cancelled"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class RunResult:
    """Result of one call to the orchestrator."""
    outcome: RunOutcome
    files: Tuple[UploadedFile, ...] = ()
    issues: Tuple[UploadIssue, ...] = ()
    batches_total: int = 0
    batches_completed: int = 0

    @property
    def success(self) -> bool:
        return self.outcome in (RunOutcome.SUCCESS, RunOutcome.PARTIAL)

    @property
    def messages(self) -> List[str]:
        return [issue.message for issue in self.issues]

    def issues_of(self, kind: ErrorKind) -> List[UploadIssue]:
        return [issue for issue in self.issues if issue.kind == kind]
