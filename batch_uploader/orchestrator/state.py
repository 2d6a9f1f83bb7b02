"""Orchestration state exposed to renderers."""
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..models import UploadedFile


@dataclass(frozen=True)
class UploadState:
    """
    Snapshot of the orchestrator state.

    The orchestrator replaces the whole value on every change; readers only
    ever see complete snapshots.
    """
    is_uploading: bool = False
    progress: int = 0
    uploaded_files: Tuple[UploadedFile, ...] = ()
    errors: Tuple[str, ...] = ()
    is_drag_over: bool = False

    @classmethod
    def idle(cls) -> "UploadState":
        return cls()

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_uploading": self.is_uploading,
            "progress": self.progress,
            "uploaded_files": [f.raw or {"id": f.id, "original_filename": f.original_filename}
                               for f in self.uploaded_files],
            "errors": list(self.errors),
            "is_drag_over": self.is_drag_over,
        }
