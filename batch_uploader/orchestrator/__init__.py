"""Orchestrator package - coordinates batch upload runs."""
from .batching import make_batches
from .core import BatchUploadOrchestrator
from .models import RunOutcome, RunResult
from .state import UploadState

__all__ = ["BatchUploadOrchestrator", "RunOutcome", "RunResult", "UploadState", "make_batches"]
