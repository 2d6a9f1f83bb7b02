"""Batching utilities."""
from typing import List, Sequence, Tuple, TypeVar

from ..models import DEFAULT_BATCH_SIZE

T = TypeVar("T")


def make_batches(items: Sequence[T], capacity: int = DEFAULT_BATCH_SIZE) -> List[Tuple[T, ...]]:
    """
    Partition items into consecutive batches of at most ``capacity``.

    Order is preserved within and across batches; every batch is non-empty
    and concatenating them gives back ``items``.

    Args:
        items: Accepted candidates, in submission order
        capacity: Maximum batch length

    Returns:
        List of batches (empty list for empty input)
    """
    if capacity < 1:
        raise ValueError(f"Batch capacity must be >= 1, got {capacity}")
    return [tuple(items[i:i + capacity]) for i in range(0, len(items), capacity)]


def batch_progress(completed: int, total: int) -> int:
    """Integer percentage of completed batches."""
    if total <= 0:
        return 0
    return completed * 100 // total
