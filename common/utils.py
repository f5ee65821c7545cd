"""
common.utils

Small helpers shared by ingestion and storage.
"""
from typing import Iterator, Tuple


def chunked(start: int, end: int, size: int) -> Iterator[Tuple[int, int]]:
    """
    Split the inclusive height range start..end into (lo, hi) pieces of at most size heights.
    """
    if size < 1:
        raise ValueError("chunk size must be positive")
    lo = start
    while lo <= end:
        hi = min(lo + size - 1, end)
        yield lo, hi
        lo = hi + 1
