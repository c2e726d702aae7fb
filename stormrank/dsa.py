"""
Sorting and grouping utilities
==============================

Small, explicit primitives used by the aggregator:
- Merge Sort, stable in BOTH directions (equal keys keep their input
  order even when sorting descending)
- Grouped sums that remember the order in which keys were first seen
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")
K = TypeVar("K")

def merge_sort(arr: List[T], key: Callable[[T], object] = lambda x: x, reverse: bool = False) -> List[T]:
    """Stable merge sort."""
    if len(arr) <= 1:
        return arr[:]
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, reverse=reverse)
    right = merge_sort(arr[mid:], key=key, reverse=reverse)
    return _merge(left, right, key=key, reverse=reverse)

def _merge(left: List[T], right: List[T], key: Callable[[T], object], reverse: bool) -> List[T]:
    out: List[T] = []
    # i and j are pointers into each sorted list
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # ties take from the left half, which keeps the sort stable
        take_left = (a >= b) if reverse else (a <= b)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out

def grouped_sums(pairs: Iterable[Tuple[K, Optional[float]]]) -> Tuple[Dict[K, float], int]:
    """Sum values per key.

    Keys appear in the returned dict in first-seen order. Pairs whose value
    is None are skipped and counted; the count is returned alongside.
    """
    sums: Dict[K, float] = {}
    skipped = 0
    for k, v in pairs:
        if v is None:
            skipped += 1
            continue
        sums[k] = sums.get(k, 0) + v
    return sums, skipped
