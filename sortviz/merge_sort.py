"""
Instrumented merge sort
=======================

Top-down merge sort that records its own execution:

    initial -> split* (pre-order) -> transition -> merge* (post-order)

Every range is absolute, i.e. expressed in the coordinates of the full input
array, so the recursion tree can later be keyed by range alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .steps import (
    InitialStep,
    MergeCompareStep,
    MergeCompleteStep,
    MergeStartStep,
    Number,
    PlaceStep,
    SplitStep,
    TransitionStep,
)
from .trace import AlgorithmKind, Trace, TraceRecorder


@dataclass(frozen=True)
class _Segment:
    """One node of the split tree; `mid` is the last index of the left half."""

    start: int
    end: int
    level: int
    mid: Optional[int] = None
    left: Optional["_Segment"] = None
    right: Optional["_Segment"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def run_merge_sort(values: Iterable[Number]) -> Trace:
    """Sort a copy of `values` and return the full step trace.

    Raises InvalidInputError for an empty (or non-numeric) input before any
    step is recorded.
    """
    rec = TraceRecorder(AlgorithmKind.MERGE_SORT, values)
    a = rec.array
    rec.record(InitialStep, (), f"Initial array: [{_fmt(a)}]")

    root = _split(rec, 0, len(a) - 1, 0)

    rec.record(TransitionStep, (), "Now merging the sorted subarrays back together...")

    _merge_walk(rec, root)
    return rec.finish()


def _split(rec: TraceRecorder, start: int, end: int, level: int) -> _Segment:
    rec.reach(level)
    length = end - start + 1
    if length <= 1:
        return _Segment(start, end, level)

    half = length // 2
    mid = start + half - 1
    rec.record(
        SplitStep,
        (start, end),
        f"Splitting array at position {start} into subarrays of size {half} and {length - half}",
        left_range=(start, mid),
        right_range=(mid + 1, end),
        level=level,
    )
    left = _split(rec, start, mid, level + 1)
    right = _split(rec, mid + 1, end, level + 1)
    return _Segment(start, end, level, mid, left, right)


def _merge_walk(rec: TraceRecorder, seg: _Segment) -> None:
    if seg.is_leaf:
        return
    _merge_walk(rec, seg.left)
    _merge_walk(rec, seg.right)
    _merge(rec, seg)


def _merge(rec: TraceRecorder, seg: _Segment) -> None:
    a = rec.array
    start, mid, end, level = seg.start, seg.mid, seg.end, seg.level
    span = (start, end)
    left = a[start:mid + 1]
    right = a[mid + 1:end + 1]

    rec.record(
        MergeStartStep,
        span,
        f"Starting to merge subarrays: [{_fmt(left)}] and [{_fmt(right)}]",
        left_range=(start, mid),
        right_range=(mid + 1, end),
        range=span,
        level=level,
    )

    # While merging, the range always reads: merged prefix, rest of left,
    # rest of right. Every snapshot stays a permutation of the input.
    merged = []
    i = j = 0
    while i < len(left) and j < len(right):
        k = start + len(merged)
        rec.record(
            MergeCompareStep,
            (k, k + len(left) - i),
            f"Comparing {left[i]} and {right[j]}",
            comparing=(left[i], right[j]),
            range=span,
            level=level,
        )
        # left wins ties, which keeps the sort stable
        if left[i] <= right[j]:
            merged.append(left[i]); i += 1
        else:
            merged.append(right[j]); j += 1
        a[start:end + 1] = merged + left[i:] + right[j:]
        rec.record(PlaceStep, (k,), f"Placed {a[k]} at position {k}", range=span, level=level)

    for value in left[i:] + right[j:]:
        k = start + len(merged)
        merged.append(value)
        rec.record(PlaceStep, (k,), f"Added remaining element {value}", range=span, level=level)

    rec.record(
        MergeCompleteStep,
        span,
        f"Completed merging into: [{_fmt(merged)}]",
        range=span,
        level=level,
    )


def _fmt(values) -> str:
    return ", ".join(str(v) for v in values)
