"""
Instrumented quick sort
=======================

Lomuto partition with the last element of each range as pivot. Recursion
control steps (start_partition, pivot_placed, subarray_complete) and
partition steps go through one recorder as they happen, so the trace is in
true call order:

    start_partition(node) -> partition steps -> pivot_placed(node)
        -> left subtree -> right subtree -> subarray_complete(node)
"""

from __future__ import annotations

from typing import Iterable

from .steps import (
    AfterSwapStep,
    ChoosePivotStep,
    InitialStep,
    Number,
    PartitionCompareStep,
    PivotFinalStep,
    PivotPlacedStep,
    PlacePivotStep,
    StartPartitionStep,
    SubarrayCompleteStep,
    SwapStep,
)
from .trace import AlgorithmKind, Trace, TraceRecorder


def run_quick_sort(values: Iterable[Number]) -> Trace:
    """Sort a copy of `values` and return the full step trace."""
    rec = TraceRecorder(AlgorithmKind.QUICK_SORT, values)
    a = rec.array
    rec.record(InitialStep, (), f"Initial array: [{', '.join(str(v) for v in a)}]")
    _quick(rec, 0, len(a) - 1, 0)
    return rec.finish()


def _quick(rec: TraceRecorder, low: int, high: int, level: int) -> None:
    rec.reach(level)
    if low >= high:
        return
    span = (low, high)
    rec.record(
        StartPartitionStep,
        span,
        f"Starting to partition subarray from index {low} to {high}",
        range=span,
        level=level,
    )

    p = _partition(rec, low, high, level)

    rec.record(
        PivotPlacedStep,
        (p,),
        f"Pivot {rec.array[p]} placed at correct position {p}",
        range=span,
        pivot_index=p,
        level=level,
    )

    _quick(rec, low, p - 1, level + 1)
    _quick(rec, p + 1, high, level + 1)

    rec.record(
        SubarrayCompleteStep,
        span,
        f"Completed sorting subarray from {low} to {high}",
        range=span,
        level=level,
    )


def _partition(rec: TraceRecorder, low: int, high: int, level: int) -> int:
    a = rec.array
    span = (low, high)
    pivot = a[high]
    rec.record(
        ChoosePivotStep,
        (high,),
        f"Choosing pivot: {pivot} at index {high}",
        range=span,
        pivot=pivot,
        pivot_index=high,
        level=level,
    )

    # everything at indices low..i is <= pivot
    i = low - 1
    for j in range(low, high):
        rec.record(
            PartitionCompareStep,
            (j, high),
            f"Comparing {a[j]} with pivot {pivot}",
            comparing=(a[j], pivot),
            range=span,
            level=level,
        )
        if a[j] <= pivot:
            i += 1
            if i != j:
                rec.record(
                    SwapStep,
                    (i, j),
                    f"Swapping {a[i]} at index {i} with {a[j]} at index {j}",
                    swapping=(a[i], a[j]),
                    range=span,
                    level=level,
                )
                a[i], a[j] = a[j], a[i]
                rec.record(
                    AfterSwapStep,
                    (i, j),
                    f"Array after swap: [{', '.join(str(v) for v in a)}]",
                    range=span,
                    level=level,
                )

    p = i + 1
    if p != high:
        rec.record(
            PlacePivotStep,
            (p, high),
            f"Placing pivot {a[high]} in correct position by swapping with {a[p]}",
            swapping=(a[p], a[high]),
            range=span,
            level=level,
        )
        a[p], a[high] = a[high], a[p]
        rec.record(
            PivotFinalStep,
            (p,),
            f"Pivot {a[p]} now in final position at index {p}",
            range=span,
            pivot_index=p,
            level=level,
        )
    return p
