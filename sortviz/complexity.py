"""Time/space complexity summaries derived from a run's counters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .trace import AlgorithmKind, Counters


@dataclass(frozen=True)
class ComplexityFacet:
    big_o: str
    explanation: str
    breakdown: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"bigO": self.big_o, "explanation": self.explanation, "breakdown": dict(self.breakdown)}


@dataclass(frozen=True)
class Performance:
    best_case: str
    average_case: str
    worst_case: str
    stable: bool
    in_place: bool
    adaptive: bool
    actual_case: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "bestCase": self.best_case,
            "averageCase": self.average_case,
            "worstCase": self.worst_case,
            "stable": self.stable,
            "inPlace": self.in_place,
            "adaptive": self.adaptive,
        }
        if self.actual_case is not None:
            out["actualCase"] = self.actual_case
        return out


@dataclass(frozen=True)
class ComplexitySummary:
    time: ComplexityFacet
    space: ComplexityFacet
    performance: Performance

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time.to_dict(),
            "space": self.space.to_dict(),
            "performance": self.performance.to_dict(),
        }


def ceil_log2(n: int) -> int:
    return math.ceil(math.log2(n)) if n > 1 else 0


def summarize_complexity(
    algorithm: AlgorithmKind, array_size: int, max_depth: int, counters: Counters
) -> ComplexitySummary:
    """Compare the observed run against textbook bounds. Never fails."""
    if algorithm is AlgorithmKind.MERGE_SORT:
        return _merge_sort_summary(array_size, max_depth, counters)
    return _quick_sort_summary(array_size, max_depth, counters)


def classify_quick_sort_case(array_size: int, max_depth: int) -> str:
    """'best', 'average' or 'worst' judged from the observed recursion depth."""
    best_depth = ceil_log2(array_size)
    worst_depth = array_size - 1
    if max_depth <= best_depth + 1:
        return "best"
    if max_depth >= worst_depth - 2:
        return "worst"
    return "average"


def _merge_sort_summary(n: int, max_depth: int, counters: Counters) -> ComplexitySummary:
    log_n = ceil_log2(n)
    auxiliary = n
    stack = log_n
    total_space = auxiliary + stack
    time = ComplexityFacet(
        big_o="O(n log n)",
        explanation=(
            "Merge sort always divides the array into halves (log n levels) "
            "and merges n elements at each level"
        ),
        breakdown={
            "levels": max_depth,
            "theoreticalLevels": log_n,
            "operationsPerLevel": n,
            "totalOperations": max_depth * n,
            "actualComparisons": counters.comparisons,
            "theoreticalComparisons": n * log_n,
        },
    )
    space = ComplexityFacet(
        big_o="O(n)",
        explanation="Merge sort requires additional space for merging subarrays and recursion stack",
        breakdown={
            "auxiliarySpace": auxiliary,
            "recursionStack": stack,
            "totalSpace": total_space,
            "spaceRatio": round(total_space / n, 2) if n else 0.0,
        },
    )
    performance = Performance(
        best_case="O(n log n)",
        average_case="O(n log n)",
        worst_case="O(n log n)",
        stable=True,
        in_place=False,
        adaptive=False,
    )
    return ComplexitySummary(time, space, performance)


def _quick_sort_summary(n: int, max_depth: int, counters: Counters) -> ComplexitySummary:
    log_n = ceil_log2(n)
    case = classify_quick_sort_case(n, max_depth)
    worst = case == "worst"
    time = ComplexityFacet(
        big_o="O(n²)" if worst else "O(n log n)",
        explanation="Quick sort's time complexity depends on pivot selection. "
        + ("Poor pivot choices lead to O(n²)" if worst else "Good pivot choices achieve O(n log n)"),
        breakdown={
            "actualDepth": max_depth,
            "bestCaseDepth": log_n,
            "worstCaseDepth": n - 1,
            "comparisons": counters.comparisons,
            "swaps": counters.swaps,
            "caseType": case,
        },
    )
    space = ComplexityFacet(
        big_o="O(n)" if max_depth > log_n + 2 else "O(log n)",
        explanation="Quick sort uses recursion stack space, which varies with pivot quality",
        breakdown={
            "recursionStack": max_depth,
            "auxiliarySpace": 1,
            "totalSpace": max_depth + 1,
            "inPlace": True,
        },
    )
    performance = Performance(
        best_case="O(n log n)",
        average_case="O(n log n)",
        worst_case="O(n²)",
        stable=False,
        in_place=True,
        adaptive=False,
        actual_case=case,
    )
    return ComplexitySummary(time, space, performance)
