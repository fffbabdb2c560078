"""
Algorithm service
=================

The boundary the web layer talks to: the algorithm catalog, input
validation, and `execute`, which runs an algorithm and bundles its trace
with counters, timing and a complexity summary.
"""

from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from .complexity import ComplexitySummary, summarize_complexity
from .errors import InvalidInputError
from .merge_sort import run_merge_sort
from .quick_sort import run_quick_sort
from .steps import Number
from .trace import AlgorithmKind, Trace

logger = logging.getLogger(__name__)

MAX_ARRAY_SIZE = 20

ALGORITHMS: Dict[str, tuple] = {
    AlgorithmKind.MERGE_SORT.value: ("Merge Sort", run_merge_sort),
    AlgorithmKind.QUICK_SORT.value: ("Quick Sort", run_quick_sort),
}

_ALGORITHM_INFO = {
    AlgorithmKind.MERGE_SORT.value: {
        "name": "Merge Sort",
        "description": "A divide-and-conquer algorithm that divides the array into halves, sorts them, and merges them back.",
        "timeComplexity": "O(n log n)",
        "spaceComplexity": "O(n)",
        "stable": True,
        "inPlace": False,
        "bestFor": "Large datasets, when stability is required",
    },
    AlgorithmKind.QUICK_SORT.value: {
        "name": "Quick Sort",
        "description": "A divide-and-conquer algorithm that picks a pivot and partitions the array around it.",
        "timeComplexity": "O(n log n) average, O(n²) worst",
        "spaceComplexity": "O(log n)",
        "stable": False,
        "inPlace": True,
        "bestFor": "General purpose sorting, when average performance matters",
    },
}


def algorithm_info(algorithm_id: str) -> Optional[Dict[str, Any]]:
    info = _ALGORITHM_INFO.get(algorithm_id)
    return dict(info) if info is not None else None


def list_algorithms() -> List[Dict[str, Any]]:
    return [
        {
            "id": algo_id,
            "name": info["name"],
            "implemented": True,
            "complexity": {"time": info["timeComplexity"], "space": info["spaceComplexity"]},
        }
        for algo_id, info in _ALGORITHM_INFO.items()
    ]


# ---------------- Validation ----------------
def _is_valid_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def validate_array(values: Any, max_size: int = MAX_ARRAY_SIZE) -> List[str]:
    """Return every problem with `values`; an empty list means it is acceptable."""
    if not isinstance(values, (list, tuple)):
        return ["Input must be an array"]
    errors = []
    if len(values) == 0:
        errors.append("Array cannot be empty")
    if len(values) > max_size:
        errors.append(f"Array cannot have more than {max_size} elements")
    if not all(_is_valid_number(v) for v in values):
        errors.append("Array must contain only valid numbers")
    return errors


_SEPARATORS = re.compile(r"[\s,]+")


def parse_array_text(text: str) -> List[Number]:
    """Parse "4, 2 7,1" into numbers; ints stay ints."""
    out: List[Number] = []
    for token in _SEPARATORS.split(text.strip()):
        if not token:
            continue
        try:
            out.append(int(token))
        except ValueError:
            try:
                out.append(float(token))
            except ValueError:
                raise InvalidInputError(f"'{token}' is not a number") from None
    return out


# ---------------- Execution ----------------
@dataclass(frozen=True)
class RunResult:
    trace: Trace
    complexity: ComplexitySummary
    execution_time_ms: float

    @property
    def metadata(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {
            "totalSteps": len(self.trace.steps),
            "arraySize": len(self.trace.original_array),
            "executionTime": self.execution_time_ms,
        }
        meta.update(self.trace.counters.to_dict())
        meta["complexity"] = self.complexity.to_dict()
        return meta

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.trace.algorithm.value,
            "inputArray": list(self.trace.original_array),
            "steps": [s.to_dict() for s in self.trace.steps],
            "metadata": self.metadata,
        }


def get_runner(algorithm_id: str) -> Callable[[Sequence[Number]], Trace]:
    try:
        return ALGORITHMS[algorithm_id][1]
    except KeyError:
        raise InvalidInputError(f"Unsupported algorithm: {algorithm_id!r}") from None


def execute(algorithm_id: str, values: Sequence[Number]) -> RunResult:
    """Run `algorithm_id` over a copy of `values`."""
    runner = get_runner(algorithm_id)
    started = time.perf_counter()
    trace = runner(values)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
    counters = trace.counters
    summary = summarize_complexity(trace.algorithm, len(trace.original_array), counters.max_depth, counters)
    logger.info(
        "Executed %s on %d elements: %d steps in %.3f ms",
        algorithm_id,
        len(trace.original_array),
        len(trace.steps),
        elapsed_ms,
    )
    return RunResult(trace=trace, complexity=summary, execution_time_ms=elapsed_ms)
