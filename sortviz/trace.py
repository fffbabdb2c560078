"""Trace containers and the recorder the instrumented sorts append to."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidInputError
from .steps import (
    Action,
    AnyStep,
    Number,
    Phase,
    PlacePivotStep,
    RECURSION_CONTROL_ACTIONS,
    Step,
    SwapStep,
)

logger = logging.getLogger(__name__)


class AlgorithmKind(str, Enum):
    MERGE_SORT = "mergeSort"
    QUICK_SORT = "quickSort"

    @property
    def title(self) -> str:
        return "Merge Sort" if self is AlgorithmKind.MERGE_SORT else "Quick Sort"


class Counters(BaseModel):
    """Per-run totals gathered while recording."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    split_steps: int = 0
    merge_steps: int = 0
    partition_steps: int = 0
    recursion_steps: int = 0
    comparisons: int = 0
    swaps: int = 0
    max_depth: int = 0

    def to_dict(self) -> Dict[str, int]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Counters":
        return cls.model_validate(data)


class Trace(BaseModel):
    """Complete, immutable record of one algorithm run."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    original_array: Tuple[Number, ...]
    algorithm: AlgorithmKind = Field(alias="algorithmKind")
    steps: Tuple[AnyStep, ...]
    counters: Counters = Counters()

    @field_validator("steps")
    @classmethod
    def _has_steps(cls, steps: Tuple[Step, ...]) -> Tuple[Step, ...]:
        if not steps:
            raise ValueError("a trace needs at least one step")
        return steps

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def final_array(self) -> Tuple[Number, ...]:
        return self.steps[-1].array_state

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def trace_from_dict(data: Any) -> Trace:
    """Load a trace previously produced by `Trace.to_dict`."""
    try:
        return Trace.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(f"Malformed trace: {exc}") from exc


def owned_copy(values: Iterable[Number]) -> List[Number]:
    """Copy the caller's values into a private list, rejecting anything unsortable."""
    out = list(values)
    if not out:
        raise InvalidInputError("Cannot sort an empty array")
    for v in out:
        if isinstance(v, bool) or not isinstance(v, (int, float)) or math.isnan(v):
            raise InvalidInputError(f"Array must contain only valid numbers, got {v!r}")
    return out


class TraceRecorder:
    """Single append point for the steps of one run.

    The recursive helpers of an algorithm all receive the same recorder and
    call `record`; nothing else touches the step list. `array` is the working
    copy the algorithm mutates, and every recorded step snapshots it.
    """

    def __init__(self, algorithm: AlgorithmKind, values: Iterable[Number]):
        self.algorithm = algorithm
        self.array = owned_copy(values)
        self._original = tuple(self.array)
        self._steps: List[Step] = []
        self._tally = {
            "split_steps": 0,
            "merge_steps": 0,
            "partition_steps": 0,
            "recursion_steps": 0,
            "comparisons": 0,
            "swaps": 0,
        }
        self.max_depth = 0

    def __len__(self) -> int:
        return len(self._steps)

    def record(self, step_cls, highlights: Iterable[int], description: str, **fields) -> Step:
        step = step_cls(
            array_state=tuple(self.array),
            highlights=tuple(highlights),
            description=description,
            **fields,
        )
        self._steps.append(step)
        self._count(step)
        return step

    def _count(self, step: Step) -> None:
        if step.phase is Phase.SPLIT:
            self._tally["split_steps"] += 1
        elif step.phase is Phase.MERGE:
            self._tally["merge_steps"] += 1
        elif step.phase is Phase.PARTITION:
            if step.action in RECURSION_CONTROL_ACTIONS:
                self._tally["recursion_steps"] += 1
            else:
                self._tally["partition_steps"] += 1
        if step.action is Action.COMPARE:
            self._tally["comparisons"] += 1
        # swap and place_pivot are only recorded for real exchanges
        if isinstance(step, (SwapStep, PlacePivotStep)):
            self._tally["swaps"] += 1

    def reach(self, level: int) -> None:
        """Note that recursion reached `level` (root = 0)."""
        if level > self.max_depth:
            self.max_depth = level

    def finish(self) -> Trace:
        counters = Counters(max_depth=self.max_depth, **self._tally)
        logger.debug(
            "%s trace finished: %d steps, %d comparisons, %d swaps, depth %d",
            self.algorithm.value,
            len(self._steps),
            counters.comparisons,
            counters.swaps,
            counters.max_depth,
        )
        return Trace(
            original_array=self._original,
            algorithm=self.algorithm,
            steps=tuple(self._steps),
            counters=counters,
        )
