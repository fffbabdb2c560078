"""
Trace player
============

Pure replay over a finished Trace. Every step already holds a full array
snapshot, so seeking to any index is a lookup and a player's only state is
its current index. Several players may share one Trace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .steps import Action, Number, Phase, Range, Step
from .trace import Trace

_PHASE_DEFAULTS = {
    Phase.INITIAL: "Initial array state",
    Phase.SPLIT: "Splitting array into smaller subarrays",
    Phase.TRANSITION: "Transitioning from split to merge phase",
    Phase.MERGE: "Merging sorted subarrays",
    Phase.PARTITION: "Partitioning array around pivot",
}

_ACTION_DEFAULTS = {
    (Phase.MERGE, Action.COMPARE): "Comparing elements to determine order",
    (Phase.MERGE, Action.PLACE): "Placing element in sorted position",
    (Phase.MERGE, Action.MERGE_START): "Starting to merge subarrays",
    (Phase.MERGE, Action.MERGE_COMPLETE): "Completed merging subarrays",
    (Phase.PARTITION, Action.CHOOSE_PIVOT): "Selecting pivot element for partitioning",
    (Phase.PARTITION, Action.COMPARE): "Comparing element with pivot",
    (Phase.PARTITION, Action.SWAP): "Swapping elements to partition around pivot",
    (Phase.PARTITION, Action.PLACE_PIVOT): "Placing pivot in correct position",
    (Phase.PARTITION, Action.PIVOT_PLACED): "Pivot is now in final sorted position",
    (Phase.PARTITION, Action.START_PARTITION): "Starting to partition subarray",
    (Phase.PARTITION, Action.SUBARRAY_COMPLETE): "Completed sorting this subarray",
}


def describe_step(step: Step) -> str:
    """The step's own description, or a default sentence for its phase/action."""
    if step.description:
        return step.description
    text = _ACTION_DEFAULTS.get((step.phase, step.action))
    if text is None:
        text = _PHASE_DEFAULTS.get(step.phase, "Processing...")
    return text


@dataclass(frozen=True)
class StepView:
    """What a renderer needs for one frame."""

    index: int
    total: int
    step: Step
    array_state: Tuple[Number, ...]
    highlights: Tuple[int, ...]
    phase: str
    action: str
    description: str
    level: Optional[int] = None
    range: Optional[Range] = None
    left_range: Optional[Range] = None
    right_range: Optional[Range] = None
    comparing: Optional[Tuple[Number, Number]] = None

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1

    def to_dict(self):
        return {
            "index": self.index,
            "total": self.total,
            "isFirst": self.is_first,
            "isLast": self.is_last,
            "description": self.description,
            "step": self.step.to_dict(),
        }


def view_at(trace: Trace, k: int) -> StepView:
    """Project step `k` of `trace`; raises IndexError outside [0, len)."""
    if not 0 <= k < len(trace.steps):
        raise IndexError(f"step {k} out of range for a trace of {len(trace.steps)} steps")
    step = trace.steps[k]
    return StepView(
        index=k,
        total=len(trace.steps),
        step=step,
        array_state=step.array_state,
        highlights=step.highlights,
        phase=step.phase.value,
        action=step.action.value,
        description=describe_step(step),
        level=getattr(step, "level", None),
        range=getattr(step, "range", None),
        left_range=getattr(step, "left_range", None),
        right_range=getattr(step, "right_range", None),
        comparing=getattr(step, "comparing", None),
    )


class TracePlayer:
    """Playhead over a trace: forward, backward, reset and seek."""

    def __init__(self, trace: Trace, index: int = 0):
        self.trace = trace
        self.index = 0
        self.seek(index)

    @property
    def last_index(self) -> int:
        return len(self.trace.steps) - 1

    @property
    def at_end(self) -> bool:
        return self.index == self.last_index

    @property
    def view(self) -> StepView:
        return view_at(self.trace, self.index)

    def step_forward(self) -> StepView:
        if self.index < self.last_index:
            self.index += 1
        return self.view

    def step_backward(self) -> StepView:
        if self.index > 0:
            self.index -= 1
        return self.view

    def reset(self) -> StepView:
        self.index = 0
        return self.view

    def seek(self, k: int) -> StepView:
        if not 0 <= k <= self.last_index:
            raise IndexError(f"cannot seek to step {k}; valid range is 0..{self.last_index}")
        self.index = k
        return self.view
