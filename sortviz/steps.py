"""
Step records
============

A Step is one primitive operation of an instrumented sort, frozen in time.
Every Step carries a full snapshot of the array (`array_state`), never a
diff, so a player can jump straight to any index.

Each `(phase, action)` pair is its own frozen pydantic model and declares
exactly the fields that operation populates. Field names are snake_case in
Python and camelCase in the persisted JSON:

    {"phase": "split", "action": "split", "arrayState": [...],
     "highlights": [...], "leftRange": [0, 1], "rightRange": [2, 3],
     "level": 0, "description": "..."}
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    StrictFloat,
    StrictInt,
    Tag,
    TypeAdapter,
    ValidationError,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from .errors import InvalidInputError

Number = Union[StrictInt, StrictFloat]
Range = Tuple[int, int]


class Phase(str, Enum):
    INITIAL = "initial"
    SPLIT = "split"
    TRANSITION = "transition"
    MERGE = "merge"
    PARTITION = "partition"


class Action(str, Enum):
    INITIAL = "initial"
    TRANSITION = "transition"
    SPLIT = "split"
    MERGE_START = "merge_start"
    COMPARE = "compare"
    PLACE = "place"
    MERGE_COMPLETE = "merge_complete"
    START_PARTITION = "start_partition"
    CHOOSE_PIVOT = "choose_pivot"
    SWAP = "swap"
    AFTER_SWAP = "after_swap"
    PLACE_PIVOT = "place_pivot"
    PIVOT_FINAL = "pivot_final"
    PIVOT_PLACED = "pivot_placed"
    SUBARRAY_COMPLETE = "subarray_complete"


class Step(BaseModel):
    """Fields shared by every variant. `phase` and `action` belong to the class."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    phase: ClassVar[Phase]
    action: ClassVar[Action]

    array_state: Tuple[Number, ...]
    highlights: Tuple[int, ...]
    description: str = ""

    @model_serializer(mode="wrap")
    def serialize_with_kind(self, handler) -> Dict[str, Any]:
        return {"phase": self.phase.value, "action": self.action.value, **handler(self)}

    def to_dict(self) -> Dict[str, Any]:
        return step_to_dict(self)


# ---------------- Bookends ----------------
class InitialStep(Step):
    phase: ClassVar[Phase] = Phase.INITIAL
    action: ClassVar[Action] = Action.INITIAL


class TransitionStep(Step):
    phase: ClassVar[Phase] = Phase.TRANSITION
    action: ClassVar[Action] = Action.TRANSITION


# ---------------- Merge sort ----------------
class SplitStep(Step):
    phase: ClassVar[Phase] = Phase.SPLIT
    action: ClassVar[Action] = Action.SPLIT

    left_range: Range
    right_range: Range
    level: int


class MergeStartStep(Step):
    phase: ClassVar[Phase] = Phase.MERGE
    action: ClassVar[Action] = Action.MERGE_START

    left_range: Range
    right_range: Range
    range: Range
    level: int


class MergeCompareStep(Step):
    phase: ClassVar[Phase] = Phase.MERGE
    action: ClassVar[Action] = Action.COMPARE

    comparing: Tuple[Number, Number]
    range: Range
    level: int


class PlaceStep(Step):
    phase: ClassVar[Phase] = Phase.MERGE
    action: ClassVar[Action] = Action.PLACE

    range: Range
    level: int


class MergeCompleteStep(Step):
    phase: ClassVar[Phase] = Phase.MERGE
    action: ClassVar[Action] = Action.MERGE_COMPLETE

    range: Range
    level: int


# ---------------- Quick sort: recursion control ----------------
class StartPartitionStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.START_PARTITION

    range: Range
    level: int


class PivotPlacedStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.PIVOT_PLACED

    range: Range
    pivot_index: int
    level: int


class SubarrayCompleteStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.SUBARRAY_COMPLETE

    range: Range
    level: int


# ---------------- Quick sort: partition internals ----------------
class ChoosePivotStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.CHOOSE_PIVOT

    range: Range
    pivot: Number
    pivot_index: int
    level: int


class PartitionCompareStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.COMPARE

    comparing: Tuple[Number, Number]
    range: Range
    level: int


class SwapStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.SWAP

    swapping: Tuple[Number, Number]
    range: Range
    level: int


class AfterSwapStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.AFTER_SWAP

    range: Range
    level: int


class PlacePivotStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.PLACE_PIVOT

    swapping: Tuple[Number, Number]
    range: Range
    level: int


class PivotFinalStep(Step):
    phase: ClassVar[Phase] = Phase.PARTITION
    action: ClassVar[Action] = Action.PIVOT_FINAL

    range: Range
    pivot_index: int
    level: int


RECURSION_CONTROL_ACTIONS = frozenset(
    {Action.START_PARTITION, Action.PIVOT_PLACED, Action.SUBARRAY_COMPLETE}
)

STEP_VARIANTS = (
    InitialStep,
    TransitionStep,
    SplitStep,
    MergeStartStep,
    MergeCompareStep,
    PlaceStep,
    MergeCompleteStep,
    StartPartitionStep,
    PivotPlacedStep,
    SubarrayCompleteStep,
    ChoosePivotStep,
    PartitionCompareStep,
    SwapStep,
    AfterSwapStep,
    PlacePivotStep,
    PivotFinalStep,
)


def _kind_tag(phase: Any, action: Any) -> str:
    return f"{getattr(phase, 'value', phase)}/{getattr(action, 'value', action)}"


def _step_tag(value: Any):
    """Discriminator: the "phase/action" pair of a dict or a step instance."""
    if isinstance(value, dict):
        phase, action = value.get("phase"), value.get("action")
    else:
        phase, action = getattr(value, "phase", None), getattr(value, "action", None)
    if phase is None or action is None:
        return None
    return _kind_tag(phase, action)


AnyStep = Annotated[
    Union[tuple(Annotated[cls, Tag(_kind_tag(cls.phase, cls.action))] for cls in STEP_VARIANTS)],
    Discriminator(_step_tag),
]

_STEP_ADAPTER = TypeAdapter(AnyStep)


# ---------------- Serialization ----------------
def step_to_dict(step: Step) -> Dict[str, Any]:
    """Plain-JSON form of a step using the persisted field names."""
    return step.model_dump(mode="json", by_alias=True)


def step_from_dict(data: Any) -> Step:
    """Rebuild a step from its JSON form; anything malformed raises InvalidInputError."""
    try:
        return _STEP_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise InvalidInputError(f"Malformed step: {exc}") from exc
