"""
Merge sort recursion tree
=========================

Rebuilds the divide-and-conquer tree of a merge sort from its trace alone.

One pass over the steps:
- the root covers (0, n-1) and is active from step 0;
- each split step creates its two children, keyed by their (start, end)
  ranges, active from that split's index;
- each merge_complete step attaches the merged slice (from its snapshot)
  to the node with the same range.

Ranges are integer tuples, so a lookup miss means the trace is inconsistent
and raises InternalConsistencyError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import InternalConsistencyError, InvalidInputError
from .steps import MergeCompleteStep, Number, Range, SplitStep
from .trace import AlgorithmKind, Trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecursionTreeNode:
    array: Tuple[Number, ...]
    level: int
    range: Range
    children: Tuple["RecursionTreeNode", ...] = ()
    merged_array: Optional[Tuple[Number, ...]] = None
    origin_activation_step_index: Optional[int] = None
    merge_completion_step_index: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def is_active(self, k: int) -> bool:
        return self.origin_activation_step_index is not None and k >= self.origin_activation_step_index

    def is_merged(self, k: int) -> bool:
        # a leaf's content never changes, so it counts as merged once shown
        if self.is_leaf:
            return self.is_active(k)
        return self.merge_completion_step_index is not None and k >= self.merge_completion_step_index

    def display_array(self, k: int) -> Tuple[Number, ...]:
        if self.is_merged(k) and self.merged_array is not None:
            return self.merged_array
        return self.array

    def iter_nodes(self) -> Iterator["RecursionTreeNode"]:
        """Pre-order walk."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "array": list(self.array),
            "level": self.level,
            "range": list(self.range),
            "children": [c.to_dict() for c in self.children],
        }
        if self.merged_array is not None:
            out["mergedArray"] = list(self.merged_array)
        if self.origin_activation_step_index is not None:
            out["originActivationStepIndex"] = self.origin_activation_step_index
        if self.merge_completion_step_index is not None:
            out["mergeCompletionStepIndex"] = self.merge_completion_step_index
        return out


@dataclass
class _Draft:
    """Mutable node used while the tree is being assembled."""

    range: Range
    level: int
    activated_at: int
    children: List["_Draft"] = field(default_factory=list)
    merged: Optional[Tuple[Number, ...]] = None
    merged_at: Optional[int] = None

    def freeze(self, original: Tuple[Number, ...]) -> RecursionTreeNode:
        start, end = self.range
        array = tuple(original[start:end + 1])
        children = tuple(c.freeze(original) for c in self.children)
        merged, merged_at = self.merged, self.merged_at
        if not children:
            merged, merged_at = array, self.activated_at
        return RecursionTreeNode(
            array=array,
            level=self.level,
            range=self.range,
            children=children,
            merged_array=merged,
            origin_activation_step_index=self.activated_at,
            merge_completion_step_index=merged_at,
        )


def build_recursion_tree(trace: Trace) -> RecursionTreeNode:
    """Reconstruct the recursion tree of a merge sort trace."""
    if trace.algorithm is not AlgorithmKind.MERGE_SORT:
        raise InvalidInputError(f"Recursion tree is only defined for merge sort, not {trace.algorithm.value}")

    n = len(trace.original_array)
    root = _Draft(range=(0, n - 1), level=0, activated_at=0)
    nodes: Dict[Range, _Draft] = {root.range: root}

    for index, step in enumerate(trace.steps):
        if isinstance(step, SplitStep):
            _attach_split(nodes, index, step)

    for index, step in enumerate(trace.steps):
        if isinstance(step, MergeCompleteStep):
            node = nodes.get(step.range)
            if node is None:
                raise InternalConsistencyError(
                    f"merge_complete at step {index} references range {step.range} with no tree node"
                )
            start, end = step.range
            node.merged = tuple(step.array_state[start:end + 1])
            node.merged_at = index

    logger.debug("Rebuilt recursion tree with %d nodes for n=%d", len(nodes), n)
    return root.freeze(trace.original_array)


def _attach_split(nodes: Dict[Range, _Draft], index: int, step: SplitStep) -> None:
    parent_range = (step.left_range[0], step.right_range[1])
    parent = nodes.get(parent_range)
    if parent is None:
        raise InternalConsistencyError(
            f"split at step {index} references range {parent_range} with no parent node"
        )
    if parent.children:
        raise InternalConsistencyError(f"range {parent_range} is split twice (step {index})")
    for child_range in (step.left_range, step.right_range):
        if child_range in nodes:
            raise InternalConsistencyError(f"range {child_range} created twice (step {index})")
        child = _Draft(range=child_range, level=step.level + 1, activated_at=index)
        parent.children.append(child)
        nodes[child_range] = child
