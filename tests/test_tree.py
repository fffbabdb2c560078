"""Tests for build_recursion_tree: rebuilding merge sort's tree from a trace."""

import pytest

from samples import SAMPLES
from sortviz import InternalConsistencyError, InvalidInputError, run_merge_sort, run_quick_sort
from sortviz.steps import InitialStep, MergeCompleteStep, SplitStep, TransitionStep
from sortviz.trace import AlgorithmKind, Counters, Trace, trace_from_dict
from sortviz.tree import build_recursion_tree


def _by_range(root):
    return {node.range: node for node in root.iter_nodes()}


def _handmade_trace(*steps):
    original = (4, 2, 7, 1)
    return Trace(
        original_array=original,
        algorithm=AlgorithmKind.MERGE_SORT,
        steps=(InitialStep(array_state=original, highlights=(), description=""),) + steps,
        counters=Counters(),
    )


class TestShape:
    def test_four_element_tree(self):
        root = build_recursion_tree(run_merge_sort([4, 2, 7, 1]))
        assert root.range == (0, 3)
        assert root.array == (4, 2, 7, 1)
        assert [c.range for c in root.children] == [(0, 1), (2, 3)]
        nodes = _by_range(root)
        assert set(nodes) == {(0, 3), (0, 1), (2, 3), (0, 0), (1, 1), (2, 2), (3, 3)}
        assert nodes[(2, 3)].array == (7, 1)
        assert nodes[(3, 3)].level == 2

    def test_activation_and_completion_indices(self):
        root = build_recursion_tree(run_merge_sort([4, 2, 7, 1]))
        nodes = _by_range(root)
        assert root.origin_activation_step_index == 0
        assert nodes[(0, 1)].origin_activation_step_index == 1
        assert nodes[(2, 3)].origin_activation_step_index == 1
        assert nodes[(0, 0)].origin_activation_step_index == 2
        assert nodes[(3, 3)].origin_activation_step_index == 3
        assert nodes[(0, 1)].merge_completion_step_index == 9
        assert nodes[(2, 3)].merge_completion_step_index == 14
        assert root.merge_completion_step_index == 23

    @pytest.mark.parametrize("values", SAMPLES)
    def test_leaves_have_length_at_most_one(self, values):
        root = build_recursion_tree(run_merge_sort(values))
        for node in root.iter_nodes():
            if node.is_leaf:
                assert node.range[1] - node.range[0] + 1 <= 1
            else:
                assert len(node.children) == 2

    @pytest.mark.parametrize("values", SAMPLES)
    def test_root_merged_array_is_sorted(self, values):
        root = build_recursion_tree(run_merge_sort(values))
        assert list(root.merged_array) == sorted(values)

    def test_single_element_root_is_a_merged_leaf(self):
        root = build_recursion_tree(run_merge_sort([5]))
        assert root.is_leaf
        assert root.merged_array == (5,)
        assert root.is_merged(0)


class TestPlayheadState:
    def test_nodes_activate_with_their_split(self):
        root = build_recursion_tree(run_merge_sort([4, 2, 7, 1]))
        leaf = _by_range(root)[(2, 2)]
        assert not leaf.is_active(2)
        assert leaf.is_active(3)
        assert leaf.is_merged(3)

    def test_display_array_switches_to_merged_content(self):
        root = build_recursion_tree(run_merge_sort([4, 2, 7, 1]))
        node = _by_range(root)[(2, 3)]
        assert node.display_array(13) == (7, 1)
        assert node.display_array(14) == (1, 7)
        assert not node.is_merged(13)

    def test_to_dict_uses_camel_case(self):
        data = build_recursion_tree(run_merge_sort([3, 1])).to_dict()
        assert data["range"] == [0, 1]
        assert data["mergedArray"] == [1, 3]
        assert data["originActivationStepIndex"] == 0
        assert "mergeCompletionStepIndex" in data
        assert len(data["children"]) == 2


class TestInputs:
    def test_rebuilds_from_a_stored_trace(self):
        trace = run_merge_sort([38, 27, 43, 3, 9, 82, 10])
        stored = trace_from_dict(trace.to_dict())
        assert build_recursion_tree(stored) == build_recursion_tree(trace)

    def test_quick_sort_trace_is_rejected(self):
        with pytest.raises(InvalidInputError):
            build_recursion_tree(run_quick_sort([3, 1]))


class TestMalformedTrace:
    def test_split_with_unknown_parent(self):
        trace = _handmade_trace(
            SplitStep(
                array_state=(4, 2, 7, 1), highlights=(0, 1), description="",
                left_range=(0, 0), right_range=(1, 1), level=1,
            ),
        )
        with pytest.raises(InternalConsistencyError):
            build_recursion_tree(trace)

    def test_merge_complete_with_unknown_range(self):
        trace = _handmade_trace(
            TransitionStep(array_state=(4, 2, 7, 1), highlights=(), description=""),
            MergeCompleteStep(array_state=(4, 2, 7, 1), highlights=(1, 2), description="", range=(1, 2), level=1),
        )
        with pytest.raises(InternalConsistencyError):
            build_recursion_tree(trace)

    def test_range_split_twice(self):
        split = SplitStep(
            array_state=(4, 2, 7, 1), highlights=(0, 3), description="",
            left_range=(0, 1), right_range=(2, 3), level=0,
        )
        with pytest.raises(InternalConsistencyError):
            build_recursion_tree(_handmade_trace(split, split))
