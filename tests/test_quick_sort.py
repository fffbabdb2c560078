"""Tests for run_quick_sort: Lomuto partitioning and chronological step order."""

from collections import Counter

import pytest

from samples import SAMPLES
from sortviz import InvalidInputError, run_quick_sort
from sortviz.steps import Action, Phase, RECURSION_CONTROL_ACTIONS


def _actions(trace):
    return [s.action.value for s in trace.steps]


def _check_call_order(steps):
    """Walk the trace as a call stack and fail on any out-of-order step."""
    stack = []  # [range, pivot_placed_seen]
    for step in steps[1:]:
        if step.action is Action.START_PARTITION:
            if stack:
                parent_range, placed = stack[-1]
                assert placed, "child started before parent's pivot was placed"
                assert parent_range[0] <= step.range[0] and step.range[1] <= parent_range[1]
            stack.append([step.range, False])
        elif step.action is Action.PIVOT_PLACED:
            assert stack[-1][0] == step.range
            assert not stack[-1][1]
            stack[-1][1] = True
        elif step.action is Action.SUBARRAY_COMPLETE:
            top_range, placed = stack.pop()
            assert top_range == step.range and placed
        else:
            # partition internals belong to the innermost open call
            assert stack and stack[-1][0] == step.range
            assert not stack[-1][1], "partition step after pivot_placed"
    assert stack == []


class TestScenarioThreeOne:
    def test_action_sequence(self):
        trace = run_quick_sort([3, 1])
        assert _actions(trace) == [
            "initial",
            "start_partition",
            "choose_pivot",
            "compare",
            "place_pivot",
            "pivot_final",
            "pivot_placed",
            "subarray_complete",
        ]

    def test_pivot_is_last_element(self):
        trace = run_quick_sort([3, 1])
        choose = trace.steps[2]
        assert choose.pivot == 1
        assert choose.pivot_index == 1

    def test_single_comparison_and_single_swap(self):
        trace = run_quick_sort([3, 1])
        compare = trace.steps[3]
        assert compare.comparing == (3, 1)
        place = trace.steps[4]
        assert place.swapping == (3, 1)
        assert trace.steps[5].array_state == (1, 3)
        assert trace.counters.comparisons == 1
        assert trace.counters.swaps == 1

    def test_final_array(self):
        assert run_quick_sort([3, 1]).final_array == (1, 3)


class TestPartition:
    def test_no_op_swaps_emit_nothing(self):
        trace = run_quick_sort([1, 2])
        assert _actions(trace) == [
            "initial",
            "start_partition",
            "choose_pivot",
            "compare",
            "pivot_placed",
            "subarray_complete",
        ]
        assert trace.counters.swaps == 0

    def test_scan_swap_emits_swap_then_after_swap(self):
        # pivot 2: 3 stays, 1 swaps with 3
        trace = run_quick_sort([3, 1, 2])
        actions = _actions(trace)
        i = actions.index("swap")
        assert actions[i + 1] == "after_swap"
        swap, after = trace.steps[i], trace.steps[i + 1]
        assert swap.swapping == (3, 1)
        assert swap.array_state == (3, 1, 2)
        assert after.array_state == (1, 3, 2)
        assert after.highlights == (0, 1)

    def test_pivot_placed_reports_final_index(self):
        trace = run_quick_sort([3, 1, 2])
        placed = [s for s in trace.steps if s.action is Action.PIVOT_PLACED]
        assert placed[0].pivot_index == 1
        assert placed[0].array_state[1] == 2

    def test_single_element_only_has_initial_step(self):
        trace = run_quick_sort([5])
        assert _actions(trace) == ["initial"]
        assert trace.final_array == (5,)


class TestProperties:
    @pytest.mark.parametrize("values", SAMPLES)
    def test_final_state_is_sorted(self, values):
        assert list(run_quick_sort(values).final_array) == sorted(values)

    @pytest.mark.parametrize("values", SAMPLES)
    def test_every_snapshot_is_a_permutation(self, values):
        expected = Counter(values)
        for step in run_quick_sort(values).steps:
            assert Counter(step.array_state) == expected

    @pytest.mark.parametrize("values", SAMPLES)
    def test_steps_follow_true_call_order(self, values):
        trace = run_quick_sort(values)
        assert trace.steps[0].phase is Phase.INITIAL
        _check_call_order(trace.steps)

    def test_caller_array_is_not_mutated(self):
        values = [3, 1, 2]
        run_quick_sort(values)
        assert values == [3, 1, 2]


class TestCounters:
    @pytest.mark.parametrize("values", SAMPLES)
    def test_comparisons_match_compare_steps(self, values):
        trace = run_quick_sort(values)
        assert trace.counters.comparisons == sum(1 for s in trace.steps if s.action is Action.COMPARE)

    @pytest.mark.parametrize("values", SAMPLES)
    def test_swaps_match_real_exchanges(self, values):
        trace = run_quick_sort(values)
        exchanges = sum(1 for s in trace.steps if s.action in (Action.SWAP, Action.PLACE_PIVOT))
        assert trace.counters.swaps == exchanges

    def test_step_kind_counts(self):
        trace = run_quick_sort([9, 8, 7, 6, 5, 4, 3, 2, 1])
        c = trace.counters
        control = sum(1 for s in trace.steps if s.action in RECURSION_CONTROL_ACTIONS)
        assert c.recursion_steps == control
        assert c.partition_steps == len(trace.steps) - 1 - control
        assert c.split_steps == 0 and c.merge_steps == 0

    def test_sorted_input_recurses_to_worst_depth(self):
        assert run_quick_sort([1, 2, 3, 4, 5, 6, 7, 8]).counters.max_depth == 7


class TestInvalidInput:
    def test_empty_input_raises(self):
        with pytest.raises(InvalidInputError):
            run_quick_sort([])

    def test_nan_is_rejected(self):
        with pytest.raises(InvalidInputError):
            run_quick_sort([1, float("nan")])
