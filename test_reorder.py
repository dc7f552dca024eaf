from collections import Counter
from dataclasses import dataclass

import pytest

from taskboard.services.positions import positions_are_dense
from taskboard.services.reorder import (
    MoveDescriptor,
    apply_descriptor,
    clamp_index,
    move_between_lists,
    reorder_within_list,
)


@dataclass(frozen=True)
class Item:
    id: str
    position: int = 0


def items(*names):
    return [Item(id=name, position=index) for index, name in enumerate(names)]


def ids(values):
    return [value.id for value in values]


class TestReorderWithinList:
    """Tests for same-list reorder"""

    def test_move_last_to_front(self):
        result = reorder_within_list(items("T1", "T2", "T3"), 2, 0)
        assert ids(result) == ["T3", "T1", "T2"]
        assert [item.position for item in result] == [0, 1, 2]

    def test_move_front_to_back(self):
        result = reorder_within_list(items("T1", "T2", "T3"), 0, 2)
        assert ids(result) == ["T2", "T3", "T1"]

    def test_same_index_returns_original(self):
        original = items("T1", "T2")
        assert reorder_within_list(original, 1, 1) is original

    @pytest.mark.parametrize("source,destination", [(-1, 0), (0, -1), (3, 0), (0, 3)])
    def test_out_of_bounds_returns_original(self, source, destination):
        original = items("T1", "T2", "T3")
        assert reorder_within_list(original, source, destination) is original

    def test_empty_list(self):
        original = []
        assert reorder_within_list(original, 0, 0) is original

    def test_input_not_mutated(self):
        original = items("T1", "T2", "T3")
        reorder_within_list(original, 0, 2)
        assert ids(original) == ["T1", "T2", "T3"]

    def test_every_move_is_a_permutation_and_reversible(self):
        original = items("a", "b", "c", "d", "e")
        for i in range(len(original)):
            for j in range(len(original)):
                moved = reorder_within_list(original, i, j)
                assert Counter(ids(moved)) == Counter(ids(original))
                assert positions_are_dense(moved)
                restored = reorder_within_list(moved, j, i)
                assert ids(restored) == ids(original)

    def test_works_on_plain_ids(self):
        assert reorder_within_list([10, 20, 30], 0, 1) == [20, 10, 30]


class TestMoveBetweenLists:
    """Tests for cross-list moves"""

    def test_move_into_middle(self):
        source, destination = move_between_lists(items("T1", "T2", "T3"), items("T4", "T5"), 1, 1)
        assert ids(source) == ["T1", "T3"]
        assert ids(destination) == ["T4", "T2", "T5"]
        assert positions_are_dense(source) and positions_are_dense(destination)

    def test_destination_past_end_appends(self):
        source, destination = move_between_lists(items("T1"), items("T4", "T5"), 0, 99)
        assert ids(source) == []
        assert ids(destination) == ["T4", "T5", "T1"]

    def test_negative_destination_clamps_to_front(self):
        _, destination = move_between_lists(items("T1"), items("T4"), 0, -3)
        assert ids(destination) == ["T1", "T4"]

    def test_into_empty_list(self):
        source, destination = move_between_lists(items("T1", "T2"), [], 0, 0)
        assert ids(source) == ["T2"]
        assert ids(destination) == ["T1"]
        assert destination[0].position == 0

    def test_out_of_bounds_source_is_noop(self):
        source_list, destination_list = items("T1"), items("T4")
        source, destination = move_between_lists(source_list, destination_list, 5, 0)
        assert source is source_list and destination is destination_list

    def test_combined_count_preserved(self):
        a, b = items("a", "b", "c"), items("d", "e")
        for i in range(len(a)):
            for j in range(len(b) + 2):
                new_a, new_b = move_between_lists(a, b, i, j)
                assert len(new_a) + len(new_b) == len(a) + len(b)
                assert new_b[clamp_index(j, len(b))].id == a[i].id

    def test_same_list_degrades_to_reorder(self):
        shared = items("T1", "T2", "T3")
        source, destination = move_between_lists(shared, shared, 2, 0)
        assert source is destination
        assert source == reorder_within_list(shared, 2, 0)

    def test_same_list_flag_for_copies_of_one_container(self):
        first, second = items("T1", "T2", "T3"), items("T1", "T2", "T3")
        source, destination = move_between_lists(first, second, 0, 5, same_list=True)
        # out of range in the same list is a no-op, not an append
        assert source is first and destination is first

    def test_inputs_not_mutated(self):
        a, b = items("T1", "T2"), items("T3")
        move_between_lists(a, b, 0, 0)
        assert ids(a) == ["T1", "T2"] and ids(b) == ["T3"]


class TestMoveDescriptor:

    def test_noop_detection(self):
        assert MoveDescriptor("T1", "A", "A", 1, 1).is_noop
        assert not MoveDescriptor("T1", "A", "B", 1, 1).is_noop
        assert not MoveDescriptor("T1", "A", "A", 1, 2).is_noop

    def test_apply_descriptor_across_containers(self):
        source, destination = apply_descriptor(
            items("T1", "T2", "T3"), items("T4", "T5"), MoveDescriptor("T2", "A", "B", 1, 1)
        )
        assert ids(source) == ["T1", "T3"]
        assert ids(destination) == ["T4", "T2", "T5"]

    def test_apply_descriptor_same_container(self):
        column = items("T1", "T2", "T3")
        source, destination = apply_descriptor(column, list(column), MoveDescriptor("T3", "A", "A", 2, 0))
        assert ids(source) == ids(destination) == ["T3", "T1", "T2"]
