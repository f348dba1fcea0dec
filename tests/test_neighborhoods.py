from jobshop.dispatch import est_spt, spt
from jobshop.models import Block, Operation, Swap
from jobshop.neighborhoods import (
    block_swaps,
    blocks_of_critical_path,
    candidate_swaps,
    generate_neighbors,
)


def test_blocks_of_golden_order(golden_order):
    path = golden_order.to_schedule().critical_path()
    # machines along the path: 0, 1, 2, 2
    assert blocks_of_critical_path(path, golden_order) == [Block(machine=2, first=0, last=1)]


def test_single_operation_runs_give_no_block(golden_order):
    path = [Operation(0, 0), Operation(0, 1), Operation(0, 2)]
    assert blocks_of_critical_path(path, golden_order) == []


def test_blocks_of_est_spt_order(aaa1):
    order = est_spt(aaa1)
    path = order.to_schedule().critical_path()
    assert blocks_of_critical_path(path, order) == [
        Block(machine=0, first=0, last=1),
        Block(machine=2, first=0, last=1),
    ]


def test_blocks_are_contiguous_critical_runs(ft06):
    order = spt(ft06)
    path = order.to_schedule().critical_path()
    blocks = blocks_of_critical_path(path, order)
    assert blocks
    for block in blocks:
        assert block.last > block.first
        segment = order.tasks_by_machine[block.machine][block.first : block.last + 1]
        assert all(op in path for op in segment)
        assert all(ft06.machine(op) == block.machine for op in segment)


def test_block_swaps_two_slots():
    assert block_swaps(Block(machine=0, first=2, last=3)) == [Swap(0, 2, 3)]


def test_block_swaps_three_slots():
    assert block_swaps(Block(machine=1, first=0, last=2)) == [Swap(1, 0, 1), Swap(1, 1, 2)]


def test_block_swaps_long_block_only_boundaries():
    assert block_swaps(Block(machine=4, first=1, last=5)) == [Swap(4, 1, 2), Swap(4, 4, 5)]


def test_candidate_swaps_follow_block_order(aaa1):
    order = est_spt(aaa1)
    assert candidate_swaps(order, order.to_schedule()) == [Swap(0, 0, 1), Swap(2, 0, 1)]


def test_generate_neighbors_leaves_current_untouched(ft06):
    order = est_spt(ft06)
    snapshot = order.copy()
    neighbors = list(generate_neighbors(order, order.to_schedule()))
    assert neighbors
    assert order == snapshot
    for neighbor, swap in neighbors:
        assert neighbor is not order
        assert neighbor.validate()
        swap.apply_on(neighbor)
        assert neighbor == snapshot


def test_boundary_swaps_keep_schedule_feasible(ft06):
    order = spt(ft06)
    for neighbor, _ in generate_neighbors(order, order.to_schedule()):
        assert neighbor.to_schedule().is_valid()


def test_zero_duration_blocks_stay_in_range(zero_duration_order):
    order = zero_duration_order
    path = order.to_schedule().critical_path()
    assert blocks_of_critical_path(path, order) == [Block(machine=1, first=0, last=1)]
    neighbors = list(generate_neighbors(order, order.to_schedule()))
    assert [swap for _, swap in neighbors] == [Swap(1, 0, 1)]
    assert neighbors[0][0].to_schedule().makespan() == 6
