import time

import pytest

from jobshop.algorithms import TabuMemory, descent, tabu_search
from jobshop.algorithms.base import is_local_optimum
from jobshop.dispatch import est_spt, spt
from jobshop.evaluation import CacheType, ScheduleCache, evaluate
from jobshop.models import ExitCause, Operation
from jobshop.resource_order import ResourceOrder


def test_evaluate_cache_reuses_schedule(ft06) -> None:
    order = est_spt(ft06)
    cache: CacheType = {}
    sched1 = evaluate(order, cache)
    sched2 = evaluate(order.copy(), cache)
    assert sched1 is sched2  # object reused from cache
    assert len(cache) == 1


def test_descent_from_golden_order(golden_order) -> None:
    result = descent(golden_order.instance, golden_order)
    assert result.makespan == 11
    assert result.iterations == 1
    assert result.history == [12, 11]
    assert result.exit_cause is ExitCause.BLOCKED
    assert golden_order.to_schedule().makespan() == 12  # start left untouched


def test_descent_stays_at_local_optimum(aaa1) -> None:
    result = descent(aaa1)
    assert result.makespan == 11
    assert result.iterations == 0
    assert result.exit_cause is ExitCause.BLOCKED


@pytest.mark.parametrize("start_rule", [spt, est_spt])
def test_descent_not_worse_and_locally_optimal(ft06, start_rule) -> None:
    start = start_rule(ft06)
    start_c = start.to_schedule().makespan()
    result = descent(ft06, start)
    assert result.schedule.is_valid()
    assert result.makespan <= start_c
    assert result.history == sorted(result.history, reverse=True)
    assert len(set(result.history)) == len(result.history)  # strictly decreasing
    assert is_local_optimum(result.order)


def test_descent_expired_deadline_returns_start(ft06) -> None:
    start = spt(ft06)
    result = descent(ft06, start, deadline=time.perf_counter() - 1.0)
    assert result.exit_cause is ExitCause.TIMEOUT
    assert result.iterations == 0
    assert result.order == start


def test_tabu_search_runs_and_not_worse(ft06) -> None:
    start = spt(ft06)
    start_c = start.to_schedule().makespan()
    result = tabu_search(ft06, start, iterations=50, tenure=8)
    assert result.schedule.is_valid()
    assert result.makespan <= start_c
    assert result.makespan >= 55
    assert result.exit_cause in (ExitCause.MAX_ITERATIONS, ExitCause.BLOCKED)
    assert result.iterations <= 50
    assert len(result.history) == result.iterations + 1
    assert result.history[0] == start_c
    assert result.history[-1] == result.makespan
    assert all(a >= b for a, b in zip(result.history, result.history[1:]))


def test_tabu_zero_iterations(ft06) -> None:
    start = est_spt(ft06)
    result = tabu_search(ft06, start, iterations=0, tenure=5)
    assert result.exit_cause is ExitCause.MAX_ITERATIONS
    assert result.iterations == 0
    assert result.order == start


def test_tabu_expired_deadline(ft06) -> None:
    result = tabu_search(ft06, iterations=10, tenure=5, deadline=time.perf_counter() - 1.0)
    assert result.exit_cause is ExitCause.TIMEOUT
    assert result.iterations == 0


def test_tabu_invalid_parameters(aaa1) -> None:
    with pytest.raises(ValueError):
        tabu_search(aaa1, iterations=-1)
    with pytest.raises(ValueError):
        tabu_search(aaa1, iterations=5, tenure=-1)


def test_tabu_trace_file(ft06, tmp_path) -> None:
    trace = tmp_path / "tabu.csv"
    result = tabu_search(ft06, iterations=5, tenure=3, trace_file=str(trace))
    lines = trace.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "iteration,elapsed_ms,current_makespan,best_makespan"
    assert len(lines) == result.iterations + 2


def test_tabu_memory_evicts_oldest() -> None:
    memory = TabuMemory(2)
    p1 = [Operation(0, 0)]
    p2 = [Operation(1, 0)]
    p3 = [Operation(0, 0), Operation(1, 0)]
    memory.add(p1)
    memory.add(p2)
    assert p1 in memory and p2 in memory
    memory.add(p3)
    assert len(memory) == 2
    assert p1 not in memory
    assert p2 in memory and p3 in memory


def test_tabu_memory_zero_capacity_forbids_nothing() -> None:
    memory = TabuMemory(0)
    memory.add([Operation(0, 0)])
    assert len(memory) == 0
    assert [Operation(0, 0)] not in memory


def _current_makespans(trace) -> list[int]:
    rows = trace.read_text(encoding="utf-8").splitlines()[1:]
    return [int(row.split(",")[2]) for row in rows]


def test_tabu_accepts_worse_move_and_revisits_after_eviction(aaa1, tmp_path) -> None:
    # est_spt (11) has two neighbors of makespan 12; with a memory of one
    # path the search oscillates between the first of them and the start.
    trace = tmp_path / "tabu.csv"
    result = tabu_search(aaa1, iterations=4, tenure=1, trace_file=str(trace))
    assert _current_makespans(trace) == [11, 12, 11, 12, 11]
    assert result.exit_cause is ExitCause.MAX_ITERATIONS
    assert result.iterations == 4
    assert result.history == [11, 11, 11, 11, 11]
    assert result.order == est_spt(aaa1)


def test_tabu_skips_improving_neighbor_in_memory(aaa1, tmp_path) -> None:
    start = ResourceOrder.from_sequences(
        aaa1, [[(1, 1), (0, 0)], [(1, 0), (0, 1)], [(1, 2), (0, 2)]]
    )
    assert start.to_schedule().makespan() == 12
    trace = tmp_path / "tabu.csv"
    result = tabu_search(aaa1, start, iterations=10, tenure=3, trace_file=str(trace))
    # 12 -> 11, then back to the start is tabu so the other 12 is taken;
    # its only neighbor (11) was already visited.
    assert _current_makespans(trace) == [12, 11, 12]
    assert result.exit_cause is ExitCause.BLOCKED
    assert result.iterations == 2
    assert result.history == [12, 11, 11]
    assert result.makespan == 11


def test_tabu_blocked_when_memory_covers_neighborhood(aaa1) -> None:
    result = tabu_search(aaa1, iterations=10, tenure=2)
    assert result.exit_cause is ExitCause.BLOCKED
    assert result.iterations == 1
    assert result.history == [11, 11]
    assert result.order == est_spt(aaa1)


def test_drivers_handle_zero_duration_ties(zero_duration_order) -> None:
    instance = zero_duration_order.instance
    result = descent(instance, zero_duration_order)
    assert result.exit_cause is ExitCause.BLOCKED
    assert result.makespan == 6
    result = tabu_search(instance, zero_duration_order, iterations=5, tenure=2)
    assert result.schedule.is_valid()
    assert result.makespan == 6


def test_schedule_cache_evicts_least_recently_used(aaa1, golden_order, alternative_order) -> None:
    cache = ScheduleCache(2)
    evaluate(golden_order, cache)
    evaluate(alternative_order, cache)
    evaluate(golden_order, cache)
    evaluate(est_spt(aaa1), cache)
    assert len(cache) == 2
    assert golden_order.key() in cache
    assert alternative_order.key() not in cache


def test_schedule_cache_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        ScheduleCache(0)


def test_tabu_with_small_cache_matches_unbounded(ft06) -> None:
    cache = ScheduleCache(3)
    bounded = tabu_search(ft06, iterations=20, tenure=5, cache=cache)
    unbounded = tabu_search(ft06, iterations=20, tenure=5, cache={})
    assert len(cache) <= 3
    assert bounded.history == unbounded.history
    assert bounded.order == unbounded.order
