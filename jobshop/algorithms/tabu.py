"""Tabu search with a memory of recently visited critical paths."""

import logging
from typing import Iterable, Optional

from jobshop.algorithms.base import (
    SearchState,
    deadline_expired,
    log_iteration,
    open_log_file,
    scan_neighbors,
)
from jobshop.dispatch import est_spt
from jobshop.evaluation import CacheType, ScheduleCache, evaluate
from jobshop.models import ExitCause, Instance, Operation, SearchResult
from jobshop.resource_order import ResourceOrder

logger = logging.getLogger("jssp.tabu")


class TabuMemory:
    """Bounded FIFO of critical paths used only for membership tests.

    Holds at most ``capacity`` paths; adding to a full memory evicts the
    oldest entry. A capacity of 0 forbids nothing.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"Tabu tenure must be >= 0, got {capacity}")
        self.capacity = capacity
        # dict keeps insertion order: first key is the oldest entry
        self._paths: dict[tuple[Operation, ...], None] = {}

    def add(self, path: Iterable[Operation]) -> None:
        if self.capacity == 0:
            return
        key = tuple(path)
        self._paths.pop(key, None)
        while len(self._paths) >= self.capacity:
            del self._paths[next(iter(self._paths))]
        self._paths[key] = None

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (list, tuple)):
            return False
        return tuple(path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self):
        return iter(list(self._paths))


def tabu_search(
    instance: Instance,
    start: Optional[ResourceOrder] = None,
    *,
    iterations: int = 100,
    tenure: int = 10,
    deadline: Optional[float] = None,
    cache: Optional[CacheType] = None,
    trace_file: str | None = None,
) -> SearchResult:
    """Tabu Search core loop.

    Notes:
        - Full scan of the Nowicki-Smutnicki neighborhood every iteration.
        - A neighbor is tabu when its critical path is in the memory; the
          best non-tabu neighbor is accepted even if it is worse.
        - No aspiration criterion: a tabu neighbor is never accepted.
        - Ties between equally good neighbors go to the first one found.

    Args:
        instance: Problem data.
        start: Initial order; defaults to the EST/SPT dispatch heuristic.
        iterations: Maximum number of iterations (K).
        tenure: Number of critical paths kept in the memory (T).
        deadline: Optional absolute ``time.perf_counter()`` value, checked
            before each iteration.
        cache: Optional schedule cache shared across evaluations; a
            bounded ``ScheduleCache`` is created when omitted.
        trace_file: Optional CSV path for a per-iteration trace.

    Returns:
        SearchResult with the best order seen, tagged ``MAX_ITERATIONS``,
        ``BLOCKED`` (every neighbor tabu or none exists) or ``TIMEOUT``.

    Raises:
        ValueError: If ``iterations`` or ``tenure`` is negative.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations}")
    if cache is None:
        cache = ScheduleCache()
    memory = TabuMemory(tenure)
    current = (start if start is not None else est_spt(instance)).copy()
    state = SearchState.start(current, evaluate(current, cache))
    memory.add(state.current_schedule.critical_path())
    exit_cause = ExitCause.MAX_ITERATIONS

    with open_log_file(trace_file, "tabu") as log_file:
        log_iteration(log_file, state)
        while state.iteration < iterations:
            if deadline_expired(deadline):
                exit_cause = ExitCause.TIMEOUT
                logger.info(
                    "[tabu] stop time_limit reached at iter %d best=%s evals=%d",
                    state.iteration,
                    state.best_makespan,
                    state.evaluations,
                )
                break
            candidates = scan_neighbors(state.current, state.current_schedule, cache)
            state.evaluations += len(candidates)
            admissible = [c for c in candidates if c[1].critical_path() not in memory]
            if not admissible:
                exit_cause = ExitCause.BLOCKED
                logger.info(
                    "[tabu] no admissible move iter=%d best=%s evals=%d",
                    state.iteration,
                    state.best_makespan,
                    state.evaluations,
                )
                break
            neighbor, schedule, swap = min(admissible, key=lambda c: c[1].makespan())
            memory.add(schedule.critical_path())
            improved = state.advance(neighbor, schedule)
            logger.info(
                "[tabu] iter %d/%d move=%s current=%s best=%s evals=%d%s",
                state.iteration,
                iterations,
                swap,
                state.current_makespan,
                state.best_makespan,
                state.evaluations,
                " improved" if improved else "",
            )
            log_iteration(log_file, state)

    return state.result(exit_cause)
