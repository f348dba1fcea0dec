"""Steepest descent over the Nowicki-Smutnicki neighborhood."""

import logging
from typing import Optional

from jobshop.algorithms.base import (
    SearchState,
    deadline_expired,
    log_iteration,
    open_log_file,
    scan_neighbors,
)
from jobshop.dispatch import est_spt
from jobshop.evaluation import CacheType, ScheduleCache, evaluate
from jobshop.models import ExitCause, Instance, SearchResult
from jobshop.resource_order import ResourceOrder

logger = logging.getLogger("jssp.descent")


def descent(
    instance: Instance,
    start: Optional[ResourceOrder] = None,
    *,
    deadline: Optional[float] = None,
    cache: Optional[CacheType] = None,
    trace_file: str | None = None,
) -> SearchResult:
    """Replace the current order by its best strictly improving neighbor.

    Stops in a local optimum (``ExitCause.BLOCKED``). The makespan
    decreases strictly every iteration, so without a deadline the loop is
    finite. Ties between equally good neighbors go to the first one found.

    Args:
        instance: Problem data.
        start: Initial order; defaults to the EST/SPT dispatch heuristic.
        deadline: Optional absolute ``time.perf_counter()`` value, checked
            before each iteration (``ExitCause.TIMEOUT`` on expiry).
        cache: Optional schedule cache shared across evaluations; a
            bounded ``ScheduleCache`` is created when omitted.
        trace_file: Optional CSV path for a per-iteration trace.

    Returns:
        SearchResult with the final order; its makespan never exceeds the
        initial one.
    """
    if cache is None:
        cache = ScheduleCache()
    current = (start if start is not None else est_spt(instance)).copy()
    state = SearchState.start(current, evaluate(current, cache))
    exit_cause = ExitCause.BLOCKED

    with open_log_file(trace_file, "descent") as log_file:
        log_iteration(log_file, state)
        while True:
            if deadline_expired(deadline):
                exit_cause = ExitCause.TIMEOUT
                logger.info(
                    "[descent] stop time_limit reached at iter %d best=%s evals=%d",
                    state.iteration,
                    state.best_makespan,
                    state.evaluations,
                )
                break
            candidates = scan_neighbors(state.current, state.current_schedule, cache)
            state.evaluations += len(candidates)
            improving = [c for c in candidates if c[1].makespan() < state.current_makespan]
            if not improving:
                logger.info(
                    "[descent] local optimum iter=%d best=%s evals=%d",
                    state.iteration,
                    state.best_makespan,
                    state.evaluations,
                )
                break
            neighbor, schedule, swap = min(improving, key=lambda c: c[1].makespan())
            state.advance(neighbor, schedule)
            logger.info(
                "[descent] iter %d move=%s current=%s evals=%d",
                state.iteration,
                swap,
                state.current_makespan,
                state.evaluations,
            )
            log_iteration(log_file, state)

    return state.result(exit_cause)
