"""Uniform entry point for every solver.

Bundles the tunable hyper-parameters in ``AlgoParams`` and dispatches on a
solver name so that the CLI and tests can run heuristics and metaheuristics
the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from jobshop.algorithms import descent, tabu_search
from jobshop.dispatch import HEURISTICS, initial_order
from jobshop.evaluation import CacheType, evaluate
from jobshop.models import ExitCause, Instance, SearchResult

SOLVER_NAMES = (*HEURISTICS, "descent", "tabu")


@dataclass(slots=True)
class AlgoParams:
    """Hyper-parameters of the local search solvers.

    Attributes:
        tabu_iterations: Maximum tabu iterations (K).
        tabu_tenure: Tabu memory capacity (T).
        initial: Dispatch heuristic producing the start solution.
    """

    tabu_iterations: int = 100
    tabu_tenure: int = 10
    initial: str = "est_spt"


def solve(
    name: str,
    instance: Instance,
    deadline: Optional[float] = None,
    params: Optional[AlgoParams] = None,
    cache: Optional[CacheType] = None,
    trace_file: str | None = None,
) -> SearchResult:
    """Run the named solver on ``instance``.

    Args:
        name: One of ``SOLVER_NAMES``.
        instance: Parsed problem instance.
        deadline: Optional absolute ``time.perf_counter()`` stop signal.
        params: Hyper-parameter bundle (only the relevant subset is read).
        cache: Optional schedule cache.
        trace_file: Optional per-iteration CSV trace (search solvers only).

    Returns:
        SearchResult with final schedule and termination tag.

    Raises:
        ValueError: If an unknown solver name is provided.
    """
    if params is None:
        params = AlgoParams()
    if name in HEURISTICS:
        order = initial_order(instance, name)
        schedule = evaluate(order, cache)
        return SearchResult(
            order=order,
            schedule=schedule,
            exit_cause=ExitCause.COMPLETED,
            history=[schedule.makespan()],
        )
    if name == "descent":
        return descent(
            instance,
            initial_order(instance, params.initial),
            deadline=deadline,
            cache=cache,
            trace_file=trace_file,
        )
    if name == "tabu":
        return tabu_search(
            instance,
            initial_order(instance, params.initial),
            iterations=params.tabu_iterations,
            tenure=params.tabu_tenure,
            deadline=deadline,
            cache=cache,
            trace_file=trace_file,
        )
    raise ValueError(f"Unknown solver: {name}")
