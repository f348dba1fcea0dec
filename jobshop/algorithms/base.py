"""Common structures and helper functions for search algorithms."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple

from jobshop.evaluation import CacheType, evaluate
from jobshop.models import ExitCause, SearchResult, Swap
from jobshop.neighborhoods import generate_neighbors
from jobshop.resource_order import ResourceOrder
from jobshop.schedule import Schedule

logger = logging.getLogger("jssp")

Candidate = Tuple[ResourceOrder, Schedule, Swap]


def deadline_from_ms(time_limit_ms: Optional[int]) -> Optional[float]:
    """Convert a relative time limit into an absolute ``perf_counter`` deadline."""
    if time_limit_ms is None:
        return None
    return time.perf_counter() + time_limit_ms / 1000.0


def deadline_expired(deadline: Optional[float]) -> bool:
    return deadline is not None and time.perf_counter() >= deadline


@dataclass
class SearchState:
    """State owned by one driver run.

    Orders adopted as ``current`` or ``best`` are never mutated afterwards
    (every neighbor is built on a private copy), so both may reference the
    same object.
    """

    current: ResourceOrder
    current_schedule: Schedule
    best: ResourceOrder
    best_schedule: Schedule
    history: List[int] = field(default_factory=list)
    start_time: float = 0.0
    iteration: int = 0
    evaluations: int = 1

    @classmethod
    def start(cls, order: ResourceOrder, schedule: Schedule) -> "SearchState":
        return cls(
            current=order,
            current_schedule=schedule,
            best=order,
            best_schedule=schedule,
            history=[schedule.makespan()],
            start_time=time.perf_counter(),
        )

    @property
    def current_makespan(self) -> int:
        return self.current_schedule.makespan()

    @property
    def best_makespan(self) -> int:
        return self.best_schedule.makespan()

    def advance(self, order: ResourceOrder, schedule: Schedule) -> bool:
        """Move to ``order``, update the best solution and record history.

        Returns:
            True if the best solution improved.
        """
        self.iteration += 1
        self.current = order
        self.current_schedule = schedule
        improved = schedule.makespan() < self.best_makespan
        if improved:
            self.best = order
            self.best_schedule = schedule
        self.history.append(self.best_makespan)
        return improved

    def elapsed_ms(self) -> int:
        """Return elapsed time from start in ms."""
        return int((time.perf_counter() - self.start_time) * 1000)

    def result(self, exit_cause: ExitCause) -> SearchResult:
        return SearchResult(
            order=self.best,
            schedule=self.best_schedule,
            exit_cause=exit_cause,
            iterations=self.iteration,
            history=list(self.history),
        )


def scan_neighbors(
    order: ResourceOrder,
    schedule: Schedule,
    cache: Optional[CacheType] = None,
) -> List[Candidate]:
    """Evaluate the whole neighborhood of ``order``.

    Returns:
        ``(neighbor, schedule, swap)`` triples in block-then-swap order, so
        ``min`` over them breaks ties by first-found move.
    """
    return [
        (neighbor, evaluate(neighbor, cache), swap)
        for neighbor, swap in generate_neighbors(order, schedule)
    ]


def is_local_optimum(
    order: ResourceOrder,
    cache: Optional[CacheType] = None,
) -> bool:
    """True when no neighbor of ``order`` has a strictly smaller makespan."""
    schedule = evaluate(order, cache)
    makespan = schedule.makespan()
    return all(s.makespan() >= makespan for _, s, _ in scan_neighbors(order, schedule, cache))


@contextmanager
def open_log_file(path: str | None, algo_name: str) -> Iterator[Any]:
    """Context manager for the optional per-iteration CSV trace."""
    log_file = None
    if path:
        try:
            log_file = open(path, "w", encoding="utf-8")
            log_file.write("iteration,elapsed_ms,current_makespan,best_makespan\n")
        except OSError as e:
            logger.warning("[%s] Failed to open log file %s: %s", algo_name, path, e)
            log_file = None
    try:
        yield log_file
    finally:
        if log_file:
            log_file.close()


def log_iteration(log_file: Any, state: SearchState) -> None:
    """Write iteration to log file."""
    if log_file:
        log_file.write(
            f"{state.iteration},{state.elapsed_ms()},{state.current_makespan},"
            f"{state.best_makespan}\n"
        )
