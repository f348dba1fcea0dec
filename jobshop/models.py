"""Core data structures for Job Shop instances and local search.

This module defines:
    Job                 -- alias describing a single operation (machine, duration).
    Operation           -- identifier of one operation (job, step).
    Instance            -- immutable container with all jobs for one instance.
    ScheduleOperationRow-- flat row used by reports and charts.
    Block / Swap        -- critical block and the move exchanging two slots.
    ExitCause           -- why a solver stopped.
    SearchResult        -- what every solver returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:  # pragma: no cover
    from jobshop.resource_order import ResourceOrder
    from jobshop.schedule import Schedule

Job = tuple[int, int]  # (machine, duration)


class Operation(NamedTuple):
    """Operation ``step`` of job ``job`` (both 0-based)."""

    job: int
    step: int

    def __str__(self) -> str:
        return f"({self.job},{self.step})"


@dataclass(frozen=True)
class Instance:
    """Immutable representation of a JSSP instance.

    Attributes:
        jobs: Nested list: jobs[j][k] -> (machine, duration).
        jobs_number: Number of jobs (J).
        machines_number: Number of machines (M).
        name: Optional label (usually the file name).

    Raises:
        ValueError: If a job does not visit every machine exactly once or a
            duration is negative.
    """

    jobs: list[list[Job]]
    jobs_number: int
    machines_number: int
    name: str = "instance"

    def __post_init__(self) -> None:
        if len(self.jobs) != self.jobs_number:
            raise ValueError(f"Expected {self.jobs_number} jobs, got {len(self.jobs)}")
        for j, job in enumerate(self.jobs):
            machines = sorted(machine for machine, _ in job)
            if machines != list(range(self.machines_number)):
                raise ValueError(f"Job {j} must use each of the {self.machines_number} machines once")
            if any(duration < 0 for _, duration in job):
                raise ValueError(f"Job {j} has a negative duration")

    @property
    def operations_number(self) -> int:
        return self.jobs_number * self.machines_number

    def machine(self, op: Operation) -> int:
        return self.jobs[op.job][op.step][0]

    def duration(self, op: Operation) -> int:
        return self.jobs[op.job][op.step][1]

    def operation_on_machine(self, job: int, machine: int) -> Operation:
        """Return the operation of ``job`` that runs on ``machine``."""
        for step, (m, _) in enumerate(self.jobs[job]):
            if m == machine:
                return Operation(job, step)
        raise ValueError(f"Job {job} never visits machine {machine}")

    def operations(self) -> list[Operation]:
        """All operations in job-major order."""
        return [
            Operation(j, k) for j in range(self.jobs_number) for k in range(self.machines_number)
        ]


@dataclass(frozen=True)
class ScheduleOperationRow:
    """Single scheduled operation with timing and identification data.

    Fields:
        start: Start time of the operation.
        end: Completion time (start + processing_time).
        job: Job identifier.
        operation_index: Index of the operation inside its job (0-based).
        machine: Machine on which the operation is processed.
        processing_time: Duration of the operation.
    """

    start: int
    end: int
    job: int
    operation_index: int
    machine: int
    processing_time: int


@dataclass(frozen=True)
class Block:
    """Maximal run (length >= 2) of critical operations sharing a machine.

    ``first`` and ``last`` are slot indices inside the machine's sequence of
    the resource order, not positions on the critical path.

    Example: with ``machine 1 : (0,2) (2,1) (1,1)`` the block
    ``Block(machine=1, first=0, last=1)`` covers ``(0,2) (2,1)``.
    """

    machine: int
    first: int
    last: int


@dataclass(frozen=True)
class Swap:
    """Exchange of the operations at slots ``a`` and ``b`` of one machine.

    Applying the same swap twice restores the original order.
    """

    machine: int
    a: int
    b: int

    def apply_on(self, order: ResourceOrder) -> None:
        """Apply this swap in place on ``order``."""
        order.apply_swap(self.machine, self.a, self.b)


class ExitCause(Enum):
    COMPLETED = "completed"
    BLOCKED = "blocked"
    MAX_ITERATIONS = "max_iterations"
    TIMEOUT = "timeout"


@dataclass
class SearchResult:
    """Final order and schedule of a solver together with run statistics.

    Fields:
        order: Best resource order found.
        schedule: Schedule simulated from ``order``.
        exit_cause: Termination reason.
        iterations: Number of completed search iterations (0 for heuristics).
        history: Best-so-far makespan, starting with the initial one.
    """

    order: ResourceOrder
    schedule: Schedule
    exit_cause: ExitCause
    iterations: int = 0
    history: list[int] = field(default_factory=list)

    @property
    def makespan(self) -> int:
        return self.schedule.makespan()
