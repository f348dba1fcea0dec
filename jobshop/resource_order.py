"""Resource-order encoding and the list-scheduling simulator.

Concepts
--------
Resource order
    For every machine ``m`` an ordered sequence of the ``J`` operations that
    run on ``m`` (one per job). The sequence is the dispatch priority of the
    machine; the encoding carries no timing information.
Simulation
    ``simulate`` turns the per-machine sequences into start times. Each
    operation starts as soon as both its job predecessor and the previous
    operation of its machine have completed (semi-active schedule).

Every mutation of an order is a swap of two slots of one machine, so a
complete order always stays a permutation of each machine's operations.
"""

from __future__ import annotations

from typing import Optional, Sequence

from jobshop.errors import MalformedEncodingError, SimulationDeadlockError
from jobshop.models import Instance, Operation
from jobshop.schedule import Schedule

OrderKey = tuple[tuple[Operation, ...], ...]


def simulate(instance: Instance, tasks_by_machine: Sequence[Sequence[Operation]]) -> Schedule:
    """Decode per-machine dispatch sequences into a schedule.

    Repeatedly scans machines in index order and places the first machine
    head operation whose job predecessor is already placed, at
    ``max(machine free time, predecessor completion)``.

    Args:
        instance: Problem data.
        tasks_by_machine: Complete, validated sequences (one per machine).

    Returns:
        Schedule with a start time for every operation.

    Raises:
        SimulationDeadlockError: If a full pass over all machines places
            nothing while operations remain (cyclic constraints).
    """
    jobs_number = instance.jobs_number
    machines_number = instance.machines_number
    start_times = [[0] * machines_number for _ in range(jobs_number)]
    machine_free = [0] * machines_number
    machine_cursor = [0] * machines_number
    job_next_step = [0] * jobs_number
    job_ready = [0] * jobs_number

    remaining = instance.operations_number
    while remaining:
        placed = False
        for m in range(machines_number):
            if machine_cursor[m] >= jobs_number:
                continue
            op = tasks_by_machine[m][machine_cursor[m]]
            if op.step != job_next_step[op.job]:
                continue
            start = max(machine_free[m], job_ready[op.job])
            end = start + instance.duration(op)
            start_times[op.job][op.step] = start
            machine_free[m] = end
            job_ready[op.job] = end
            machine_cursor[m] += 1
            job_next_step[op.job] += 1
            remaining -= 1
            placed = True
            break
        if not placed:
            blocked = [
                str(tasks_by_machine[m][machine_cursor[m]])
                for m in range(machines_number)
                if machine_cursor[m] < jobs_number
            ]
            raise SimulationDeadlockError(
                f"Cyclic resource order: {remaining} operations left, "
                f"machine heads waiting: {', '.join(blocked)}"
            )

    return Schedule(
        instance,
        tuple(tuple(row) for row in start_times),
        tuple(tuple(seq) for seq in tasks_by_machine),
    )


class ResourceOrder:
    """Per-machine dispatch order of a candidate solution.

    Build it either empty (``ResourceOrder(instance)``) and fill slots with
    :meth:`add`, or from a computed schedule with :meth:`from_schedule`.

    Attributes:
        instance: Problem data.
        tasks_by_machine: ``tasks_by_machine[m][slot]`` -> Operation or None
            while the slot is unset.
        next_free_slot: Number of slots already filled per machine.
    """

    def __init__(self, instance: Instance) -> None:
        self.instance = instance
        self.tasks_by_machine: list[list[Optional[Operation]]] = [
            [None] * instance.jobs_number for _ in range(instance.machines_number)
        ]
        self.next_free_slot = [0] * instance.machines_number

    @classmethod
    def from_schedule(cls, schedule: Schedule) -> "ResourceOrder":
        """Rebuild the order each machine processes its operations in ``schedule``."""
        order = cls(schedule.instance)
        for m in range(schedule.instance.machines_number):
            order.tasks_by_machine[m] = list(schedule.machine_sequence(m))
            order.next_free_slot[m] = schedule.instance.jobs_number
        return order

    @classmethod
    def from_sequences(
        cls, instance: Instance, sequences: Sequence[Sequence[tuple[int, int]]]
    ) -> "ResourceOrder":
        """Build a complete order from literal per-machine ``(job, step)`` lists.

        Raises:
            MalformedEncodingError: If the sequences are not a valid encoding.
        """
        order = cls(instance)
        if len(sequences) != instance.machines_number:
            raise MalformedEncodingError(
                f"Expected {instance.machines_number} machine sequences, got {len(sequences)}"
            )
        for m, seq in enumerate(sequences):
            order.tasks_by_machine[m] = [Operation(job, step) for job, step in seq]
            order.next_free_slot[m] = len(seq)
        order.validate()
        return order

    def add(self, op: Operation) -> None:
        """Append ``op`` to the next free slot of its machine.

        Raises:
            MalformedEncodingError: If the operation does not exist or its
                machine sequence is already full.
        """
        if not (0 <= op.job < self.instance.jobs_number) or not (
            0 <= op.step < self.instance.machines_number
        ):
            raise MalformedEncodingError(f"Unknown operation {op}")
        m = self.instance.machine(op)
        slot = self.next_free_slot[m]
        if slot >= self.instance.jobs_number:
            raise MalformedEncodingError(f"Machine {m} is full, cannot add {op}")
        self.tasks_by_machine[m][slot] = Operation(op.job, op.step)
        self.next_free_slot[m] += 1

    def validate(self) -> bool:
        """Check that every machine sequence is a permutation of its operations.

        Returns:
            True if the encoding is complete and valid.

        Raises:
            MalformedEncodingError: On an unset slot, an operation of another
                machine, or a duplicated / missing operation.
        """
        instance = self.instance
        for m, seq in enumerate(self.tasks_by_machine):
            if len(seq) != instance.jobs_number:
                raise MalformedEncodingError(
                    f"Machine {m} has {len(seq)} slots, expected {instance.jobs_number}"
                )
            seen_jobs: set[int] = set()
            for slot, op in enumerate(seq):
                if op is None:
                    raise MalformedEncodingError(f"Machine {m} slot {slot} is unset")
                if not (0 <= op.job < instance.jobs_number) or op !=instance.operation_on_machine(op.job, m):
                    raise MalformedEncodingError(f"Operation {op} does not run on machine {m}")
                if op.job in seen_jobs:
                    raise MalformedEncodingError(f"Operation {op} appears twice on machine {m}")
                seen_jobs.add(op.job)
        return True

    def to_schedule(self) -> Schedule:
        """Validate and simulate this order (see :func:`simulate`)."""
        self.validate()
        return simulate(self.instance, self.tasks_by_machine)  # type: ignore[arg-type]

    def copy(self) -> "ResourceOrder":
        """Deep copy of the machine sequences; the copy is validated."""
        self.validate()
        clone = ResourceOrder(self.instance)
        clone.tasks_by_machine = [list(seq) for seq in self.tasks_by_machine]
        clone.next_free_slot = list(self.next_free_slot)
        return clone

    def apply_swap(self, machine: int, i: int, j: int) -> None:
        """Exchange slots ``i`` and ``j`` of ``machine`` in place.

        Raises:
            MalformedEncodingError: If a position is out of range.
        """
        if not (0 <= machine < self.instance.machines_number):
            raise MalformedEncodingError(f"Machine out of range: {machine}")
        seq = self.tasks_by_machine[machine]
        if not (0 <= i < len(seq)) or not (0 <= j < len(seq)):
            raise MalformedEncodingError(f"Swap positions out of range: {i}, {j}")
        seq[i], seq[j] = seq[j], seq[i]

    def position(self, machine: int, op: Operation) -> int:
        """Slot index of ``op`` in the sequence of ``machine``."""
        for slot, candidate in enumerate(self.tasks_by_machine[machine]):
            if candidate == op:
                return slot
        raise ValueError(f"Operation {op} not found on machine {machine}")

    def key(self) -> OrderKey:
        """Hashable snapshot of the sequences (used for caching)."""
        return tuple(tuple(seq) for seq in self.tasks_by_machine)  # type: ignore[misc]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceOrder):
            return NotImplemented
        return self.instance == other.instance and self.tasks_by_machine == other.tasks_by_machine

    def __str__(self) -> str:
        lines = []
        for m, seq in enumerate(self.tasks_by_machine):
            lines.append(f"Machine {m} : " + " ; ".join(str(op) for op in seq))
        return "\n".join(lines)

    __repr__ = __str__
