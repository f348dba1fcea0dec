"""Schedule: concrete start times derived from a resource order.

A schedule is a read-only view. It is computed once per resource order
snapshot (see ``ResourceOrder.to_schedule``) and never mutated; search
improves solutions by producing new orders and re-simulating them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from jobshop.models import Instance, Operation, ScheduleOperationRow


@dataclass(frozen=True)
class Schedule:
    """Start times for every operation of an instance.

    Attributes:
        instance: Problem data.
        start_times: ``start_times[job][step]`` (non-negative integers).
        machine_orders: Dispatch sequence of every machine, as simulated.
            None for hand-built schedules, which fall back to time order.
    """

    instance: Instance
    start_times: tuple[tuple[int, ...], ...]
    machine_orders: Optional[tuple[tuple[Operation, ...], ...]] = None

    def start_time(self, op: Operation) -> int:
        return self.start_times[op.job][op.step]

    def end_time(self, op: Operation) -> int:
        return self.start_times[op.job][op.step] + self.instance.duration(op)

    def makespan(self) -> int:
        """Completion time of the last operation (0 for an empty instance)."""
        return max((self.end_time(op) for op in self.instance.operations()), default=0)

    def machine_sequence(self, machine: int) -> list[Operation]:
        """Operations of ``machine`` in the order they are processed.

        Zero-duration operations may share a start time, so the recorded
        dispatch sequence is used when there is one.
        """
        if self.machine_orders is not None:
            return list(self.machine_orders[machine])
        ops = [
            self.instance.operation_on_machine(j, machine)
            for j in range(self.instance.jobs_number)
        ]
        return sorted(ops, key=lambda op: (self.start_time(op), self.end_time(op), op.job))

    def is_valid(self) -> bool:
        """Check non-negative starts, job precedence and machine exclusivity.

        Returns:
            True when every constraint holds, False on the first violation.
        """
        instance = self.instance
        for j in range(instance.jobs_number):
            for k in range(instance.machines_number):
                op = Operation(j, k)
                if self.start_time(op) < 0:
                    return False
                if k > 0 and self.end_time(Operation(j, k - 1)) > self.start_time(op):
                    return False
        for m in range(instance.machines_number):
            seq = self.machine_sequence(m)
            for prev, nxt in zip(seq, seq[1:]):
                if self.end_time(prev) > self.start_time(nxt):
                    return False
        return True

    def critical_path(self) -> list[Operation]:
        """Return the chain of operations that determines the makespan.

        Starts at the operation finishing last and walks backwards through
        binding predecessors: the job predecessor or the machine
        predecessor that completes exactly when the current operation
        starts. When both are binding the job predecessor wins. The walk
        stops at an operation without a binding predecessor.

        Returns:
            Operations of the critical path in forward (time) order.
        """
        ops = self.instance.operations()
        if not ops:
            return []
        machine_pred: dict[Operation, Operation] = {}
        for m in range(self.instance.machines_number):
            seq = self.machine_sequence(m)
            for prev, nxt in zip(seq, seq[1:]):
                machine_pred[nxt] = prev

        current = max(ops, key=self.end_time)
        path = [current]
        while True:
            start = self.start_time(current)
            candidates = []
            if current.step > 0:
                candidates.append(Operation(current.job, current.step - 1))
            if current in machine_pred:
                candidates.append(machine_pred[current])
            binding = [op for op in candidates if self.end_time(op) == start]
            if not binding:
                break
            current = binding[0]
            path.append(current)
        path.reverse()
        return path

    def to_rows(self) -> list[ScheduleOperationRow]:
        """Flatten into rows ordered by start time (then job, step)."""
        rows = []
        for op in self.instance.operations():
            machine = self.instance.machine(op)
            duration = self.instance.duration(op)
            start = self.start_time(op)
            rows.append(
                ScheduleOperationRow(
                    start=start,
                    end=start + duration,
                    job=op.job,
                    operation_index=op.step,
                    machine=machine,
                    processing_time=duration,
                )
            )
        rows.sort(key=lambda r: (r.start, r.job, r.operation_index))
        return rows

    def __str__(self) -> str:
        lines = [f"Schedule(makespan={self.makespan()})"]
        for j, starts in enumerate(self.start_times):
            lines.append(f"  job {j}: " + " ".join(str(s) for s in starts))
        return "\n".join(lines)


def check_no_machine_overlap(schedule: Schedule) -> bool:
    """Ensure no two operations overlap on the same machine.

    Args:
        schedule: Schedule returned by the simulator.

    Returns:
        True if no overlaps are found.

    Raises:
        AssertionError: On the first detected temporal overlap for a
        machine.
    """
    for m in range(schedule.instance.machines_number):
        prev_end = -1
        for op in schedule.machine_sequence(m):
            start = schedule.start_time(op)
            if start < prev_end:
                raise AssertionError(
                    "Overlap on machine " f"{m} between end {prev_end} and start {start}"
                )
            prev_end = schedule.end_time(op)
    return True
