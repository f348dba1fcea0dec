"""Greedy dispatch heuristics producing an initial resource order.

Every rule repeatedly picks one *ready* operation (the next unscheduled
step of some job), appends it to its machine's sequence and updates job
and machine availability. Rules differ only in the priority key:

    spt       shortest processing time
    lrpt      longest remaining processing time of the job
    est_spt   earliest start time, then shortest processing time
    est_lrpt  earliest start time, then longest remaining processing time

Remaining ties are broken by lower job id, so each rule is deterministic.
"""

from typing import Callable

from jobshop.models import Instance, Operation
from jobshop.resource_order import ResourceOrder

# (earliest start, duration, remaining work of the job) -> sortable key
PriorityKey = Callable[[int, int, int], tuple]


def _dispatch(instance: Instance, priority: PriorityKey) -> ResourceOrder:
    order = ResourceOrder(instance)
    next_step = [0] * instance.jobs_number
    job_ready = [0] * instance.jobs_number
    machine_free = [0] * instance.machines_number
    remaining = [sum(d for _, d in job) for job in instance.jobs]

    while True:
        candidates: list[tuple[tuple, int, int]] = []
        for j in range(instance.jobs_number):
            if next_step[j] >= instance.machines_number:
                continue
            machine, duration = instance.jobs[j][next_step[j]]
            est = max(job_ready[j], machine_free[machine])
            candidates.append((priority(est, duration, remaining[j]), j, est))
        if not candidates:
            break
        _, chosen, est = min(candidates)
        op = Operation(chosen, next_step[chosen])
        end = est + instance.duration(op)
        order.add(op)
        job_ready[chosen] = end
        machine_free[instance.machine(op)] = end
        remaining[chosen] -= instance.duration(op)
        next_step[chosen] += 1
    return order


def spt(instance: Instance) -> ResourceOrder:
    return _dispatch(instance, lambda est, d, rem: (d,))


def lrpt(instance: Instance) -> ResourceOrder:
    return _dispatch(instance, lambda est, d, rem: (-rem,))


def est_spt(instance: Instance) -> ResourceOrder:
    return _dispatch(instance, lambda est, d, rem: (est, d))


def est_lrpt(instance: Instance) -> ResourceOrder:
    return _dispatch(instance, lambda est, d, rem: (est, -rem))


HEURISTICS: dict[str, Callable[[Instance], ResourceOrder]] = {
    "spt": spt,
    "lrpt": lrpt,
    "est_spt": est_spt,
    "est_lrpt": est_lrpt,
}


def initial_order(instance: Instance, heuristic: str = "est_spt") -> ResourceOrder:
    """Build a start solution with the named heuristic.

    Raises:
        ValueError: If ``heuristic`` is not one of ``HEURISTICS``.
    """
    try:
        rule = HEURISTICS[heuristic]
    except KeyError:
        raise ValueError(f"Unknown heuristic: {heuristic}") from None
    return rule(instance)
