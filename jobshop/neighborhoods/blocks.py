"""Critical blocks: maximal same-machine runs of the critical path."""

from typing import List, Sequence

from jobshop.models import Block, Operation
from jobshop.resource_order import ResourceOrder


def blocks_of_critical_path(
    critical_path: Sequence[Operation],
    order: ResourceOrder,
) -> List[Block]:
    """Split a critical path into blocks.

    Scans the path left to right and closes the current run whenever the
    machine changes. Runs of two or more operations are mapped back to the
    slots of their first and last operation in the machine sequence of
    ``order``; single operations never form a block.

    Args:
        critical_path: Operations in forward order (``Schedule.critical_path``).
        order: Resource order the path was computed from.

    Returns:
        Blocks in critical path order.
    """
    instance = order.instance
    blocks: List[Block] = []
    run: List[Operation] = []
    machine = -1

    def close_run() -> None:
        if len(run) >= 2:
            first = order.position(machine, run[0])
            last = order.position(machine, run[-1])
            blocks.append(Block(machine=machine, first=first, last=last))

    for op in critical_path:
        op_machine = instance.machine(op)
        if op_machine == machine:
            run.append(op)
            continue
        close_run()
        machine = op_machine
        run = [op]
    close_run()
    return blocks
