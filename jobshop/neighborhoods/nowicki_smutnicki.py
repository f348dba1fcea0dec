"""Nowicki-Smutnicki neighborhood over critical blocks.

Only swaps at the boundaries of a critical block can shorten the critical
path; interior swaps are never generated.

Complexity: at most two moves per block, each evaluated by a full
re-simulation O(J·M²).
"""

from typing import Iterator, List, Tuple

from jobshop.models import Block, Swap
from jobshop.neighborhoods.blocks import blocks_of_critical_path
from jobshop.resource_order import ResourceOrder
from jobshop.schedule import Schedule


def block_swaps(block: Block) -> List[Swap]:
    """Return the boundary swaps of one block.

    Always swaps the first two slots; a block longer than two slots also
    swaps its last two.
    """
    swaps = [Swap(block.machine, block.first, block.first + 1)]
    if block.last - block.first > 1:
        swaps.append(Swap(block.machine, block.last - 1, block.last))
    return swaps


def candidate_swaps(order: ResourceOrder, schedule: Schedule) -> List[Swap]:
    """All neighborhood moves of ``order`` in block-then-swap order.

    Args:
        order: Current resource order.
        schedule: Its simulated schedule (provides the critical path).
    """
    swaps: List[Swap] = []
    for block in blocks_of_critical_path(schedule.critical_path(), order):
        swaps.extend(block_swaps(block))
    return swaps


def generate_neighbors(
    order: ResourceOrder,
    schedule: Schedule,
) -> Iterator[Tuple[ResourceOrder, Swap]]:
    """Generate neighbors lazily, each on its own copy of ``order``.

    Yields:
        (neighbor, move): Modified copy and the swap applied to it.
    """
    for swap in candidate_swaps(order, schedule):
        neighbor = order.copy()
        swap.apply_on(neighbor)
        yield neighbor, swap
