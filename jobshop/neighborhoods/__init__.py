"""Neighborhoods for the resource-order encoding.

Structure:
- blocks.py: critical path decomposition into blocks
- nowicki_smutnicki.py: boundary swaps of critical blocks
"""

from jobshop.neighborhoods.blocks import blocks_of_critical_path
from jobshop.neighborhoods.nowicki_smutnicki import (
    block_swaps,
    candidate_swaps,
    generate_neighbors,
)

__all__ = [
    "blocks_of_critical_path",
    "block_swaps",
    "candidate_swaps",
    "generate_neighbors",
]
