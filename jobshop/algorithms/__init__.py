"""Search algorithms module for job shop scheduling.

Contains:
- Steepest descent
- Tabu Search
"""

from jobshop.algorithms.descent import descent
from jobshop.algorithms.tabu import TabuMemory, tabu_search

__all__ = ["descent", "tabu_search", "TabuMemory"]
