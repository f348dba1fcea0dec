"""Schedule evaluation with an optional cache.

Kept apart from the search drivers so that neighborhoods and drivers can
share it without cyclic imports. The cache is keyed by the structural
snapshot of the per-machine sequences.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional, Union

from jobshop.resource_order import OrderKey, ResourceOrder
from jobshop.schedule import Schedule

DEFAULT_CACHE_SIZE = 10_000


class ScheduleCache:
    """Least recently used map from order keys to schedules.

    Holds at most ``capacity`` schedules; storing into a full cache drops
    the entry that was read or written longest ago.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[OrderKey, Schedule] = OrderedDict()

    def get(self, key: OrderKey) -> Optional[Schedule]:
        sched = self._entries.get(key)
        if sched is not None:
            self._entries.move_to_end(key)
        return sched

    def __setitem__(self, key: OrderKey, sched: Schedule) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.capacity:
            self._entries.popitem(last=False)
        self._entries[key] = sched

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# a plain dict works too, but never evicts
CacheType = Union[ScheduleCache, dict[OrderKey, Schedule]]


def evaluate(order: ResourceOrder, cache: CacheType | None = None) -> Schedule:
    key = order.key()
    if cache is not None:
        sched = cache.get(key)
        if sched is not None:
            return sched
    sched = order.to_schedule()
    if cache is not None:
        cache[key] = sched
    return sched
