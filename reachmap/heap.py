"""Binary min-heap keyed by accumulated cost.

Thin wrapper over ``heapq``. An insertion counter breaks cost ties so entries
pop in push order; that keeps searches deterministic and means payloads never
have to be comparable.
"""

from __future__ import annotations

import heapq
from itertools import count
from typing import Any, Generic, List, Tuple, TypeVar

T = TypeVar("T")


class MinHeap(Generic[T]):
    """Priority queue of ``(cost, item)`` pairs with stable tie-breaking.

    Lazy deletion is left to the caller: push a cell again whenever its cost
    improves and discard stale pops whose cost exceeds the best known one.
    """

    def __init__(self) -> None:
        self._data: List[Tuple[float, int, T]] = []
        self._counter = count()

    def push(self, cost: float, item: T) -> None:
        heapq.heappush(self._data, (cost, next(self._counter), item))

    def pop(self) -> Tuple[float, T]:
        """Remove and return the cheapest ``(cost, item)``. Raises IndexError when empty."""
        cost, _, item = heapq.heappop(self._data)
        return cost, item

    def peek(self) -> Tuple[float, Any]:
        cost, _, item = self._data[0]
        return cost, item

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)
