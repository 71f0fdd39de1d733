"""Square tiling with a fixed 8-neighbour table."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Tuple

from .base import SQUARE_OFFSETS, CellIndex, Neighbor, Point, Topology, top_left_key


@dataclass
class SquareGrid:
    """Square cells addressed as (row, column).

    ``size`` is the cell edge in world units and ``distance`` the distance units
    charged for one orthogonal step (e.g. 5 ft per square).
    """

    size: float
    distance: float
    topology: Topology = field(default=Topology.SQUARE)

    def to_index(self, point: Point) -> CellIndex:
        return math.floor(point.y / self.size), math.floor(point.x / self.size)

    def center_of(self, index: CellIndex) -> Point:
        row, col = index
        half = self.size / 2
        return Point(col * self.size + half, row * self.size + half)

    def top_left_of(self, index: CellIndex) -> Point:
        row, col = index
        return Point(col * self.size, row * self.size)

    def neighbors_of(self, index: CellIndex) -> List[Neighbor]:
        row, col = index
        return [Neighbor((row + dr, col + dc), diagonal) for dr, dc, diagonal in SQUARE_OFFSETS]

    def cell_dimensions(self, index: CellIndex) -> Tuple[float, float]:
        return self.size, self.size

    def result_key(self, index: CellIndex) -> str:
        return top_left_key(self.top_left_of(index))
