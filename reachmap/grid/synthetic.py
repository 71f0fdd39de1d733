"""Synthetic micro-grid used to approximate continuous (gridless) space.

Gridless scenes have no cells of their own. We lay a fine uniform square tiling
over the scene so the frontier search can walk it exactly like a square grid;
the any-angle strategy then corrects the blocky step costs back to Euclidean
distances.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Tuple

from .base import SQUARE_OFFSETS, CellIndex, Neighbor, Point, Topology, top_left_key


@dataclass
class SyntheticGrid:
    """Uniform tiling of ``resolution`` world units per cell.

    ``scene_size``/``scene_distance`` describe the host scene's own measuring
    grid (world units and distance units per scene cell). They convert the
    resolution into distance units so one micro-step costs
    ``resolution / scene_size * scene_distance``.
    """

    resolution: float
    scene_size: float
    scene_distance: float
    topology: Topology = field(default=Topology.GRIDLESS)

    @property
    def size(self) -> float:
        return self.resolution

    @property
    def distance(self) -> float:
        return (self.resolution / self.scene_size) * self.scene_distance

    def to_units(self, world_length: float) -> float:
        """Convert a world-space length into scene distance units."""
        return (world_length / self.scene_size) * self.scene_distance

    def to_index(self, point: Point) -> CellIndex:
        return math.floor(point.y / self.resolution), math.floor(point.x / self.resolution)

    def center_of(self, index: CellIndex) -> Point:
        row, col = index
        half = self.resolution / 2
        return Point(col * self.resolution + half, row * self.resolution + half)

    def top_left_of(self, index: CellIndex) -> Point:
        row, col = index
        return Point(col * self.resolution, row * self.resolution)

    def neighbors_of(self, index: CellIndex) -> List[Neighbor]:
        row, col = index
        return [Neighbor((row + dr, col + dc), diagonal) for dr, dc, diagonal in SQUARE_OFFSETS]

    def cell_dimensions(self, index: CellIndex) -> Tuple[float, float]:
        return self.resolution, self.resolution

    def result_key(self, index: CellIndex) -> str:
        return top_left_key(self.top_left_of(index))
