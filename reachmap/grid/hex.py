"""Hexagonal tiling in offset coordinates.

Cells are addressed as (row, column). Two layouts are supported:

- rows (pointy-top hexes): every other row is pushed right by half a cell
- columns (flat-top hexes): every other column is pushed down by half a cell

``even`` selects whether the even or the odd lines are the shifted ones. ``size``
is the distance between the centres of two adjacent hexes, which is also the
flat-to-flat width of a single hex.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Tuple

from .base import CellIndex, Neighbor, Point, Topology

SQRT3 = math.sqrt(3)


@dataclass
class HexGrid:
    """Offset-coordinate hex grid (pointy rows or flat columns)."""

    size: float
    distance: float
    columns: bool = False
    even: bool = False
    topology: Topology = field(default=Topology.HEX)

    @property
    def width(self) -> float:
        return self.size * 2 / SQRT3 if self.columns else self.size

    @property
    def height(self) -> float:
        return self.size if self.columns else self.size * 2 / SQRT3

    @property
    def pitch(self) -> float:
        """Spacing between consecutive staggered lines (rows or columns)."""
        return self.size * SQRT3 / 2

    def _shifted(self, line: int) -> bool:
        return (line % 2 == 0) if self.even else (line % 2 == 1)

    def center_of(self, index: CellIndex) -> Point:
        row, col = index
        w, h = self.width, self.height
        if self.columns:
            shift = h / 2 if self._shifted(col) else 0.0
            return Point(col * self.pitch + w / 2, row * h + h / 2 + shift)
        shift = w / 2 if self._shifted(row) else 0.0
        return Point(col * w + w / 2 + shift, row * self.pitch + h / 2)

    def top_left_of(self, index: CellIndex) -> Point:
        center = self.center_of(index)
        return Point(center.x - self.width / 2, center.y - self.height / 2)

    def to_index(self, point: Point) -> CellIndex:
        # Hex cells are the Voronoi regions of their centres, so the owning cell
        # is the nearest centre among the few candidates around a rough guess.
        w, h = self.width, self.height
        if self.columns:
            guess_col = round((point.x - w / 2) / self.pitch)
            candidates = []
            for col in (guess_col - 1, guess_col, guess_col + 1):
                shift = h / 2 if self._shifted(col) else 0.0
                guess_row = round((point.y - h / 2 - shift) / h)
                candidates.extend((row, col) for row in (guess_row - 1, guess_row, guess_row + 1))
        else:
            guess_row = round((point.y - h / 2) / self.pitch)
            candidates = []
            for row in (guess_row - 1, guess_row, guess_row + 1):
                shift = w / 2 if self._shifted(row) else 0.0
                guess_col = round((point.x - w / 2 - shift) / w)
                candidates.extend((row, col) for col in (guess_col - 1, guess_col, guess_col + 1))

        best = candidates[0]
        best_dist = math.inf
        for index in candidates:
            center = self.center_of(index)
            dist = math.hypot(point.x - center.x, point.y - center.y)
            if dist < best_dist:
                best, best_dist = index, dist
        return best

    def neighbors_of(self, index: CellIndex) -> List[Neighbor]:
        row, col = index
        if self.columns:
            side_rows = (row, row + 1) if self._shifted(col) else (row - 1, row)
            cells = [(row - 1, col), (row + 1, col)]
            cells += [(r, col - 1) for r in side_rows]
            cells += [(r, col + 1) for r in side_rows]
        else:
            side_cols = (col, col + 1) if self._shifted(row) else (col - 1, col)
            cells = [(row, col - 1), (row, col + 1)]
            cells += [(row - 1, c) for c in side_cols]
            cells += [(row + 1, c) for c in side_cols]
        return [Neighbor(cell, False) for cell in cells]

    def cell_dimensions(self, index: CellIndex) -> Tuple[float, float]:
        return self.width, self.height

    def result_key(self, index: CellIndex) -> str:
        row, col = index
        return f"{row}.{col}"
