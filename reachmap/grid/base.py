"""Structural grid interface shared by every topology.

The search engine never asks which grid it is walking. It only calls the
methods below, so square, hex and the gridless micro-grid are three unrelated
providers that happen to satisfy the same protocol.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, NamedTuple, Protocol, Tuple

CellIndex = Tuple[int, int]


class Topology(str, Enum):
    """Grid topology selector."""

    SQUARE = "square"
    HEX = "hex"
    GRIDLESS = "gridless"


class Point(NamedTuple):
    """A location in world units (scene pixels)."""

    x: float
    y: float


class Neighbor(NamedTuple):
    """An adjacent cell plus whether the step to it is diagonal."""

    index: CellIndex
    is_diagonal: bool


class GridProvider(Protocol):
    """Coordinate conversions and adjacency for one topology."""

    topology: Topology
    # Cell size in world units
    size: float
    # Distance units charged for one orthogonal step
    distance: float

    def to_index(self, point: Point) -> CellIndex:
        ...

    def center_of(self, index: CellIndex) -> Point:
        ...

    def top_left_of(self, index: CellIndex) -> Point:
        ...

    def neighbors_of(self, index: CellIndex) -> List[Neighbor]:
        ...

    def cell_dimensions(self, index: CellIndex) -> Tuple[float, float]:
        ...

    def result_key(self, index: CellIndex) -> str:
        ...


# Fixed 8-neighbour table (row offset, column offset, diagonal) for square tilings
SQUARE_OFFSETS: Tuple[Tuple[int, int, bool], ...] = (
    (-1, 0, False),
    (1, 0, False),
    (0, -1, False),
    (0, 1, False),
    (-1, -1, True),
    (-1, 1, True),
    (1, -1, True),
    (1, 1, True),
)


def top_left_key(point: Point) -> str:
    """Rendering key built from a rounded world-space top-left corner."""
    return f"{round_half_up(point.x)}.{round_half_up(point.y)}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (never to even)."""
    return int(math.floor(value + 0.5))
