"""Grid topologies behind one structural interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .base import (
    CellIndex,
    GridProvider,
    Neighbor,
    Point,
    Topology,
    round_half_up,
    top_left_key,
)
from .hex import HexGrid
from .square import SquareGrid
from .synthetic import SyntheticGrid

if TYPE_CHECKING:  # pragma: no cover
    from reachmap.schemas import GridMetrics


def build_grid(metrics: "GridMetrics", *, gridless_resolution: Optional[float] = None) -> GridProvider:
    """Return the grid provider matching ``metrics.topology``.

    Gridless scenes get a synthetic micro-grid; its resolution comes from the
    metrics, then the explicit argument, then ``Config.GRIDLESS_RESOLUTION``.
    """

    if metrics.topology is Topology.HEX:
        return HexGrid(
            size=metrics.size,
            distance=metrics.distance,
            columns=metrics.hex_columns,
            even=metrics.hex_even,
        )
    if metrics.topology is Topology.GRIDLESS:
        resolution = metrics.gridless_resolution or gridless_resolution
        if resolution is None:
            from reachmap.config import Config

            resolution = Config.GRIDLESS_RESOLUTION
        return SyntheticGrid(
            resolution=resolution,
            scene_size=metrics.size,
            scene_distance=metrics.distance,
        )
    return SquareGrid(size=metrics.size, distance=metrics.distance)


__all__ = [
    "CellIndex",
    "GridProvider",
    "Neighbor",
    "Point",
    "Topology",
    "HexGrid",
    "SquareGrid",
    "SyntheticGrid",
    "build_grid",
    "round_half_up",
    "top_left_key",
]
