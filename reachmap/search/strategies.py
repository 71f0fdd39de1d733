"""Topology-specific expansion policies for the frontier search.

- ``SquareStrategy``: 8 neighbours, diagonal steps cost ~1.4142x, strict
  centre-to-centre visibility.
- ``HexStrategy``: 6 neighbours plus a jump/bridge detour when a wall bisects
  the shared edge.
- ``GridlessStrategy``: any-angle (Theta*-style) relaxation over the synthetic
  micro-grid, measuring Euclidean distance from the last visible anchor point.
"""

from __future__ import annotations

import math
from typing import Any, NamedTuple, Optional

from ..grid import CellIndex, GridProvider, Point, SyntheticGrid, Topology
from .engine import SearchContext

DIAGONAL_FACTOR = 1.4142


class SquareStrategy:
    """Dijkstra over 8-connected squares with strict centre checks.

    The full centre-to-centre segment is tested (never a shortened ray): rays
    trimmed to 90% of their length slip past wall corners at 45 degrees.
    """

    def horizon(self, max_budget: float, grid: GridProvider) -> float:
        return max_budget + grid.distance

    def seed_payload(self, ctx: SearchContext) -> Any:
        return None

    def step_cost(self, grid: GridProvider, is_diagonal: bool) -> float:
        step = grid.distance * DIAGONAL_FACTOR if is_diagonal else grid.distance
        return round(step, 2)

    def expand(self, ctx: SearchContext, index: CellIndex, cost: float, payload: Any) -> None:
        grid = ctx.grid
        current_center = grid.center_of(index)
        for neighbor in grid.neighbors_of(index):
            neighbor_center = grid.center_of(neighbor.index)
            if not ctx.in_bounds(neighbor_center):
                continue
            new_cost = cost + self.step_cost(grid, neighbor.is_diagonal)
            if new_cost > ctx.horizon:
                continue
            # Cheap cost test first; visibility is only asked for improving edges
            if not ctx.improves(neighbor.index, new_cost):
                continue
            if ctx.cell_clear(neighbor.index, current_center, neighbor_center):
                ctx.relax(neighbor.index, new_cost)


class HexStrategy:
    """Dijkstra over hexes with jump/bridge detours around bisected edges.

    When a wall cuts the edge to a direct neighbour, each of that neighbour's own
    neighbours visible from the current hex is a jump target. The jump target is
    reached at ``cost + 2*step``; the skipped neighbour becomes a ghost (unsafe)
    bridge at ``cost + step``. Bridges are recorded but never expanded.
    """

    def horizon(self, max_budget: float, grid: GridProvider) -> float:
        return max_budget + grid.distance

    def seed_payload(self, ctx: SearchContext) -> Any:
        return None

    def expand(self, ctx: SearchContext, index: CellIndex, cost: float, payload: Any) -> None:
        grid = ctx.grid
        step = grid.distance
        current_center = grid.center_of(index)
        for neighbor in grid.neighbors_of(index):
            neighbor_center = grid.center_of(neighbor.index)
            if not ctx.in_bounds(neighbor_center):
                continue

            if ctx.cell_clear(neighbor.index, current_center, neighbor_center):
                new_cost = cost + step
                if new_cost <= ctx.horizon:
                    ctx.relax(neighbor.index, new_cost)
                continue

            self._jump(ctx, index, cost, current_center, neighbor.index)

    def _jump(
        self,
        ctx: SearchContext,
        index: CellIndex,
        cost: float,
        current_center: Point,
        bridge: CellIndex,
    ) -> None:
        grid = ctx.grid
        step = grid.distance
        jump_cost = cost + step * 2
        bridge_cost = cost + step
        if jump_cost > ctx.horizon:
            return
        for target in grid.neighbors_of(bridge):
            if target.index == index:
                continue
            target_center = grid.center_of(target.index)
            if not ctx.in_bounds(target_center):
                continue
            if not ctx.cell_clear(target.index, current_center, target_center):
                continue
            ctx.relax(target.index, jump_cost)
            ctx.relax(bridge, bridge_cost, False, enqueue=False)


class LosOrigin(NamedTuple):
    """Point the any-angle search measures straight-line distance from."""

    point: Point
    cost: float
    # True only for the agent's own centre; its radius is not charged
    is_initial: bool


class GridlessStrategy:
    """Any-angle (Theta*-style) relaxation on the synthetic micro-grid.

    Every frontier cell remembers a line-of-sight origin. A neighbour visible from
    that origin costs ``origin.cost + euclid(origin, neighbour)``; the agent's own
    radius is subtracted once while the origin is still the true centre. When the
    origin is hidden (a corner was passed), the step falls back to a micro-step
    from the current cell and the current centre becomes the new origin. The
    result is a near-circular reach that bends around walls.
    """

    def __init__(self, scene_steps: float = 2.0) -> None:
        # Horizon slack in scene grid cells beyond the largest budget
        self.scene_steps = scene_steps

    def horizon(self, max_budget: float, grid: GridProvider) -> float:
        scene_distance = grid.scene_distance if isinstance(grid, SyntheticGrid) else grid.distance
        return max_budget + scene_distance * self.scene_steps

    def seed_payload(self, ctx: SearchContext) -> Any:
        return LosOrigin(ctx.center, 0.0, True)

    def _to_units(self, grid: GridProvider, length: float) -> float:
        if isinstance(grid, SyntheticGrid):
            return grid.to_units(length)
        return (length / grid.size) * grid.distance

    def radius_units(self, ctx: SearchContext) -> float:
        radius = min(ctx.footprint.width, ctx.footprint.height) / 2
        return self._to_units(ctx.grid, radius)

    def expand(self, ctx: SearchContext, index: CellIndex, cost: float, payload: Optional[LosOrigin]) -> None:
        grid = ctx.grid
        origin = payload or LosOrigin(ctx.center, 0.0, True)
        current_center = grid.center_of(index)
        radius = self.radius_units(ctx) if origin.is_initial else 0.0

        for neighbor in grid.neighbors_of(index):
            neighbor_center = grid.center_of(neighbor.index)
            if not ctx.in_bounds(neighbor_center):
                continue
            if ctx.visibility.cell_unsafe(neighbor.index, neighbor_center):
                continue

            if not ctx.visibility.segment_blocked(origin.point, neighbor_center):
                dist = self._to_units(
                    grid, math.hypot(neighbor_center.x - origin.point.x, neighbor_center.y - origin.point.y)
                )
                if origin.is_initial:
                    dist = max(0.0, dist - radius)
                new_cost = origin.cost + dist
                next_origin = origin
            else:
                # Sight to the origin is lost past a corner: micro-step and drop a new origin here
                if ctx.visibility.segment_blocked(current_center, neighbor_center):
                    continue
                step = self._to_units(
                    grid, math.hypot(neighbor_center.x - current_center.x, neighbor_center.y - current_center.y)
                )
                new_cost = cost + step
                next_origin = LosOrigin(current_center, cost, False)

            if new_cost > ctx.horizon:
                continue
            ctx.relax(neighbor.index, new_cost, True, next_origin)


def strategy_for(topology: Topology):
    """Return a fresh expansion strategy for ``topology``."""
    if topology is Topology.HEX:
        return HexStrategy()
    if topology is Topology.GRIDLESS:
        return GridlessStrategy()
    return SquareStrategy()
