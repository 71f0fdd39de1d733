"""Frontier search engine: multi-source Dijkstra with lazy deletion.

The engine knows nothing about topology. It seeds every cell covered by the
agent's footprint at cost 0, then repeatedly pops the cheapest frontier cell and
hands it to an expansion strategy (square, hex or gridless), which relaxes the
neighbours through ``SearchContext.relax``.

Everything the search allocates (cost map, safety map, heap, visibility memo)
lives on the ``SearchContext`` of one call. Only the resulting ``SearchOutcome``
leaves this module.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from ..config import Config
from ..grid import CellIndex, GridProvider, Point
from ..heap import MinHeap
from ..logging_utils import log_deterministic, log_warning
from ..schemas import CostEntry, Footprint, Rect
from ..visibility import SearchVisibility, VisibilityOracle

# Footprint is shrunk by this fraction of a cell before testing which cell
# centres it covers, so tokens that sit exactly on grid lines do not claim the
# neighbouring row or column.
FOOTPRINT_MARGIN = 0.02


def should_replace(
    old_cost: Optional[float],
    old_safe: Optional[bool],
    new_cost: float,
    new_safe: bool,
) -> bool:
    """Tagged (cost, safety) comparison used for every relaxation.

    - no previous entry: accept
    - safe -> unsafe: reject, even when cheaper
    - unsafe -> safe: accept, even when more expensive
    - same safety: accept only when strictly cheaper

    The second and third rules deliberately break plain Dijkstra ordering: a
    ghost shortcut must never hide a real corridor found later.
    """

    if old_cost is None:
        return True
    if old_safe and not new_safe:
        return False
    if not old_safe and new_safe:
        return True
    return new_cost < old_cost


@dataclass
class SearchOutcome:
    """Raw cost and safety maps produced by one search."""

    costs: Dict[CellIndex, float] = field(default_factory=dict)
    safety: Dict[CellIndex, bool] = field(default_factory=dict)
    seeds: List[CellIndex] = field(default_factory=list)
    iterations: int = 0
    truncated: bool = False

    def entries(self) -> Dict[CellIndex, CostEntry]:
        """Cost map and safety map merged per cell; a cell without a safety flag counts as unsafe."""
        return {
            index: CostEntry(cost=cost, is_safe=self.safety.get(index, False))
            for index, cost in self.costs.items()
        }


@dataclass
class SearchContext:
    """Call-scoped arena shared by the engine and the active strategy."""

    grid: GridProvider
    visibility: SearchVisibility
    footprint: Footprint
    horizon: float
    bounds: Optional[Rect] = None
    heap: MinHeap = field(default_factory=MinHeap)
    outcome: SearchOutcome = field(default_factory=SearchOutcome)

    @property
    def center(self) -> Point:
        return self.footprint.center

    def in_bounds(self, point: Point) -> bool:
        return self.bounds is None or self.bounds.contains(point.x, point.y)

    def cell_clear(self, index: CellIndex, start: Point, end: Point) -> bool:
        """Strict centre-to-centre check: target is a safe spot and the segment is open."""
        if self.visibility.cell_unsafe(index, end):
            return False
        return not self.visibility.segment_blocked(start, end)

    def improves(self, index: CellIndex, cost: float, safe: bool = True) -> bool:
        costs = self.outcome.costs
        return should_replace(costs.get(index), self.outcome.safety.get(index), cost, safe)

    def relax(self, index: CellIndex, cost: float, safe: bool = True, payload: Any = None, *, enqueue: bool = True) -> bool:
        """Record ``cost`` for ``index`` if the safety-priority rule allows it."""
        if not self.improves(index, cost, safe):
            return False
        self.outcome.costs[index] = cost
        self.outcome.safety[index] = safe
        if enqueue:
            self.heap.push(cost, (index, payload))
        return True


class ExpansionStrategy(Protocol):
    """Topology-specific neighbour expansion plugged into the engine."""

    def horizon(self, max_budget: float, grid: GridProvider) -> float:
        ...

    def seed_payload(self, ctx: SearchContext) -> Any:
        ...

    def expand(self, ctx: SearchContext, index: CellIndex, cost: float, payload: Any) -> None:
        ...


def seed_footprint(ctx: SearchContext, payload: Any = None) -> List[CellIndex]:
    """Seed every cell covered by the footprint at cost 0.

    A cell is covered when its centre lies inside the margin-shrunk footprint and
    is visible from the footprint's true centre (a wall slicing through a large
    token excludes the cells behind it). Tokens too small to cover any centre
    fall back to the single cell containing their centre.
    """

    grid = ctx.grid
    fp = ctx.footprint
    center = ctx.center
    margin = grid.size * FOOTPRINT_MARGIN
    safe_left = fp.origin_x + margin
    safe_right = fp.origin_x + fp.width - margin
    safe_top = fp.origin_y + margin
    safe_bottom = fp.origin_y + fp.height - margin

    first = grid.to_index(Point(fp.origin_x, fp.origin_y))
    last = grid.to_index(Point(fp.origin_x + fp.width, fp.origin_y + fp.height))
    seeds: List[CellIndex] = []
    for i in range(min(first[0], last[0]) - 1, max(first[0], last[0]) + 2):
        for j in range(min(first[1], last[1]) - 1, max(first[1], last[1]) + 2):
            cell_center = grid.center_of((i, j))
            if not (safe_left <= cell_center.x <= safe_right and safe_top <= cell_center.y <= safe_bottom):
                continue
            if ctx.visibility.segment_blocked(center, cell_center):
                continue
            if ctx.relax((i, j), 0.0, True, payload):
                seeds.append((i, j))

    if not seeds:
        fallback = grid.to_index(center)
        ctx.relax(fallback, 0.0, True, payload)
        seeds.append(fallback)

    ctx.outcome.seeds = seeds
    return seeds


def run_search(
    grid: GridProvider,
    footprint: Footprint,
    strategy: ExpansionStrategy,
    oracle: VisibilityOracle,
    *,
    max_budget: float,
    bounds: Optional[Rect] = None,
    iteration_ceiling: Optional[int] = None,
) -> SearchOutcome:
    """Run one bounded frontier search and return the raw cost/safety maps.

    Stops when the heap empties or after ``iteration_ceiling`` expansions
    (stale pops are not counted). Hitting the ceiling is a soft failure: the
    partial maps come back with ``truncated=True``. Oracle failures propagate as ``VisibilityOracleError``.
    """

    ceiling = iteration_ceiling or Config.ITERATION_CEILING
    ctx = SearchContext(
        grid=grid,
        visibility=SearchVisibility(oracle),
        footprint=footprint,
        horizon=strategy.horizon(max_budget, grid),
        bounds=bounds,
    )
    outcome = ctx.outcome

    seeds = seed_footprint(ctx, strategy.seed_payload(ctx))
    if Config.DEBUG_SEARCH:
        log_deterministic(
            f"[Search] {grid.topology.value} seeds={len(seeds)} horizon={ctx.horizon:.2f} "
            f"center=({ctx.center.x:.1f}, {ctx.center.y:.1f})"
        )

    while ctx.heap:
        cost, (index, payload) = ctx.heap.pop()
        # Stale entry: a cheaper route to this cell was recorded after the push
        if cost > outcome.costs.get(index, math.inf):
            continue
        if outcome.iterations >= ceiling:
            outcome.truncated = True
            log_warning(
                f"[Search] Iteration ceiling {ceiling} reached with {len(ctx.heap) + 1} frontier entries left; "
                "returning partial results"
            )
            break
        outcome.iterations += 1
        strategy.expand(ctx, index, cost, payload)

    if Config.DEBUG_SEARCH:
        unsafe = sum(1 for safe in outcome.safety.values() if not safe)
        log_deterministic(
            f"[Search] done: iterations={outcome.iterations} cells={len(outcome.costs)} "
            f"ghost={unsafe} segment_checks={ctx.visibility.segment_queries} "
            f"unsafe_checks={ctx.visibility.unsafe_queries}"
        )
    return outcome
