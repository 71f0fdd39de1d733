"""Entry point: compute the reachable, tier-classified cells for one agent.

Data flow:
1. Reject empty input softly (no tiers or a zero-size footprint -> empty result)
2. Scale tier budgets for metric scenes
3. Build the grid provider for the scene topology
4. Run the frontier search with the matching expansion strategy
5. Classify the raw costs into tiers and the inner zone
"""

from __future__ import annotations

from typing import Optional, Sequence

from .classifier import classify, coerce_rounding
from .config import Config
from .grid import GridProvider, Point, build_grid
from .logging_utils import log_deterministic, log_success
from .schemas import Footprint, GridMetrics, MovementTier, RoundingRule, SearchResult
from .search import run_search, strategy_for
from .visibility import VisibilityOracle


def calculate_reachable_cells(
    footprint: Optional[Footprint],
    tiers: Optional[Sequence[MovementTier]],
    metrics: GridMetrics,
    oracle: VisibilityOracle,
    *,
    origin_override: Optional[Point] = None,
    rounding: RoundingRule | str | None = None,
    iteration_ceiling: Optional[int] = None,
    grid: Optional[GridProvider] = None,
) -> SearchResult:
    """Compute the cells an agent can reach with each of its movement tiers.

    Args:
        footprint: Rectangle the agent occupies (top-left anchored, world units)
        tiers: Movement tiers in any order; budgets in scene distance units
        metrics: Scene grid metrics (topology, cell size, distance per cell, units)
        oracle: Visibility backend bound to the current wall snapshot
        origin_override: Top-left point to measure costs from instead of the
            footprint's own position (the planning "anchor"). Not validated.
        rounding: Rounding rule (defaults to Config.ROUNDING_MODE)
        iteration_ceiling: Maximum cell expansions (defaults to Config.ITERATION_CEILING)
        grid: Pre-built grid provider; built from ``metrics`` when omitted

    Returns:
        A SearchResult. Empty when there is no movement data or no footprint;
        ``truncated`` when the iteration ceiling cut the search short.

    Raises:
        VisibilityOracleError: If the oracle fails. Visibility is never guessed.
        InvalidInputError: If ``rounding`` names an unknown rule.
    """

    rule = coerce_rounding(rounding)

    if not tiers or footprint is None or footprint.is_empty:
        if Config.DEBUG_SEARCH:
            log_deterministic("[Reach] No movement data or empty footprint; returning empty result")
        return SearchResult.empty(metrics.topology)

    scale = metrics.distance_scale
    scaled = [tier.scaled(scale) for tier in tiers]
    max_budget = max(tier.distance_budget for tier in scaled)

    start = footprint
    if origin_override is not None:
        start = footprint.moved_to(origin_override.x, origin_override.y)

    grid = grid or build_grid(metrics)
    outcome = run_search(
        grid,
        start,
        strategy_for(metrics.topology),
        oracle,
        max_budget=max_budget,
        bounds=metrics.bounds,
        iteration_ceiling=iteration_ceiling,
    )

    # Tier rounding always uses one scene cell as the "last step", also on the
    # gridless micro-grid
    result = classify(outcome, grid, scaled, rule, metrics.distance)

    if Config.DEBUG_SEARCH:
        log_success(
            f"[Reach] {metrics.topology.value}: {len(result)} cells classified "
            f"({len(outcome.costs)} reached, rule={rule.value})"
        )
    return result
