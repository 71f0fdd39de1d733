"""Budget classification of raw search costs into movement tiers.

Each reached cell is assigned the cheapest tier whose budget covers its cost
under the active rounding rule. Independently, every cell is tested against the
single-action limit tier to decide whether it lies in the inner zone, which the
renderer outlines regardless of the cell's own tier color.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from .config import Config
from .errors import InvalidInputError
from .grid import GridProvider, round_half_up
from .schemas import MovementTier, ReachableCell, RoundingRule, SearchResult
from .search import SearchOutcome

# Minimum movement that must remain before the last step under the "any" rule
ANY_RULE_EPSILON = 0.01


def coerce_rounding(rule: RoundingRule | str | None) -> RoundingRule:
    """Accept a RoundingRule, its string value, or None (Config default)."""
    if rule is None:
        rule = Config.ROUNDING_MODE
    if isinstance(rule, RoundingRule):
        return rule
    try:
        return RoundingRule(str(rule).lower())
    except ValueError as exc:
        raise InvalidInputError(
            f"Unknown rounding rule '{rule}'. Expected one of: any, half, full"
        ) from exc


def is_within_budget(cost: float, budget: float, rule: RoundingRule, step: float) -> bool:
    """Whether a cell costing ``cost`` can be entered with ``budget`` left.

    ``step`` approximates the cost of the last step into the cell (one scene
    grid cell). Example with budget 30, step 10 and the half rule: 33 is
    accepted (7 of the 10 fit), 36 is rejected (only 4 fit).
    """

    if cost <= budget:
        return True
    movement_before_step = step - (cost - budget)
    if rule is RoundingRule.ANY:
        return movement_before_step > ANY_RULE_EPSILON
    if rule is RoundingRule.HALF:
        return movement_before_step >= step / 2
    return False


def sort_tiers(tiers: Sequence[MovementTier]) -> list[MovementTier]:
    """Tiers in ascending budget order (stable for equal budgets)."""
    return sorted(tiers, key=lambda tier: tier.distance_budget)


def select_limit_tier(tiers: Sequence[MovementTier]) -> Optional[MovementTier]:
    """Pick the tier that bounds a single action.

    Preference: a tier flagged ``is_action_limit``, then the tier named
    ``Config.LIMIT_TIER_NAME``, then the second-largest budget (or the only
    tier when there is just one).
    """

    if not tiers:
        return None
    for tier in tiers:
        if tier.is_action_limit:
            return tier
    for tier in tiers:
        if tier.name == Config.LIMIT_TIER_NAME:
            return tier
    ordered = sort_tiers(tiers)
    return ordered[-2] if len(ordered) > 1 else ordered[0]


def classify(
    outcome: SearchOutcome,
    grid: GridProvider,
    tiers: Sequence[MovementTier],
    rule: RoundingRule,
    step: float,
) -> SearchResult:
    """Turn raw search costs into a keyed, tier-classified SearchResult.

    Cells at cost 0 are the anchor (the starting footprint): they are reported
    with ``is_anchor`` and no tier. Cells no tier accepts are dropped.
    """

    ordered = sort_tiers(tiers)
    limit = select_limit_tier(ordered)
    limit_budget = limit.distance_budget if limit else 0.0
    limit_color = limit.display_color if limit else None

    cells: Dict[str, ReachableCell] = {}
    for index, entry in outcome.entries().items():
        cost = entry.cost
        is_anchor = cost == 0
        tier: Optional[MovementTier] = None
        if not is_anchor:
            tier = next((t for t in ordered if is_within_budget(cost, t.distance_budget, rule, step)), None)
            if tier is None:
                continue

        top_left = grid.top_left_of(index)
        width, height = grid.cell_dimensions(index)
        cells[grid.result_key(index)] = ReachableCell(
            index=index,
            world_x=round_half_up(top_left.x),
            world_y=round_half_up(top_left.y),
            width=width,
            height=height,
            topology=grid.topology,
            tier=tier,
            cost=cost,
            is_inner_zone=is_within_budget(cost, limit_budget, rule, step),
            is_safe=entry.is_safe,
            is_anchor=is_anchor,
            limit_color=limit_color,
        )

    return SearchResult(
        topology=grid.topology,
        cells=cells,
        iterations=outcome.iterations,
        truncated=outcome.truncated,
    )
