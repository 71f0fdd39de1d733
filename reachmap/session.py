"""Anchor & Scout planning sessions.

While a player drags an agent around (the "scout"), movement costs keep being
measured from where the turn started (the "anchor"). The core calculator only
accepts an origin override; this module holds the caller-side bookkeeping:

- one anchor per agent, set the first time the agent is seen and kept across
  deselect/reselect until explicitly reset
- one cached SearchResult per agent, reused while the anchor, tiers, rounding
  rule, grid metrics and wall snapshot stay the same

The session is not thread-safe; callers serialize access to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Sequence, Tuple

from .calculator import calculate_reachable_cells
from .classifier import coerce_rounding
from .config import Config
from .grid import Point
from .logging_utils import log_info
from .schemas import Footprint, GridMetrics, MovementTier, RoundingRule, SearchResult
from .visibility import VisibilityOracle

CacheKey = Tuple[Hashable, ...]


@dataclass
class _CachedResult:
    key: CacheKey
    result: SearchResult


def budget_signature(tiers: Sequence[MovementTier]) -> Tuple[Tuple[Hashable, ...], ...]:
    """Hashable summary of every tier field that ends up in a result."""
    return tuple(
        sorted(
            (
                tier.name,
                tier.distance_budget,
                tier.is_action_limit,
                tier.label or "",
                tier.display_color,
                tier.penalty_modifier,
            )
            for tier in tiers
        )
    )


class PlanningSession:
    """Tracks per-agent anchors and reuses results until something invalidates them."""

    def __init__(self) -> None:
        # Maps agent_id -> anchor top-left. Survives deselection on purpose.
        self._anchors: Dict[str, Point] = {}
        self._results: Dict[str, _CachedResult] = {}
        # Bumped whenever walls change; part of every cache key
        self.wall_version = 0

    def anchor_for(self, agent_id: str, position: Point) -> Point:
        """Return the agent's anchor, recording ``position`` on first sight."""
        anchor = self._anchors.get(agent_id)
        if anchor is None:
            anchor = Point(position.x, position.y)
            self._anchors[agent_id] = anchor
        return anchor

    def has_anchor(self, agent_id: str) -> bool:
        return agent_id in self._anchors

    def reset_anchor(self, agent_id: str, position: Point) -> Point:
        """Start a new planning turn from ``position``."""
        anchor = Point(position.x, position.y)
        self._anchors[agent_id] = anchor
        self._results.pop(agent_id, None)
        if Config.DEBUG_SEARCH:
            log_info(f"[Session] Anchor reset for {agent_id} at ({anchor.x:g}, {anchor.y:g})")
        return anchor

    def forget(self, agent_id: str) -> None:
        """Drop everything known about an agent (e.g. it was deleted)."""
        self._anchors.pop(agent_id, None)
        self._results.pop(agent_id, None)

    def walls_changed(self) -> None:
        """Invalidate every cached result; anchors stay."""
        self.wall_version += 1
        self._results.clear()

    def grid_changed(self) -> None:
        """Grid geometry changed: old anchors no longer mean anything."""
        self._anchors.clear()
        self._results.clear()

    def cached(self, agent_id: str) -> Optional[SearchResult]:
        entry = self._results.get(agent_id)
        return entry.result if entry else None

    def compute(
        self,
        agent_id: str,
        footprint: Footprint,
        tiers: Sequence[MovementTier],
        metrics: GridMetrics,
        oracle: VisibilityOracle,
        *,
        rounding: RoundingRule | str | None = None,
    ) -> SearchResult:
        """Reachable cells measured from the agent's anchor.

        ``footprint`` is the agent's live (scout) position; only its size and
        first-seen position matter for costs.
        """

        anchor = self.anchor_for(agent_id, Point(footprint.origin_x, footprint.origin_y))
        rule = coerce_rounding(rounding)
        key: CacheKey = (
            agent_id,
            anchor,
            footprint.width,
            footprint.height,
            budget_signature(tiers or ()),
            rule,
            metrics,
            self.wall_version,
        )
        entry = self._results.get(agent_id)
        if entry is not None and entry.key == key:
            return entry.result

        result = calculate_reachable_cells(
            footprint,
            tiers,
            metrics,
            oracle,
            origin_override=anchor,
            rounding=rule,
        )
        self._results[agent_id] = _CachedResult(key=key, result=result)
        return result
