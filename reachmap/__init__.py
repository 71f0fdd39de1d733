"""
Reachmap - wall-aware movement range search for tabletop-style maps.

Given an agent's footprint, its movement tiers and a visibility oracle over the
scene's walls, compute which cells it can reach at each pace on square, hex or
gridless scenes.

No rendering, no host framework, no global state between calls.
All dependencies injected by the caller.
"""

__version__ = "0.3.0"

from .errors import InvalidInputError, ReachmapError, VisibilityOracleError
from .config import Config

# Grid abstraction
from .grid import (
    CellIndex,
    GridProvider,
    HexGrid,
    Neighbor,
    Point,
    SquareGrid,
    SyntheticGrid,
    Topology,
    build_grid,
)

# Core schemas
from .schemas import (
    CostEntry,
    Footprint,
    GridMetrics,
    MovementTier,
    ReachableCell,
    Rect,
    RoundingRule,
    SearchResult,
)

# Visibility
from .visibility import (
    DoorState,
    SearchVisibility,
    VisibilityOracle,
    Wall,
    WallVisibilityOracle,
)

# Search and classification
from .search import SearchOutcome, run_search, strategy_for
from .classifier import classify, is_within_budget, select_limit_tier
from .calculator import calculate_reachable_cells

# Caller-side helpers
from .paces import DEFAULT_PACE_COLORS, tiers_from_movement_block
from .session import PlanningSession
from .scenario import Scenario, ScenarioLoader

__all__ = [
    # Errors
    "ReachmapError",
    "InvalidInputError",
    "VisibilityOracleError",
    "Config",
    # Grid
    "CellIndex",
    "GridProvider",
    "HexGrid",
    "Neighbor",
    "Point",
    "SquareGrid",
    "SyntheticGrid",
    "Topology",
    "build_grid",
    # Schemas
    "CostEntry",
    "Footprint",
    "GridMetrics",
    "MovementTier",
    "ReachableCell",
    "Rect",
    "RoundingRule",
    "SearchResult",
    # Visibility
    "DoorState",
    "SearchVisibility",
    "VisibilityOracle",
    "Wall",
    "WallVisibilityOracle",
    # Search
    "SearchOutcome",
    "run_search",
    "strategy_for",
    "classify",
    "is_within_budget",
    "select_limit_tier",
    "calculate_reachable_cells",
    # Helpers
    "DEFAULT_PACE_COLORS",
    "tiers_from_movement_block",
    "PlanningSession",
    "Scenario",
    "ScenarioLoader",
]
