"""
Pydantic schemas for reachmap searches.

All data exchanged with callers is defined here: movement tiers and footprints
go in, a SearchResult of classified cells comes out.

Design Philosophy:
- Inputs are frozen models; a search never mutates what the caller passed in
- Display data (colors, labels) is opaque and carried through untouched
- Results are keyed by deterministic strings so repeated calls compare equal
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from reachmap.grid import CellIndex, Point, Topology


# ============================================================================
# Geometry
# ============================================================================

# Unit labels that mark a scene measured in metres. Tier budgets are authored in
# feet, so metric scenes scale every budget down by FT_PER_METER.
METRIC_UNITS = ("m", "m.", "meter", "meters", "metre", "metres")
FT_PER_METER = 3.33333


class RoundingRule(str, Enum):
    """How much of a final step may exceed a tier's budget.

    - any: the cell is accepted if any movement was left before the last step
    - half: at least half of the last step must fit within the budget
    - full: the whole step must fit
    """

    ANY = "any"
    HALF = "half"
    FULL = "full"


class Rect(BaseModel):
    """Axis-aligned rectangle in world units (used for scene bounds)."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


class GridMetrics(BaseModel):
    """Measuring grid of the scene the agent stands on."""

    model_config = ConfigDict(frozen=True)

    topology: Topology = Field(Topology.SQUARE, description="square, hex or gridless")
    size: float = Field(..., gt=0, description="Cell size in world units (pixels)")
    distance: float = Field(..., gt=0, description="Distance units per grid cell (e.g. 5 ft)")
    units: str = Field("ft", description="Distance unit label of the scene")
    bounds: Optional[Rect] = Field(
        None, description="Scene rectangle; cell centres outside it are never entered",
    )
    # Hex layout flags. Ignored by other topologies.
    hex_columns: bool = Field(False, description="Flat-top hexes in staggered columns")
    hex_even: bool = Field(False, description="Even rows/columns are the shifted ones")
    # Gridless only: micro-grid cell size in world units (None = Config default)
    gridless_resolution: Optional[float] = Field(None, gt=0)

    @property
    def is_metric(self) -> bool:
        return (self.units or "").lower() in METRIC_UNITS

    @property
    def distance_scale(self) -> float:
        """Multiplier applied to every tier budget before searching."""
        return 1 / FT_PER_METER if self.is_metric else 1.0


# ============================================================================
# Search Inputs
# ============================================================================


class MovementTier(BaseModel):
    """A named movement pace with its distance allowance.

    Tiers arrive in any order; the classifier sorts them by budget. The color
    is an opaque token for the renderer and is never interpreted here.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pace identifier (Walk, Run, Sprint, ...)")
    label: Optional[str] = Field(None, description="Human-friendly pace name")
    distance_budget: float = Field(..., ge=0, description="Distance allowance in scene units")
    penalty_modifier: float = Field(0, description="Action penalty while moving at this pace")
    display_color: str = Field("#FFFFFF", description="Opaque color token for the renderer")
    is_action_limit: bool = Field(
        False, description="Marks the single-action limit that bounds the inner zone",
    )

    def scaled(self, factor: float) -> "MovementTier":
        """Return a copy with the budget multiplied by ``factor``."""
        if factor == 1:
            return self
        return self.model_copy(update={"distance_budget": self.distance_budget * factor})


class Footprint(BaseModel):
    """Top-left anchored rectangle the agent occupies when the search starts."""

    model_config = ConfigDict(frozen=True)

    origin_x: float
    origin_y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def center(self) -> Point:
        return Point(self.origin_x + self.width / 2, self.origin_y + self.height / 2)

    def moved_to(self, x: float, y: float) -> "Footprint":
        """Same-sized footprint with its top-left at ``(x, y)``."""
        return self.model_copy(update={"origin_x": x, "origin_y": y})


# ============================================================================
# Search Outputs
# ============================================================================


class CostEntry(BaseModel):
    """Minimal accumulated cost of one cell and whether it is a valid stop."""

    cost: float = Field(..., ge=0)
    # False for ghost/bridge cells reached only by squeezing past a corner
    is_safe: bool = True


class ReachableCell(BaseModel):
    """One classified cell, ready for a renderer to draw."""

    model_config = ConfigDict(frozen=True)

    index: CellIndex
    world_x: int = Field(..., description="Rounded world-space left edge")
    world_y: int = Field(..., description="Rounded world-space top edge")
    width: float
    height: float
    topology: Topology
    tier: Optional[MovementTier] = Field(
        None, description="Cheapest tier whose budget covers the cost (None for anchor cells)",
    )
    cost: float
    is_inner_zone: bool = Field(..., description="Within the single-action limit")
    is_safe: bool
    is_anchor: bool = Field(..., description="Part of the starting footprint (cost 0)")
    limit_color: Optional[str] = Field(None, description="Display color of the limit tier")

    @property
    def tier_name(self) -> Optional[str]:
        return self.tier.name if self.tier is not None else None


class SearchResult(BaseModel):
    """Classified cells of one search, keyed by rendering key.

    Keys come from rounded world coordinates (square/gridless top-left corner)
    or from the cell index (hex), so identical inputs give identical keys.
    Callers may cache a result by (agent, origin, tiers, wall snapshot) and must
    drop it once any of those change.
    """

    model_config = ConfigDict(frozen=True)

    topology: Optional[Topology] = None
    cells: Dict[str, ReachableCell] = Field(default_factory=dict)
    iterations: int = Field(0, ge=0, description="Cell expansions performed by the search")
    truncated: bool = Field(False, description="True when the iteration ceiling stopped the search")

    @classmethod
    def empty(cls, topology: Optional[Topology] = None) -> "SearchResult":
        return cls(topology=topology)

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, key: object) -> bool:
        return key in self.cells

    def __getitem__(self, key: str) -> ReachableCell:
        return self.cells[key]

    def get(self, key: str, default: Optional[ReachableCell] = None) -> Optional[ReachableCell]:
        return self.cells.get(key, default)

    def keys(self) -> List[str]:
        return list(self.cells.keys())

    def values(self) -> List[ReachableCell]:
        return list(self.cells.values())

    def items(self) -> List[Tuple[str, ReachableCell]]:
        return list(self.cells.items())

    def by_index(self) -> Dict[CellIndex, ReachableCell]:
        """Re-key the cells by grid index (handy for tests and debugging)."""
        return {cell.index: cell for cell in self.cells.values()}

    def iter_tier(self, name: str) -> Iterator[ReachableCell]:
        """Yield cells assigned to the tier called ``name``."""
        for cell in self.cells.values():
            if cell.tier is not None and cell.tier.name == name:
                yield cell
