"""Build movement tiers from an actor's movement block.

Host systems describe movement as a block of modes (walking, swimming, ...),
one of which is selected. Each mode lists pace rates: the pace identity, its
penalty modifier and the distance covered per phase at that pace. This module
validates that structure and converts the selected mode into MovementTier
objects for the calculator.

Example block:
```json
{
  "_selected": "Running",
  "_options": [
    {
      "value": "Running",
      "paceRates": [
        {"pace": {"value": "Walk", "label": "Walk", "modifier": 0}, "perPhase": 15},
        {"pace": {"value": "Dash", "label": "Dash", "modifier": -50}, "perPhase": 75}
      ]
    }
  ]
}
```
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import Config
from .logging_utils import log_info
from .schemas import MovementTier

# Default display colors per pace. Renderers may override any of them.
DEFAULT_PACE_COLORS: Dict[str, str] = {
    "Creep": "#00FFFF",
    "Walk": "#00FF00",
    "Jog": "#ADFF2F",
    "Run": "#FFFF00",
    "Sprint": "#FFA500",
    "Dash": "#FF0000",
}
ANCHOR_COLOR = "#0000AA"
FALLBACK_COLOR = "#FFFFFF"


class PaceInfo(BaseModel):
    """Identity of one pace (value is the stable key, label is for display)."""

    value: str
    label: Optional[str] = None
    modifier: float = 0


class PaceRate(BaseModel):
    """Distance covered per phase at a given pace."""

    model_config = ConfigDict(populate_by_name=True)

    pace: PaceInfo
    per_phase: float = Field(..., ge=0, alias="perPhase")
    allowed_pace: Optional[Any] = Field(None, alias="allowedPace")


class MovementOption(BaseModel):
    """One movement mode and its pace rates."""

    model_config = ConfigDict(populate_by_name=True)

    value: str
    pace_rates: Optional[List[PaceRate]] = Field(None, alias="paceRates")


class MovementBlock(BaseModel):
    """Selected movement mode plus all available modes."""

    model_config = ConfigDict(populate_by_name=True)

    selected: Optional[str] = Field(None, alias="_selected")
    options: List[MovementOption] = Field(default_factory=list, alias="_options")

    def active_option(self) -> Optional[MovementOption]:
        return next((option for option in self.options if option.value == self.selected), None)


def tiers_from_movement_block(
    block: Mapping[str, Any] | MovementBlock | None,
    colors: Optional[Mapping[str, str]] = None,
) -> Optional[List[MovementTier]]:
    """Convert the selected movement mode into tiers, largest budget first.

    Returns None when there is no block, no selected mode, or the mode carries
    no pace rates. Descending order suits renderers that paint the widest
    ring first and overlay narrower ones; the classifier re-sorts anyway.
    """

    if not block:
        return None
    movement = block if isinstance(block, MovementBlock) else MovementBlock.model_validate(block)
    option = movement.active_option()
    if option is None or not option.pace_rates:
        return None

    palette = {**DEFAULT_PACE_COLORS, **(colors or {})}
    tiers = [
        MovementTier(
            name=rate.pace.value,
            label=rate.pace.label or rate.pace.value,
            distance_budget=rate.per_phase,
            penalty_modifier=rate.pace.modifier,
            display_color=palette.get(rate.pace.value, FALLBACK_COLOR),
        )
        for rate in option.pace_rates
    ]
    tiers.sort(key=lambda tier: tier.distance_budget, reverse=True)

    if Config.DEBUG_SEARCH:
        summary = ", ".join(f"{tier.name}={tier.distance_budget:g}" for tier in tiers)
        log_info(f"[Paces] {option.value}: {summary}")
    return tiers
