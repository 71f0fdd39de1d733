"""
Scenario loading for JSON-defined reachability problems.

A scenario bundles everything one search needs: grid metrics, the agent's
footprint, its movement tiers (or a raw movement block), the wall snapshot and
the rounding rule. Scenarios make it easy to reproduce a reported overlay
without the host application running.

Scenario file structure:
```json
{
  "name": "Open Room",
  "description": "...",
  "grid": {"topology": "square", "size": 100, "distance": 5, "units": "ft"},
  "footprint": {"origin_x": 1000, "origin_y": 1000, "width": 100, "height": 100},
  "tiers": [{"name": "Walk", "distance_budget": 30}],
  "walls": [{"x1": 0, "y1": 0, "x2": 0, "y2": 500, "door": "none"}],
  "rounding": "full",
  "origin_override": {"x": 900, "y": 1000},
  "oracle": {"tolerance": 2.0, "bucket_size": 200}
}
```
``movement_block`` may replace ``tiers`` (see ``reachmap.paces``).

Usage:
    loader = ScenarioLoader()
    scenario = loader.load("open_room")
    result = scenario.run()
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .calculator import calculate_reachable_cells
from .classifier import coerce_rounding
from .config import Config
from .errors import InvalidInputError
from .grid import Point
from .paces import tiers_from_movement_block
from .schemas import Footprint, GridMetrics, MovementTier, RoundingRule, SearchResult
from .visibility import DoorState, Wall, WallVisibilityOracle


@dataclass
class Scenario:
    """A fully parsed reachability problem."""

    name: str
    metrics: GridMetrics
    footprint: Footprint
    tiers: List[MovementTier]
    walls: List[Wall] = field(default_factory=list)
    rounding: RoundingRule = RoundingRule.FULL
    origin_override: Optional[Point] = None
    description: str = ""
    oracle_options: Dict[str, float] = field(default_factory=dict)

    def build_oracle(self) -> WallVisibilityOracle:
        return WallVisibilityOracle(self.walls, **self.oracle_options)

    def run(self, *, rounding: RoundingRule | str | None = None) -> SearchResult:
        """Run the search this scenario describes."""
        return calculate_reachable_cells(
            self.footprint,
            self.tiers,
            self.metrics,
            self.build_oracle(),
            origin_override=self.origin_override,
            rounding=rounding or self.rounding,
        )


class ScenarioLoader:
    """Load and validate reachability scenarios from JSON files.

    Directory structure:
    - Default: Config.SCENARIOS_DIR ({PROJECT_ROOT}/examples/scenarios/)
    - Override via constructor: ScenarioLoader(Path("/custom/scenarios"))
    - Scenario files: {scenario_name}.json

    Validation:
    - Required fields: name, grid, footprint, and tiers or movement_block
    - Raises InvalidInputError if validation fails (wrapping pydantic errors)
    """

    REQUIRED_FIELDS = ("name", "grid", "footprint")

    def __init__(self, scenarios_dir: Optional[Path] = None):
        self.scenarios_dir = scenarios_dir or Config.SCENARIOS_DIR

    def load(self, scenario_name: str) -> Scenario:
        """Load a scenario by name (without the .json extension)."""
        scenario_path = self.scenarios_dir / f"{scenario_name}.json"
        if not scenario_path.exists():
            raise FileNotFoundError(f"Scenario not found: {scenario_path}")

        with open(scenario_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return self.load_from_dict(data)

    def list_scenarios(self) -> List[str]:
        """Names of all scenarios in the scenarios directory."""
        if not self.scenarios_dir.exists():
            return []
        return sorted(path.stem for path in self.scenarios_dir.glob("*.json"))

    def load_from_dict(self, data: Dict[str, Any]) -> Scenario:
        """Build a Scenario from already-parsed JSON data."""
        self._validate_scenario(data)

        try:
            metrics = GridMetrics.model_validate(data["grid"])
            footprint = Footprint.model_validate(data["footprint"])
            tiers = self._parse_tiers(data)
            walls = [self._parse_wall(raw) for raw in data.get("walls", [])]
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid scenario '{data.get('name')}': {exc}") from exc

        override = data.get("origin_override")
        return Scenario(
            name=data["name"],
            description=data.get("description", ""),
            metrics=metrics,
            footprint=footprint,
            tiers=tiers,
            walls=walls,
            rounding=coerce_rounding(data.get("rounding")),
            origin_override=Point(float(override["x"]), float(override["y"])) if override else None,
            oracle_options={key: float(value) for key, value in (data.get("oracle") or {}).items()},
        )

    def _validate_scenario(self, data: Dict[str, Any]) -> None:
        for field_name in self.REQUIRED_FIELDS:
            if field_name not in data:
                raise InvalidInputError(f"Scenario missing required field: {field_name}")
        if "tiers" not in data and "movement_block" not in data:
            raise InvalidInputError("Scenario needs either 'tiers' or 'movement_block'")

        override = data.get("origin_override")
        if override is not None and not {"x", "y"} <= set(override):
            raise InvalidInputError("origin_override must have 'x' and 'y'")

        for key in (data.get("oracle") or {}):
            if key not in ("tolerance", "bucket_size"):
                raise InvalidInputError(f"Unknown oracle option: {key}")

    def _parse_tiers(self, data: Dict[str, Any]) -> List[MovementTier]:
        if "tiers" in data:
            return [MovementTier.model_validate(raw) for raw in data["tiers"]]
        # Missing movement data is a steady state: the scenario simply reaches nothing
        return tiers_from_movement_block(data["movement_block"], data.get("colors")) or []

    def _parse_wall(self, raw: Dict[str, Any]) -> Wall:
        try:
            door = DoorState(raw.get("door", "none"))
        except ValueError as exc:
            raise InvalidInputError(f"Unknown door state: {raw.get('door')}") from exc
        try:
            return Wall(
                x1=float(raw["x1"]),
                y1=float(raw["y1"]),
                x2=float(raw["x2"]),
                y2=float(raw["y2"]),
                door=door,
                blocks_movement=bool(raw.get("blocks_movement", True)),
            )
        except KeyError as exc:
            raise InvalidInputError(f"Wall missing coordinate {exc}") from exc
