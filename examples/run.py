"""Run a reachability scenario and print a per-tier summary.

    python examples/run.py open_room
    python examples/run.py hex_wall --rounding any --map
    python examples/run.py --list

Scenarios live in ``examples/scenarios/``. Set ``DEBUG_SEARCH=true`` to trace
the search itself.
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path

from reachmap import Config, ReachmapError, ScenarioLoader, SearchResult
from reachmap.logging_utils import Color, colored, log_error, log_info, log_success, log_warning
from reachmap.paces import ANCHOR_COLOR

SCENARIOS_DIR = Path(__file__).parent / "scenarios"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reachable cells for a scenario")
    parser.add_argument("scenario", nargs="?", help="Scenario name (file name without .json)")
    parser.add_argument(
        "--rounding",
        choices=("any", "half", "full"),
        help="Override the scenario's rounding rule",
    )
    parser.add_argument("--list", action="store_true", help="List available scenarios and exit")
    parser.add_argument("--map", action="store_true", help="Print an ASCII map (square and gridless only)")
    parser.add_argument("--config", action="store_true", help="Show the active configuration first")
    return parser.parse_args()


def print_summary(result: SearchResult) -> None:
    tiers = Counter(cell.tier_name for cell in result.values() if not cell.is_anchor)
    anchors = sum(1 for cell in result.values() if cell.is_anchor)
    ghosts = sum(1 for cell in result.values() if not cell.is_safe)
    inner = sum(1 for cell in result.values() if cell.is_inner_zone)

    log_info(f"Anchor cells: {anchors} (overlay color {ANCHOR_COLOR})")
    for name, count in sorted(tiers.items(), key=lambda item: item[1]):
        print(f"  {name:<10} {count:>5} cells")
    log_info(f"Inner zone: {inner} cells, ghost cells: {ghosts}, iterations: {result.iterations}")


def print_map(result: SearchResult) -> None:
    """Rough ASCII rendering: anchor '@', ghost '?', tiers by their initial."""
    cells = result.by_index()
    if not cells:
        return
    rows = [index[0] for index in cells]
    cols = [index[1] for index in cells]
    for row in range(min(rows), max(rows) + 1):
        line = []
        for col in range(min(cols), max(cols) + 1):
            cell = cells.get((row, col))
            if cell is None:
                line.append(".")
            elif cell.is_anchor:
                line.append(colored("@", Color.BLUE, bold=True))
            elif not cell.is_safe:
                line.append(colored("?", Color.RED))
            else:
                line.append(cell.tier_name[0])
        print(" ".join(line))


def main(args: argparse.Namespace) -> int:
    loader = ScenarioLoader(SCENARIOS_DIR)

    if args.list or not args.scenario:
        for name in loader.list_scenarios():
            print(f"  {name}")
        return 0

    if args.config:
        print(Config.display())
        print()

    try:
        scenario = loader.load(args.scenario)
        log_info(f"Scenario: {scenario.name} ({scenario.metrics.topology.value})")
        if scenario.description:
            print(f"  {scenario.description}")
        result = scenario.run(rounding=args.rounding)
    except FileNotFoundError as exc:
        log_error(str(exc))
        return 1
    except ReachmapError as exc:
        log_error(f"Search failed: {exc}")
        return 1

    if result.truncated:
        log_warning("Search was truncated by the iteration ceiling; the overlay is partial")
    print_summary(result)
    if args.map:
        print_map(result)
    log_success(f"{len(result)} reachable cells")
    return 0


if __name__ == "__main__":
    sys.exit(main(parse_args()))
