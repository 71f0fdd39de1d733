"""Tests for the frontier search engine and its topology strategies."""

import math

import pytest

from reachmap.grid import HexGrid, Point, SquareGrid, SyntheticGrid
from reachmap.schemas import Footprint
from reachmap.search import (
    GridlessStrategy,
    HexStrategy,
    SearchContext,
    SquareStrategy,
    run_search,
    should_replace,
)
from reachmap.visibility import SearchVisibility, Wall, WallVisibilityOracle, point_segment_distance


class OpenOracle:
    """No walls anywhere."""

    def segment_blocked(self, start, end):
        return False

    def point_unsafe(self, point):
        return False


class PillarOracle:
    """Blocks every segment passing within ``radius`` of a single point."""

    def __init__(self, center, radius=10.0):
        self.center = center
        self.radius = radius

    def segment_blocked(self, start, end):
        return point_segment_distance(self.center, start, end) < self.radius

    def point_unsafe(self, point):
        return False


@pytest.mark.parametrize(
    "old_cost, old_safe, new_cost, new_safe, expected",
    [
        (None, None, 7.0, False, True),
        (None, None, 7.0, True, True),
        (5.0, True, 4.0, False, False),
        (5.0, False, 9.0, True, True),
        (5.0, True, 4.0, True, True),
        (5.0, True, 5.0, True, False),
        (5.0, False, 4.0, False, True),
        (5.0, False, 6.0, False, False),
    ],
)
def test_should_replace(old_cost, old_safe, new_cost, new_safe, expected):
    assert should_replace(old_cost, old_safe, new_cost, new_safe) is expected


# ============================================================================
# Seeding
# ============================================================================


def test_single_cell_footprint_seeds_its_cell():
    grid = SquareGrid(size=100, distance=5)
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         SquareStrategy(), OpenOracle(), max_budget=0)

    assert outcome.seeds == [(10, 10)]
    assert outcome.costs[(10, 10)] == 0


def test_wall_through_footprint_excludes_cells_behind_it():
    grid = SquareGrid(size=100, distance=5)
    oracle = WallVisibilityOracle([Wall(1200, 900, 1200, 1400)])
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=300, height=300),
                         SquareStrategy(), oracle, max_budget=0)

    assert len(outcome.seeds) == 6
    assert all(col < 12 for _, col in outcome.seeds)


def test_tiny_token_falls_back_to_the_cell_under_its_centre():
    grid = SquareGrid(size=100, distance=5)
    outcome = run_search(grid, Footprint(origin_x=1060, origin_y=1060, width=30, height=30),
                         SquareStrategy(), OpenOracle(), max_budget=0)

    assert outcome.seeds == [(10, 10)]


# ============================================================================
# Square
# ============================================================================


def test_square_costs_satisfy_the_fixed_point():
    grid = SquareGrid(size=100, distance=5)
    strategy = SquareStrategy()
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         strategy, OpenOracle(), max_budget=25)

    for index, cost in outcome.costs.items():
        if cost == 0:
            continue
        best = min(
            outcome.costs[n.index] + strategy.step_cost(grid, n.is_diagonal)
            for n in grid.neighbors_of(index)
            if n.index in outcome.costs
        )
        assert cost == pytest.approx(best)
        assert cost <= 25 + grid.distance


def test_square_octile_costs_in_open_room():
    grid = SquareGrid(size=100, distance=5)
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         SquareStrategy(), OpenOracle(), max_budget=30)

    assert outcome.costs[(10, 11)] == pytest.approx(5)
    assert outcome.costs[(11, 11)] == pytest.approx(7.07)
    assert outcome.costs[(12, 11)] == pytest.approx(12.07)
    assert outcome.costs[(14, 14)] == pytest.approx(28.28)
    assert all(outcome.safety.values())
    assert outcome.truncated is False


def test_square_wall_blocks_full_centre_segment():
    grid = SquareGrid(size=100, distance=5)
    oracle = WallVisibilityOracle([Wall(1200, 0, 1200, 3000)])
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         SquareStrategy(), oracle, max_budget=30)

    assert (10, 11) in outcome.costs
    assert not [index for index in outcome.costs if index[1] >= 12]


def test_iteration_ceiling_truncates_and_warns(capsys):
    grid = SquareGrid(size=100, distance=5)
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         SquareStrategy(), OpenOracle(), max_budget=30, iteration_ceiling=3)

    assert outcome.truncated is True
    assert outcome.iterations == 3
    assert "Iteration ceiling 3 reached" in capsys.readouterr().out


class DoubleRelaxStrategy(SquareStrategy):
    """Records the east neighbour of the seed twice, leaving a stale heap entry."""

    def expand(self, ctx, index, cost, payload):
        if cost == 0:
            row, col = index
            ctx.relax((row, col + 1), 5.0)
            ctx.relax((row, col + 1), 3.0)


def test_stale_entries_do_not_count_toward_the_ceiling(capsys):
    grid = SquareGrid(size=100, distance=5)
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         DoubleRelaxStrategy(), OpenOracle(), max_budget=30, iteration_ceiling=2)

    assert outcome.costs[(10, 11)] == 3.0
    assert outcome.iterations == 2
    assert outcome.truncated is False
    assert "Iteration ceiling" not in capsys.readouterr().out


class UnsafeSpotOracle(OpenOracle):
    """Open field with a single point nobody may stop on."""

    def __init__(self, spot):
        self.spot = spot

    def point_unsafe(self, point):
        return point == self.spot


def test_square_skips_cells_whose_centre_is_unsafe():
    grid = SquareGrid(size=100, distance=5)
    oracle = UnsafeSpotOracle(Point(1150, 1150))
    outcome = run_search(grid, Footprint(origin_x=1000, origin_y=1000, width=100, height=100),
                         SquareStrategy(), oracle, max_budget=30)

    assert (11, 11) not in outcome.costs
    assert outcome.costs[(10, 11)] == pytest.approx(5)
    assert outcome.costs[(11, 10)] == pytest.approx(5)
    # Reached around the unsafe spot
    assert (12, 12) in outcome.costs


# ============================================================================
# Hex
# ============================================================================

# Pointy-top rows, odd rows shifted: (5, 5) sits at (600, ~490.75) and its
# east neighbour (5, 6) at (700, ~490.75).
HEX_FOOTPRINT = Footprint(origin_x=560, origin_y=450, width=80, height=80)


def edge_wall():
    """Short wall across the (5, 5)-(5, 6) edge midpoint."""
    y = HexGrid(size=100, distance=5).center_of((5, 5)).y
    return Wall(650, y - 10, 650, y + 10)


def test_hex_bisected_edge_creates_bridge_and_jump_targets():
    grid = HexGrid(size=100, distance=5)
    ctx = SearchContext(
        grid=grid,
        visibility=SearchVisibility(WallVisibilityOracle([edge_wall()])),
        footprint=HEX_FOOTPRINT,
        horizon=100,
    )
    ctx.relax((5, 5), 0.0)

    HexStrategy().expand(ctx, (5, 5), 0.0, None)
    costs, safety = ctx.outcome.costs, ctx.outcome.safety

    assert costs[(5, 6)] == pytest.approx(5) and safety[(5, 6)] is False
    assert costs[(4, 7)] == pytest.approx(10) and safety[(4, 7)] is True
    assert costs[(6, 7)] == pytest.approx(10) and safety[(6, 7)] is True
    # Shared neighbours keep their cheaper direct cost
    assert costs[(4, 6)] == pytest.approx(5)
    assert costs[(6, 6)] == pytest.approx(5)
    # The straight jump through the wall is not allowed
    assert (5, 7) not in costs
    # The bridge itself is never queued for expansion
    queued = []
    while ctx.heap:
        queued.append(ctx.heap.pop()[1][0])
    assert (5, 6) not in queued


def test_hex_ghost_upgrades_to_safe_when_a_real_route_exists():
    grid = HexGrid(size=100, distance=5)
    outcome = run_search(grid, HEX_FOOTPRINT, HexStrategy(), WallVisibilityOracle([edge_wall()]), max_budget=15)

    assert outcome.seeds == [(5, 5)]
    # Around the short wall through (4, 6): more expensive, but safe wins
    assert outcome.costs[(5, 6)] == pytest.approx(10)
    assert outcome.safety[(5, 6)] is True


def test_hex_ghost_stays_unsafe_when_never_reachable_directly():
    grid = HexGrid(size=100, distance=5)
    pillar = PillarOracle(grid.center_of((5, 6)))
    outcome = run_search(grid, HEX_FOOTPRINT, HexStrategy(), pillar, max_budget=15)

    assert outcome.costs[(5, 6)] == pytest.approx(5)
    assert outcome.safety[(5, 6)] is False


def test_hex_open_field_costs_are_step_multiples():
    grid = HexGrid(size=100, distance=5, columns=True)
    footprint = Footprint(origin_x=400, origin_y=400, width=60, height=60)
    outcome = run_search(grid, footprint, HexStrategy(), OpenOracle(), max_budget=10)

    assert len(outcome.seeds) == 1
    # 1 + 6 + 12 hexes within two steps
    within_budget = [cost for cost in outcome.costs.values() if cost <= 10]
    assert len(within_budget) == 19
    assert all(math.isclose(cost % 5, 0, abs_tol=1e-9) for cost in outcome.costs.values())


# ============================================================================
# Gridless
# ============================================================================

SCENE = SyntheticGrid(resolution=20, scene_size=100, scene_distance=5)
TOKEN = Footprint(origin_x=100, origin_y=100, width=100, height=100)


def test_gridless_measures_straight_lines_minus_token_radius():
    outcome = run_search(SCENE, TOKEN, GridlessStrategy(), OpenOracle(), max_budget=10)

    assert len(outcome.seeds) == 25
    # Centre (250, 150) is 100 world units from the token centre: 5 units minus 2.5 radius
    assert outcome.costs[(7, 12)] == pytest.approx(2.5)
    # Diagonals are Euclidean, not octile
    target = SCENE.center_of((12, 13))
    expected = (math.hypot(target.x - 150, target.y - 150) - 50) / 20
    assert outcome.costs[(12, 13)] == pytest.approx(expected)


def test_gridless_bends_around_wall_corner():
    oracle = WallVisibilityOracle([Wall(260, -1000, 260, 200)])
    outcome = run_search(SCENE, TOKEN, GridlessStrategy(), oracle, max_budget=12)

    target = (6, 16)
    assert SCENE.center_of(target) == Point(330, 130)

    straight = (math.hypot(180, 20) - 50) / 20
    detour = (math.hypot(110, 50) + math.hypot(70, 70) - 50) / 20
    cost = outcome.costs[target]
    assert cost > straight + 1
    assert detour - 1e-6 <= cost <= detour + 1.5
    assert outcome.safety[target] is True


def test_gridless_horizon_allows_two_scene_steps_of_slack():
    strategy = GridlessStrategy()
    assert strategy.horizon(30, SCENE) == pytest.approx(40)


def test_gridless_skips_micro_cells_whose_centre_is_unsafe():
    oracle = UnsafeSpotOracle(Point(250, 150))
    outcome = run_search(SCENE, TOKEN, GridlessStrategy(), oracle, max_budget=10)

    assert (7, 12) not in outcome.costs
    # The next cell east still measures a straight line from the token
    assert outcome.costs[(7, 13)] == pytest.approx((120 - 50) / 20)
