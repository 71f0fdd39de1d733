"""End-to-end tests for calculate_reachable_cells."""

import pytest

from reachmap import (
    Footprint,
    GridMetrics,
    MovementTier,
    Point,
    Rect,
    VisibilityOracleError,
    Wall,
    WallVisibilityOracle,
    calculate_reachable_cells,
)

SQUARE = GridMetrics(topology="square", size=100, distance=5)
TOKEN = Footprint(origin_x=1000, origin_y=1000, width=100, height=100)
WALK = MovementTier(name="Walk", distance_budget=30, display_color="#00FF00")


def open_oracle():
    return WallVisibilityOracle([])


def octile(dr, dc):
    a, b = max(abs(dr), abs(dc)), min(abs(dr), abs(dc))
    return b * 7.07 + (a - b) * 5


def test_open_room_matches_octile_disc():
    result = calculate_reachable_cells(TOKEN, [WALK], SQUARE, open_oracle(), rounding="full")

    expected = {
        (10 + dr, 10 + dc)
        for dr in range(-7, 8)
        for dc in range(-7, 8)
        if octile(dr, dc) <= 30 + 1e-9
    }
    assert set(result.by_index()) == expected
    assert len(result) == 105

    anchor = result["1000.1000"]
    assert anchor.is_anchor and anchor.cost == 0 and anchor.tier is None

    east = result["1100.1000"]
    assert east.index == (10, 11)
    assert east.cost == pytest.approx(5)
    assert east.tier_name == "Walk"
    assert east.is_safe and not east.is_anchor


def test_rounding_rule_widens_the_edge():
    full = calculate_reachable_cells(TOKEN, [WALK], SQUARE, open_oracle(), rounding="full")
    half = calculate_reachable_cells(TOKEN, [WALK], SQUARE, open_oracle(), rounding="half")
    anyr = calculate_reachable_cells(TOKEN, [WALK], SQUARE, open_oracle(), rounding="any")

    assert set(full.keys()) <= set(half.keys()) <= set(anyr.keys())
    # (10, 17) costs 35: nothing of the last step fits, so every rule rejects it
    assert "1700.1000" not in anyr
    # (14, 15): 4 diagonals + 1 straight = 33.28, 1.72 of the last 5 fits
    assert "1500.1400" in anyr
    assert "1500.1400" not in half
    assert "1500.1400" not in full


def test_tiers_are_assigned_cheapest_first():
    tiers = [
        MovementTier(name="Run", distance_budget=20),
        MovementTier(name="Walk", distance_budget=10),
    ]
    result = calculate_reachable_cells(TOKEN, tiers, SQUARE, open_oracle(), rounding="full")

    assert result["1100.1000"].tier_name == "Walk"
    assert result["1300.1000"].tier_name == "Run"
    # No Sprint tier: the second-largest budget (Walk, of two) bounds the inner zone
    assert result["1200.1000"].is_inner_zone
    assert not result["1300.1000"].is_inner_zone


def test_metric_scene_scales_budgets():
    metres = GridMetrics(topology="square", size=100, distance=5, units="m")
    result = calculate_reachable_cells(TOKEN, [WALK], metres, open_oracle(), rounding="full")

    # 30 / 3.33333 = 9: one step in each direction, diagonals included
    assert len(result) == 9
    assert result["1100.1000"].tier.distance_budget == pytest.approx(9.0, abs=1e-3)


def test_origin_override_measures_from_anchor():
    result = calculate_reachable_cells(
        TOKEN, [WALK], SQUARE, open_oracle(), origin_override=Point(500, 500)
    )

    assert result["500.500"].is_anchor
    assert "1000.1000" not in result


def test_scene_bounds_are_respected():
    bounded = SQUARE.model_copy(update={"bounds": Rect(x=0, y=0, width=1200, height=1200)})
    result = calculate_reachable_cells(TOKEN, [WALK], bounded, open_oracle())

    assert result
    assert all(cell.index[0] <= 11 and cell.index[1] <= 11 for cell in result.values())


def test_missing_movement_data_returns_empty_result():
    assert len(calculate_reachable_cells(TOKEN, [], SQUARE, open_oracle())) == 0
    assert len(calculate_reachable_cells(TOKEN, None, SQUARE, open_oracle())) == 0
    assert len(calculate_reachable_cells(None, [WALK], SQUARE, open_oracle())) == 0

    flat = Footprint(origin_x=0, origin_y=0, width=0, height=100)
    assert len(calculate_reachable_cells(flat, [WALK], SQUARE, open_oracle())) == 0


def test_repeated_calls_are_identical():
    oracle = WallVisibilityOracle([Wall(1250, 800, 1250, 1300)])

    first = calculate_reachable_cells(TOKEN, [WALK], SQUARE, oracle)
    second = calculate_reachable_cells(TOKEN, [WALK], SQUARE, oracle)

    assert first == second
    assert first.keys() == second.keys()


def test_oracle_failure_propagates():
    class FailingOracle:
        def segment_blocked(self, start, end):
            raise ConnectionError("wall service unavailable")

        def point_unsafe(self, point):
            return False

    with pytest.raises(VisibilityOracleError) as excinfo:
        calculate_reachable_cells(TOKEN, [WALK], SQUARE, FailingOracle())
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_non_boolean_oracle_answer_is_rejected():
    class SloppyOracle:
        def segment_blocked(self, start, end):
            return 0

        def point_unsafe(self, point):
            return False

    with pytest.raises(VisibilityOracleError):
        calculate_reachable_cells(TOKEN, [WALK], SQUARE, SloppyOracle())


def test_truncated_search_still_returns_cells(capsys):
    result = calculate_reachable_cells(TOKEN, [WALK], SQUARE, open_oracle(), iteration_ceiling=5)

    assert result.truncated is True
    assert 0 < len(result) < 105
    assert "[~]" in capsys.readouterr().out


def test_hex_results_are_keyed_by_index():
    metrics = GridMetrics(topology="hex", size=100, distance=5)
    token = Footprint(origin_x=560, origin_y=450, width=80, height=80)
    result = calculate_reachable_cells(token, [MovementTier(name="Walk", distance_budget=5)], metrics, open_oracle(), rounding="full")

    assert set(result.keys()) == {"5.5", "5.4", "5.6", "4.5", "4.6", "6.5", "6.6"}
    assert result["5.5"].is_anchor
    assert result["5.6"].width == pytest.approx(100)


def test_gridless_result_is_near_circular():
    metrics = GridMetrics(topology="gridless", size=100, distance=5, gridless_resolution=20)
    token = Footprint(origin_x=100, origin_y=100, width=100, height=100)
    result = calculate_reachable_cells(token, [MovementTier(name="Walk", distance_budget=5)], metrics, open_oracle(), rounding="full")

    cells = result.by_index()
    # Centre (250, 150): 2.5 units beyond the token edge
    assert cells[(7, 12)].cost == pytest.approx(2.5)
    # Every reached centre lies within budget plus radius of the token centre
    for cell in result.values():
        cx, cy = cell.world_x + 10, cell.world_y + 10
        assert ((cx - 150) ** 2 + (cy - 150) ** 2) ** 0.5 <= 150 + 1e-6
