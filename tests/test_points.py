from dropzone.controllers.tournament import build_result, compute_points
from dropzone.models.tournament import PointsSystem


def test_winner_with_kills():
    assert compute_points(1, 5, {1: 20}, 1) == 25


def test_placement_missing_from_table_scores_kills_only():
    assert compute_points(11, 3, {1: 20, 2: 15}, 1) == 3
    assert compute_points(0, 0, {1: 20}, 1) == 0


def test_second_place_with_kills():
    assert compute_points(2, 4, {1: 20, 2: 15, 3: 12}, 1) == 19


def test_kill_value_multiplies_kills():
    assert compute_points(3, 4, {3: 12}, 2) == 20


def test_build_result_breakdown():
    points = PointsSystem(placement_points={1: 20, 2: 15}, kill_points=2)
    result = build_result("alpha", 2, 3, points)

    assert result.team_id == "alpha"
    assert result.placement_points == 15
    assert result.kill_points == 6
    assert result.total_points == 21
    assert result.to_dict()["total_points"] == 21


def test_default_table_gives_nothing_below_tenth():
    points = PointsSystem()
    assert build_result("t", 10, 0, points).total_points == 1
    assert build_result("t", 12, 0, points).total_points == 0
