import random

from dropzone.controllers.tournament import (
    aggregate_standings,
    calculate_earnings,
    rank_standings,
)
from dropzone.models.tournament import Game


def _order(standings):
    return [s.team_id for s in standings]


def test_points_rank_first(make_game):
    games = [make_game(1, ["b", "a", "c"]), make_game(2, ["b", "c", "a"])]
    standings = aggregate_standings(games, ["a", "b", "c"])

    assert _order(standings) == ["b", "a", "c"]
    assert standings[0].total_points == 40
    assert standings[0].placements == [1, 1]
    assert standings[0].wins == 2
    assert standings[0].win_rate == 100.0
    assert standings[-1].to_dict()["kills_per_game"] == 0.0


def test_equal_points_broken_by_average_placement(make_game):
    # a: 1st with 0 kills = 20, c: 3rd with 8 kills = 20, b: 2nd = 15
    games = [make_game(1, ["a", "b", "c"], kills={"c": 8})]
    standings = aggregate_standings(games, ["c", "b", "a"])

    assert [s.total_points for s in standings] == [20, 20, 15]
    assert _order(standings) == ["a", "c", "b"]


def test_full_tie_follows_seed_order(make_game):
    # Both teams finish 1st once and 2nd once with no kills
    games = [make_game(1, ["x", "y"]), make_game(2, ["y", "x"])]

    assert _order(aggregate_standings(games, ["x", "y"])) == ["x", "y"]
    assert _order(aggregate_standings(games, ["y", "x"])) == ["y", "x"]


def test_team_without_games_gets_sentinel_and_sorts_last(make_game):
    games = [make_game(1, ["a", "b"])]
    standings = aggregate_standings(games, ["a", "b", "idle"], empty_avg_placement=12.0)

    idle = standings[-1]
    assert idle.team_id == "idle"
    assert idle.games_played == 0
    assert idle.avg_placement == 12.0
    assert idle.win_rate == 0.0


def test_sentinel_sorts_below_teams_with_zero_points(make_game):
    # "b" finishes 12th for zero points but still beats a team that never played
    order = ["a", "f2", "f3", "f4", "f5", "f6", "f7", "f8", "f9", "f10", "f11", "b"]
    games = [make_game(1, order)]
    standings = aggregate_standings(games, ["idle"] + order, empty_avg_placement=13.0)

    assert _order(standings)[-2:] == ["b", "idle"]


def test_scheduled_games_are_skipped(make_game):
    games = [make_game(1, ["a", "b"]), Game(game_number=2)]
    standings = aggregate_standings(games, ["a", "b"])

    assert all(s.games_played == 1 for s in standings)


def test_results_for_unknown_teams_are_ignored(make_game):
    games = [make_game(1, ["stranger", "a", "b"])]
    standings = aggregate_standings(games, ["a", "b"])

    assert _order(standings) == ["a", "b"]
    assert standings[0].total_points == 15


def test_points_before_last_game(make_game):
    games = [
        make_game(1, ["a", "b"], kills={"a": 2}),
        make_game(2, ["b", "a"]),
    ]
    standing = next(s for s in aggregate_standings(games, ["a", "b"]) if s.team_id == "a")

    assert standing.points_before_last_game == 22
    assert standing.total_points == 37
    assert standing.total_kills == 2
    assert standing.total_placement_points == 35


def test_aggregation_is_deterministic(make_game):
    rng = random.Random(7)
    teams = [f"t{i}" for i in range(10)]
    games = []
    for number in range(1, 4):
        order = list(teams)
        rng.shuffle(order)
        games.append(make_game(number, order, kills={t: rng.randint(0, 5) for t in teams}))

    first = aggregate_standings(games, teams)
    second = aggregate_standings(list(games), list(teams))
    assert [s.to_dict() for s in first] == [s.to_dict() for s in second]


def test_standings_are_sorted_by_points_then_average(make_game):
    rng = random.Random(11)
    teams = [f"t{i}" for i in range(12)]
    games = []
    for number in range(1, 6):
        order = list(teams)
        rng.shuffle(order)
        games.append(make_game(number, order, kills={t: rng.randint(0, 3) for t in teams}))

    standings = aggregate_standings(games, teams)
    assert len(standings) == len(teams)
    for better, worse in zip(standings, standings[1:]):
        assert (-better.total_points, better.avg_placement) <= (
            -worse.total_points,
            worse.avg_placement,
        )


def test_earnings():
    assert calculate_earnings(1, 1000, {1: 50, 2: 30}) == 500.0
    assert calculate_earnings(3, 1000, {1: 50, 2: 30}) == 0.0
    assert calculate_earnings(1, 0, {1: 50}) == 0.0
    assert calculate_earnings(1, 1000, {1: 33.333}) == 333.33


def test_rank_standings_assigns_ranks_and_earnings(make_game):
    standings = aggregate_standings([make_game(1, ["a", "b", "c"])], ["a", "b", "c"])
    rank_standings(standings, prize_pool=1000, prize_distribution={1: 50, 2: 30})

    assert [s.rank for s in standings] == [1, 2, 3]
    assert [s.earnings for s in standings] == [500.0, 300.0, 0.0]
