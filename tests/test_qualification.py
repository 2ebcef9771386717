import pytest

from dropzone.controllers.tournament import process_lobby
from dropzone.exceptions import AlreadyProcessedException, IncompleteGamesException
from dropzone.models.tournament import Game, Lobby


def _teams(prefix, count, start=1):
    return [f"{prefix}{i:02d}" for i in range(start, start + count)]


def _lobby(order, teams, games=None):
    return Lobby(
        id=f"lobby-{order}",
        name=f"Group {order}",
        order=order,
        teams=list(teams),
        games=games if games is not None else [Game(game_number=1)],
    )


def _played_lobby(make_game, order, teams):
    # One game, finishing in seeding order
    return _lobby(order, teams, games=[make_game(1, teams)])


def test_incomplete_games_block_processing():
    lobby = _lobby(1, _teams("t", 4))

    with pytest.raises(IncompleteGamesException) as exc_info:
        process_lobby(lobby, 2, False, 12)

    assert exc_info.value.details["completed_games"] == 0
    assert exc_info.value.details["total_games"] == 1
    assert not lobby.processed


def test_top_teams_qualify(make_game):
    teams = _teams("t", 12)
    lobby = _played_lobby(make_game, 1, teams)
    qualified = []

    result = process_lobby(lobby, 4, False, 12, qualified_teams=qualified)

    assert result.qualified_team_ids == teams[:4]
    assert result.eliminated_team_ids == teams[4:]
    assert result.transferred == 0
    assert qualified == teams[:4]
    assert lobby.processed
    assert [s.qualified for s in lobby.standings] == [True] * 4 + [False] * 8
    assert lobby.standing_for("t01").qualified
    assert not lobby.standing_for("t12").qualified


def test_transfer_fills_partial_next_lobby(make_game):
    teams = _teams("t", 12)
    lobby = _played_lobby(make_game, 1, teams)
    next_lobby = _lobby(2, ["late01"])

    result = process_lobby(lobby, 6, True, 12, next_lobby=next_lobby)

    assert result.transferred_team_ids == teams[6:]
    assert result.eliminated == 0
    assert result.next_lobby_id == "lobby-2"
    assert next_lobby.teams == ["late01"] + teams[6:]
    # Transferred teams start from zero
    assert len(next_lobby.standings) == 7
    assert all(s.total_points == 0 for s in next_lobby.standings)


def test_transfer_limited_by_next_lobby_capacity(make_game):
    teams = _teams("t", 12)
    lobby = _played_lobby(make_game, 1, teams)
    next_lobby = _lobby(2, _teams("n", 10))

    result = process_lobby(lobby, 6, True, 12, next_lobby=next_lobby)

    assert result.transferred_team_ids == ["t07", "t08"]
    assert result.eliminated_team_ids == teams[8:]
    assert len(next_lobby.teams) == 12


def test_transfer_disabled_eliminates_the_rest(make_game):
    teams = _teams("t", 6)
    lobby = _played_lobby(make_game, 1, teams)
    next_lobby = _lobby(2, ["late01"])

    result = process_lobby(lobby, 2, False, 12, next_lobby=next_lobby)

    assert result.transferred == 0
    assert result.eliminated == 4
    assert next_lobby.teams == ["late01"]


def test_processed_next_lobby_receives_nobody(make_game):
    lobby = _played_lobby(make_game, 1, _teams("t", 6))
    next_lobby = _lobby(2, ["late01"])
    next_lobby.processed = True

    result = process_lobby(lobby, 2, True, 12, next_lobby=next_lobby)

    assert result.transferred == 0
    assert result.eliminated == 4
    assert next_lobby.teams == ["late01"]


def test_lobby_cannot_be_processed_twice(make_game):
    lobby = _played_lobby(make_game, 1, _teams("t", 4))
    process_lobby(lobby, 2, False, 12)

    with pytest.raises(AlreadyProcessedException):
        process_lobby(lobby, 2, False, 12)


def test_qualified_list_stays_duplicate_free(make_game):
    teams = _teams("t", 4)
    lobby = _played_lobby(make_game, 1, teams)
    qualified = ["t01"]

    process_lobby(lobby, 2, False, 12, qualified_teams=qualified)

    assert qualified == ["t01", "t02"]


def test_every_team_is_accounted_for(make_game):
    for size in (2, 5, 12):
        for cut in (0, 1, 3, 12):
            for room in (0, 2, 11):
                teams = _teams("t", size)
                lobby = _played_lobby(make_game, 1, teams)
                next_lobby = _lobby(2, _teams("n", 12 - room))

                result = process_lobby(lobby, cut, True, 12, next_lobby=next_lobby)

                assert result.total == size
                assert result.qualified == min(cut, size)
                assert result.transferred <= room
                assert len(next_lobby.teams) <= 12
