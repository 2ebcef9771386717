import pytest

from dropzone.config import EngineSettings
from dropzone.controllers.tournament import build_result
from dropzone.engine import TournamentEngine
from dropzone.models.tournament import Game, PointsSystem
from dropzone.storage import InMemoryTournamentRepository


@pytest.fixture
def settings():
    return EngineSettings(_env_file=None)


@pytest.fixture
def engine(settings):
    return TournamentEngine(InMemoryTournamentRepository(), settings)


@pytest.fixture
def points_system():
    return PointsSystem()


@pytest.fixture
def make_game(points_system):
    """Build a completed game from a finishing order.

    ``order`` lists team ids best first; ``kills`` maps team id to kills.
    """

    def _make_game(game_number, order, kills=None):
        kills = kills or {}
        game = Game(game_number=game_number, status="completed")
        game.results = [
            build_result(team_id, placement, kills.get(team_id, 0), points_system)
            for placement, team_id in enumerate(order, start=1)
        ]
        return game

    return _make_game


@pytest.fixture
def result_entries():
    """Raw result entries for a finishing order, as an organizer types them."""

    def _result_entries(order, kills=None):
        kills = kills or {}
        return [
            {"team_id": team_id, "placement": placement, "kills": kills.get(team_id, 0)}
            for placement, team_id in enumerate(order, start=1)
        ]

    return _result_entries
