from dropzone.models.tournament.game import Game, GameResult
from dropzone.models.tournament.lobby import Lobby
from dropzone.models.tournament.points_system import PointsSystem
from dropzone.models.tournament.registration import (
    Registration,
    RosterEntry,
    WaitlistEntry,
)
from dropzone.models.tournament.standing import Standing
from dropzone.models.tournament.tournament import Tournament
from dropzone.models.tournament.tournament_config import (
    CheckInSettings,
    QualifierSettings,
    TournamentConfig,
)

__all__ = [
    "CheckInSettings",
    "Game",
    "GameResult",
    "Lobby",
    "PointsSystem",
    "QualifierSettings",
    "Registration",
    "RosterEntry",
    "Standing",
    "Tournament",
    "TournamentConfig",
    "WaitlistEntry",
]
