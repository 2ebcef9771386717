"""Data model for a qualifier lobby (group)."""

# Dropzone
# Copyright (C) 2025  Dropzone developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .game import Game
from .standing import Standing
from .tournament_config import CheckInSettings


@dataclass
class Lobby:
    """A qualifier group: a bounded set of teams playing its own games.

    Attributes:
        id: Stable identifier
        name: Display name ("Group A")
        order: 1-based position; overflow of order N moves to order N + 1
        teams: Member team ids, in seeding order
        games: Scheduled and completed games
        standings: One row per member team, recomputed from ``games``
        processed: Whether the qualification cut has been made
        check_in: Optional lobby-specific check-in window
    """

    id: str
    name: str
    order: int
    teams: List[str] = field(default_factory=list)
    games: List[Game] = field(default_factory=list)
    standings: List[Standing] = field(default_factory=list)
    processed: bool = False
    check_in: Optional[CheckInSettings] = None

    @property
    def all_games_completed(self) -> bool:
        return all(game.is_completed for game in self.games)

    @property
    def completed_games(self) -> List[Game]:
        return [game for game in self.games if game.is_completed]

    def get_game(self, game_number: int) -> Optional[Game]:
        """Get a game by its number, or None."""
        for game in self.games:
            if game.game_number == game_number:
                return game
        return None

    def standing_for(self, team_id: str) -> Optional[Standing]:
        for standing in self.standings:
            if standing.team_id == team_id:
                return standing
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize lobby to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "teams": list(self.teams),
            "games": [g.to_dict() for g in self.games],
            "standings": [s.to_dict() for s in self.standings],
            "processed": self.processed,
            "check_in": self.check_in.to_dict() if self.check_in else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lobby":
        """Deserialize lobby from dictionary."""
        check_in = data.get("check_in")
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            order=int(data["order"]),
            teams=[str(t) for t in data.get("teams", [])],
            games=[Game.from_dict(g) for g in data.get("games", [])],
            standings=[Standing.from_dict(s) for s in data.get("standings", [])],
            processed=bool(data.get("processed", False)),
            check_in=CheckInSettings.from_dict(check_in) if check_in else None,
        )
