"""Tournament aggregate root.

A tournament owns everything that changes during an event: registrations,
qualifier lobbies with their games and standings, the finals games, the
published scoreboard. Engine operations read the whole aggregate, mutate it
and write it back in one transaction.
"""

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

from dropzone.constants import NO_GAMES_AVG_PLACEMENT, STATUS_REGISTRATION
from dropzone.exceptions import (
    GameNotFoundException,
    GroupNotFoundException,
    NotRegisteredException,
)

from .game import Game
from .lobby import Lobby
from .registration import Registration, WaitlistEntry
from .standing import Standing
from .tournament_config import TournamentConfig


@dataclass
class Tournament:
    """Main tournament aggregate.

    Attributes:
        id: Stable identifier
        config: Tournament configuration
        status: registration, locked, ongoing or completed
        registrations: Registered teams, in registration order
        waitlist: Teams waiting for a slot, in arrival order
        lobbies: Qualifier lobbies, ordered by ``Lobby.order``
        qualified_teams: Teams advancing to the finals, duplicate-free
        games: Finals games
        published_games: Game numbers visible on the public scoreboard
        standings: Tournament standings derived from the published games
        version: Bumped by the repository on every successful write
    """

    id: str
    config: TournamentConfig
    status: str = STATUS_REGISTRATION
    registrations: List[Registration] = field(default_factory=list)
    waitlist: List[WaitlistEntry] = field(default_factory=list)
    lobbies: List[Lobby] = field(default_factory=list)
    qualified_teams: List[str] = field(default_factory=list)
    games: List[Game] = field(default_factory=list)
    published_games: List[int] = field(default_factory=list)
    standings: List[Standing] = field(default_factory=list)
    version: int = 0

    # ========== Properties ==========

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def capacity(self) -> int:
        """Teams per lobby."""
        return self.config.max_teams_per_lobby

    @property
    def registered_team_ids(self) -> List[str]:
        return [r.team_id for r in self.registrations]

    @property
    def lobbies_generated(self) -> bool:
        return bool(self.lobbies)

    @property
    def finals_teams(self) -> List[str]:
        """Teams playing the finals.

        With qualifiers these are the qualified teams in qualification order;
        otherwise every registered team.
        """
        if self.config.has_qualifiers:
            return list(self.qualified_teams)
        return self.registered_team_ids

    @property
    def empty_avg_placement(self) -> float:
        """Average placement given to teams without a game in scope."""
        return float(max(NO_GAMES_AVG_PLACEMENT, self.capacity))

    @property
    def completed_games_count(self) -> int:
        return sum(1 for game in self.games if game.is_completed)

    # ========== Lookups ==========

    def get_registration(self, team_id: str) -> Optional[Registration]:
        for registration in self.registrations:
            if registration.team_id == team_id:
                return registration
        return None

    def require_registration(self, team_id: str) -> Registration:
        """Get a registration or raise.

        Raises:
            NotRegisteredException: If the team is not registered
        """
        registration = self.get_registration(team_id)
        if registration is None:
            raise NotRegisteredException(tournament_id=self.id, team_id=team_id)
        return registration

    def is_registered(self, team_id: str) -> bool:
        return self.get_registration(team_id) is not None

    def is_waitlisted(self, team_id: str) -> bool:
        return any(entry.team_id == team_id for entry in self.waitlist)

    def get_lobby(self, lobby_id: str) -> Lobby:
        """Get a lobby by id.

        Raises:
            GroupNotFoundException: If no lobby has this id
        """
        for lobby in self.lobbies:
            if lobby.id == lobby_id:
                return lobby
        raise GroupNotFoundException(tournament_id=self.id, lobby_id=lobby_id)

    def get_lobby_by_order(self, order: int) -> Lobby:
        """Get a lobby by its 1-based order.

        Raises:
            GroupNotFoundException: If no lobby has this order
        """
        for lobby in self.lobbies:
            if lobby.order == order:
                return lobby
        raise GroupNotFoundException(tournament_id=self.id, lobby_order=order)

    def next_lobby(self, lobby: Lobby) -> Optional[Lobby]:
        """The lobby that receives transfers from ``lobby``, if any."""
        for candidate in self.lobbies:
            if candidate.order == lobby.order + 1:
                return candidate
        return None

    def get_game(self, game_number: int) -> Game:
        """Get a finals game by number.

        Raises:
            GameNotFoundException: If the game has not been recorded
        """
        for game in self.games:
            if game.game_number == game_number:
                return game
        raise GameNotFoundException(tournament_id=self.id, game_number=game_number)

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary.

        Returns:
            Dictionary containing all tournament data
        """
        return {
            "id": self.id,
            "config": self.config.to_dict(),
            "status": self.status,
            "registrations": [r.to_dict() for r in self.registrations],
            "waitlist": [w.to_dict() for w in self.waitlist],
            "lobbies": [lobby.to_dict() for lobby in self.lobbies],
            "qualified_teams": list(self.qualified_teams),
            "games": [g.to_dict() for g in self.games],
            "published_games": list(self.published_games),
            "standings": [s.to_dict() for s in self.standings],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tournament":
        """Deserialize tournament from dictionary.

        Args:
            data: Dictionary containing tournament data

        Returns:
            Reconstructed Tournament object
        """
        lobbies = [Lobby.from_dict(d) for d in data.get("lobbies", [])]
        lobbies.sort(key=lambda lobby: lobby.order)
        return cls(
            id=str(data["id"]),
            config=TournamentConfig.from_dict(data["config"]),
            status=data.get("status", STATUS_REGISTRATION),
            registrations=[
                Registration.from_dict(r) for r in data.get("registrations", [])
            ],
            waitlist=[WaitlistEntry.from_dict(w) for w in data.get("waitlist", [])],
            lobbies=lobbies,
            qualified_teams=[str(t) for t in data.get("qualified_teams", [])],
            games=[Game.from_dict(g) for g in data.get("games", [])],
            published_games=sorted(int(n) for n in data.get("published_games", [])),
            standings=[Standing.from_dict(s) for s in data.get("standings", [])],
            version=int(data.get("version", 0)),
        )
