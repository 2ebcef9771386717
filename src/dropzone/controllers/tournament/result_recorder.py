"""Result recording and validation for tournaments.

This module handles recording game results with proper validation and error
checking, for qualifier lobby games as well as finals games.
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

from datetime import datetime
from typing import Collection, List, Optional

from dropzone.constants import GAME_COMPLETED
from dropzone.exceptions import (
    GameAlreadyPublishedException,
    GameNotFoundException,
    InvalidResultException,
    LobbyAlreadyProcessedException,
)
from dropzone.models.tournament import Game, Lobby, PointsSystem, Standing, Tournament
from dropzone.type_hints import ResultEntries
from dropzone.utils import parse_timestamp, setup_logger, utcnow
from dropzone.utils.validation import validate_result_entries_strict

from .points import build_result
from .standings import aggregate_standings

logger = setup_logger(__name__)


class ResultRecorder:
    """Handles recording and validating game results.

    This class is responsible for:
    - Validating raw result entries against the teams in scope
    - Scoring each entry with the tournament's points system
    - Marking games completed
    - Refreshing lobby standings after qualifier games
    - Refusing to overwrite published finals games
    """

    def record_game(
        self,
        game: Game,
        entries: ResultEntries,
        points_system: PointsSystem,
        allowed_teams: Optional[Collection[str]] = None,
        max_placement: Optional[int] = None,
        played_at: Optional[datetime] = None,
        map_name: Optional[str] = None,
        vod_link: Optional[str] = None,
    ) -> Game:
        """Validate and store the results of one game.

        Re-recording a completed game replaces its results.

        Args:
            game: The game to fill in
            entries: Raw result mappings
            points_system: Placement table and kill value
            allowed_teams: Teams that may appear in the results
            max_placement: Highest legal placement
            played_at: When the game was played; defaults to now
            map_name: Map the game was played on
            vod_link: Link to the recording

        Returns:
            The updated game

        Raises:
            InvalidResultException: If any entry is invalid
        """
        clean = validate_result_entries_strict(entries, allowed_teams, max_placement)

        if game.is_completed:
            logger.warning(
                f"Game {game.game_number} already has results, they will be replaced"
            )

        game.results = sorted(
            (
                build_result(team_id, placement, kills, points_system)
                for team_id, placement, kills in clean
            ),
            key=lambda r: r.placement,
        )
        game.status = GAME_COMPLETED
        game.played_at = parse_timestamp(played_at) or utcnow()
        if map_name is not None:
            game.map_name = map_name
        if vod_link is not None:
            game.vod_link = vod_link

        for result in game.results:
            logger.debug(
                f"Game {game.game_number}: {result.team_id} placed "
                f"{result.placement} with {result.kills} kills "
                f"({result.total_points} pts)"
            )
        return game

    def record_lobby_game(
        self,
        lobby: Lobby,
        game_number: int,
        entries: ResultEntries,
        points_system: PointsSystem,
        capacity: int,
        empty_avg_placement: float,
        **game_details,
    ) -> List[Standing]:
        """Record a qualifier game and refresh the lobby standings.

        Returns:
            The lobby's standings over its completed games

        Raises:
            LobbyAlreadyProcessedException: If the cut was already made
            GameNotFoundException: If the lobby has no such game
            InvalidResultException: If any entry is invalid
        """
        if lobby.processed:
            raise LobbyAlreadyProcessedException(
                lobby_id=lobby.id, lobby_order=lobby.order
            )

        game = lobby.get_game(game_number)
        if game is None:
            raise GameNotFoundException(lobby_id=lobby.id, game_number=game_number)

        self.record_game(
            game,
            entries,
            points_system,
            allowed_teams=lobby.teams,
            max_placement=capacity,
            **game_details,
        )
        lobby.standings = aggregate_standings(
            lobby.games, lobby.teams, empty_avg_placement
        )
        logger.info(
            f"{lobby.name}: recorded game {game_number} "
            f"({len(lobby.completed_games)}/{len(lobby.games)} completed)"
        )
        return lobby.standings

    def record_finals_game(
        self,
        tournament: Tournament,
        game_number: int,
        entries: ResultEntries,
        **game_details,
    ) -> Game:
        """Record a finals game, creating it on first entry.

        Raises:
            InvalidResultException: For a game number outside the schedule or
                an invalid entry
            GameAlreadyPublishedException: If the game is on the scoreboard
        """
        number_of_games = tournament.config.number_of_games
        if isinstance(game_number, bool) or not isinstance(game_number, int):
            raise InvalidResultException(
                reason="invalid_game_number", game_number=game_number
            )
        if not 1 <= game_number <= number_of_games:
            raise InvalidResultException(
                reason="invalid_game_number",
                game_number=game_number,
                number_of_games=number_of_games,
            )
        if game_number in tournament.published_games:
            raise GameAlreadyPublishedException(
                tournament_id=tournament.id, game_number=game_number
            )

        game = next((g for g in tournament.games if g.game_number == game_number), None)
        is_new = game is None
        if is_new:
            game = Game(game_number=game_number)

        self.record_game(
            game,
            entries,
            tournament.config.points_system,
            allowed_teams=tournament.finals_teams,
            max_placement=max(tournament.capacity, len(tournament.finals_teams)),
            **game_details,
        )
        if is_new:
            tournament.games.append(game)
            tournament.games.sort(key=lambda g: g.game_number)
        logger.info(
            f"{tournament.name}: recorded finals game {game_number} "
            f"({tournament.completed_games_count}/{number_of_games} completed)"
        )
        return game
