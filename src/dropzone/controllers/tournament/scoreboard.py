"""Public scoreboard publishing.

Organizers decide when finals games become visible. Publishing adds every
completed, not yet published game to the published set and rebuilds the
tournament standings from the whole published set. Resetting empties both.
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

from typing import Collection, Iterable, List

from dropzone.exceptions import NothingToPublishException
from dropzone.models.tournament import Game, Standing, Tournament
from dropzone.utils import setup_logger

from .standings import aggregate_standings, rank_standings

logger = setup_logger(__name__)


def publish(games: Iterable[Game], already_published: Collection[int]) -> List[int]:
    """Select the games a publish action would add.

    Args:
        games: Finals games
        already_published: Game numbers already on the scoreboard

    Returns:
        Sorted game numbers of completed games with results that are not
        published yet

    Raises:
        NothingToPublishException: If no game qualifies
    """
    published = set(already_published)
    newly = sorted(
        {
            game.game_number
            for game in games
            if game.is_completed
            and game.has_results
            and game.game_number > 0
            and game.game_number not in published
        }
    )
    if not newly:
        raise NothingToPublishException(published_games=sorted(published))
    return newly


def published_standings(tournament: Tournament) -> List[Standing]:
    """Rank the finals teams over the published games only."""
    published = set(tournament.published_games)
    games = sorted(
        (g for g in tournament.games if g.game_number in published),
        key=lambda g: g.game_number,
    )
    team_ids = _scoreboard_teams(tournament, games)
    standings = aggregate_standings(games, team_ids, tournament.empty_avg_placement)
    return rank_standings(
        standings, tournament.config.prize_pool, tournament.config.prize_distribution
    )


def live_standings(tournament: Tournament) -> List[Standing]:
    """Rank the finals teams over every completed finals game.

    This is the organizer's view while entering scores; the public
    scoreboard only moves on publish.
    """
    games = sorted(
        (g for g in tournament.games if g.is_completed), key=lambda g: g.game_number
    )
    team_ids = _scoreboard_teams(tournament, games)
    standings = aggregate_standings(games, team_ids, tournament.empty_avg_placement)
    return rank_standings(
        standings, tournament.config.prize_pool, tournament.config.prize_distribution
    )


def apply_publish(tournament: Tournament, newly_published: Iterable[int]) -> None:
    """Merge newly published games and rebuild the standings from scratch."""
    merged = set(tournament.published_games) | set(newly_published)
    tournament.published_games = sorted(merged)
    tournament.standings = published_standings(tournament)
    logger.info(
        f"Published games {sorted(newly_published)} for {tournament.name}; "
        f"scoreboard now covers {tournament.published_games}"
    )


def reset(tournament: Tournament) -> None:
    """Clear the published games and the standings together."""
    tournament.published_games, tournament.standings = [], []
    logger.info(f"Scoreboard reset for {tournament.name}")


def _scoreboard_teams(tournament: Tournament, games: Iterable[Game]) -> List[str]:
    # Finals field first, then anybody else who appears in a published game
    team_ids = list(tournament.finals_teams)
    known = set(team_ids)
    for game in games:
        for result in game.results:
            if result.team_id not in known:
                team_ids.append(result.team_id)
                known.add(result.team_id)
    return team_ids
