"""Standings aggregation for lobbies and the tournament scoreboard.

Every place that needs standings (lobby score entry, qualification, finals
score entry, publishing) goes through :func:`aggregate_standings`, so there
is exactly one ordering rule:

1. total points, descending
2. average placement, ascending (a team without games gets the worst-case
   sentinel)
3. position in the ``team_ids`` list given by the caller (registration or
   lobby seeding order)

The third key makes the order total, so cut-lines never depend on sort
stability or dictionary order.
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

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dropzone.constants import NO_GAMES_AVG_PLACEMENT
from dropzone.models.tournament import Game, Standing
from dropzone.utils import setup_logger

logger = setup_logger(__name__)


def standing_sort_key(
    standing: Standing, seed_index: Mapping[str, int]
) -> Tuple[int, float, int]:
    """Sort key implementing the standings order (best first)."""
    return (
        -standing.total_points,
        standing.avg_placement,
        seed_index.get(standing.team_id, len(seed_index)),
    )


def sort_standings(
    standings: Iterable[Standing], team_ids: Sequence[str]
) -> List[Standing]:
    """Sort standings best first, ties broken by ``team_ids`` order."""
    seed_index = {team_id: i for i, team_id in enumerate(team_ids)}
    return sorted(standings, key=lambda s: standing_sort_key(s, seed_index))


def aggregate_standings(
    games: Iterable[Game],
    team_ids: Sequence[str],
    empty_avg_placement: float = NO_GAMES_AVG_PLACEMENT,
) -> List[Standing]:
    """Fold completed games into one sorted Standing per team.

    Args:
        games: Games in scope, in game order; scheduled games are skipped
        team_ids: Teams that must appear, even without a game played
        empty_avg_placement: Average placement for teams that played nothing

    Returns:
        One Standing per entry of ``team_ids``, best first
    """
    totals: Dict[str, Standing] = {
        team_id: Standing(team_id=team_id, empty_avg_placement=empty_avg_placement)
        for team_id in team_ids
    }

    for game in games:
        if not game.is_completed:
            continue
        for result in game.results:
            standing = totals.get(result.team_id)
            if standing is None:
                logger.warning(
                    f"Game {game.game_number}: ignoring result for team "
                    f"{result.team_id} outside the standings scope"
                )
                continue
            standing.points_before_last_game = standing.total_points
            standing.total_points += result.total_points
            standing.total_kills += result.kills
            standing.total_placement_points += result.placement_points
            standing.placements.append(result.placement)

    return sort_standings(totals.values(), team_ids)


def calculate_earnings(
    rank: int, prize_pool: float, prize_distribution: Mapping[int, float]
) -> float:
    """Prize money for a final rank, rounded to cents."""
    if not prize_pool or prize_pool <= 0:
        return 0.0
    percentage = prize_distribution.get(rank)
    if not percentage:
        return 0.0
    return round(prize_pool * percentage / 100, 2)


def rank_standings(
    standings: List[Standing],
    prize_pool: float = 0.0,
    prize_distribution: Optional[Mapping[int, float]] = None,
) -> List[Standing]:
    """Assign 1-based ranks and earnings to already sorted standings."""
    distribution = prize_distribution or {}
    for index, standing in enumerate(standings):
        standing.rank = index + 1
        standing.earnings = calculate_earnings(
            standing.rank, prize_pool, distribution
        )
    return standings
