"""Qualification processing for completed qualifier lobbies.

When every game of a lobby has been played, the top teams are marked
qualified and join the finals field. The rest are either transferred into
the next lobby (as far as its capacity allows) or eliminated. A transferred
team starts the next lobby from zero points.
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

from dropzone.constants import NO_GAMES_AVG_PLACEMENT
from dropzone.exceptions import AlreadyProcessedException, IncompleteGamesException
from dropzone.models.tournament import Lobby
from dropzone.utils import setup_logger

from .standings import aggregate_standings

logger = setup_logger(__name__)


@dataclass
class ProcessResult:
    """Outcome of one lobby's qualification cut.

    ``qualified + transferred + eliminated`` always equals the number of
    teams in the processed lobby.
    """

    lobby_id: str
    lobby_order: int
    qualified_team_ids: List[str] = field(default_factory=list)
    transferred_team_ids: List[str] = field(default_factory=list)
    eliminated_team_ids: List[str] = field(default_factory=list)
    next_lobby_id: Optional[str] = None

    @property
    def qualified(self) -> int:
        return len(self.qualified_team_ids)

    @property
    def transferred(self) -> int:
        return len(self.transferred_team_ids)

    @property
    def eliminated(self) -> int:
        return len(self.eliminated_team_ids)

    @property
    def total(self) -> int:
        return self.qualified + self.transferred + self.eliminated

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary."""
        return {
            "lobby_id": self.lobby_id,
            "lobby_order": self.lobby_order,
            "qualified": self.qualified,
            "transferred": self.transferred,
            "eliminated": self.eliminated,
            "qualified_team_ids": list(self.qualified_team_ids),
            "transferred_team_ids": list(self.transferred_team_ids),
            "eliminated_team_ids": list(self.eliminated_team_ids),
            "next_lobby_id": self.next_lobby_id,
        }


def process_lobby(
    lobby: Lobby,
    qualifiers_per_group: int,
    transfer_enabled: bool,
    capacity: int,
    next_lobby: Optional[Lobby] = None,
    qualified_teams: Optional[List[str]] = None,
    empty_avg_placement: float = NO_GAMES_AVG_PLACEMENT,
) -> ProcessResult:
    """Make the qualification cut for a lobby.

    Mutates ``lobby`` (standings, ``processed``), ``next_lobby`` (teams and
    standings of transferred teams) and ``qualified_teams`` in place.

    Args:
        lobby: The lobby to process; all its games must be completed
        qualifiers_per_group: How many teams advance to the finals
        transfer_enabled: Whether non-qualified teams may move to the next lobby
        capacity: Maximum teams per lobby
        next_lobby: The lobby of order ``lobby.order + 1``, if any
        qualified_teams: The tournament's finals list, appended to in place
        empty_avg_placement: Average placement for teams without a game

    Returns:
        ProcessResult with the qualified, transferred and eliminated teams

    Raises:
        AlreadyProcessedException: If the lobby's cut was already made
        IncompleteGamesException: If any game of the lobby is not completed
    """
    if lobby.processed:
        raise AlreadyProcessedException(lobby_id=lobby.id, lobby_order=lobby.order)

    if not lobby.all_games_completed:
        raise IncompleteGamesException(
            lobby_id=lobby.id,
            lobby_order=lobby.order,
            completed_games=len(lobby.completed_games),
            total_games=len(lobby.games),
        )

    if qualified_teams is None:
        qualified_teams = []

    standings = aggregate_standings(lobby.games, lobby.teams, empty_avg_placement)
    cut = max(0, qualifiers_per_group)
    advancing = standings[:cut]
    remaining = standings[cut:]

    result = ProcessResult(lobby_id=lobby.id, lobby_order=lobby.order)

    for standing in advancing:
        standing.qualified = True
        result.qualified_team_ids.append(standing.team_id)
        if standing.team_id not in qualified_teams:
            qualified_teams.append(standing.team_id)

    can_transfer = (
        transfer_enabled and next_lobby is not None and not next_lobby.processed
    )
    if can_transfer:
        available_slots = max(0, capacity - len(next_lobby.teams))
        moving = remaining[: min(len(remaining), available_slots)]
        for standing in moving:
            next_lobby.teams.append(standing.team_id)
            result.transferred_team_ids.append(standing.team_id)
        if moving:
            # New members enter with a zero-valued row
            next_lobby.standings = aggregate_standings(
                next_lobby.games, next_lobby.teams, empty_avg_placement
            )
        result.next_lobby_id = next_lobby.id
        remaining = remaining[len(moving) :]
    elif transfer_enabled and next_lobby is not None:
        logger.warning(
            f"{next_lobby.name} is already processed; "
            f"non-qualified teams of {lobby.name} are eliminated"
        )

    result.eliminated_team_ids.extend(s.team_id for s in remaining)

    lobby.standings = standings
    lobby.processed = True

    logger.info(
        f"Processed {lobby.name}: {result.qualified} qualified, "
        f"{result.transferred} transferred, {result.eliminated} eliminated"
    )
    return result
