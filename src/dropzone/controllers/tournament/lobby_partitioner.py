"""Lobby partitioning for the qualifier phase.

This module decides how many qualifier lobbies a tournament needs, how many
teams go in each, how many advance from each, and whether the last lobby is
a partial "transfer" lobby that gets topped up with non-qualified teams.
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

import math
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from dropzone.constants import GROUP_LETTERS, MIN_TEAMS_FOR_QUALIFIERS
from dropzone.exceptions import (
    InsufficientTeamsException,
    InvalidConfigurationException,
    LobbyFullException,
)
from dropzone.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class LobbyPlan:
    """The shape of a qualifier phase.

    Attributes:
        total_teams: Teams to place
        capacity: Maximum teams per lobby
        full_lobbies: Lobbies that can be filled to capacity
        remainder: Teams left over after the full lobbies
        needs_transfer: Whether the last lobby is only partially filled
        number_of_groups: Lobbies to create
        qualifiers_per_group: Teams advancing to the finals from each lobby
        transfer_non_qualified: Whether non-qualified teams move to the next lobby
        lobby_sizes: Teams per lobby, in lobby order
    """

    total_teams: int
    capacity: int
    full_lobbies: int
    remainder: int
    needs_transfer: bool
    number_of_groups: int
    qualifiers_per_group: int
    transfer_non_qualified: bool
    lobby_sizes: List[int] = field(default_factory=list)

    @property
    def finals_slots(self) -> int:
        """Qualified teams produced if every lobby fills its quota."""
        return self.number_of_groups * self.qualifiers_per_group

    def to_dict(self) -> Dict[str, Any]:
        """Serialize plan to dictionary."""
        return {
            "total_teams": self.total_teams,
            "capacity": self.capacity,
            "full_lobbies": self.full_lobbies,
            "remainder": self.remainder,
            "needs_transfer": self.needs_transfer,
            "number_of_groups": self.number_of_groups,
            "qualifiers_per_group": self.qualifiers_per_group,
            "transfer_non_qualified": self.transfer_non_qualified,
            "lobby_sizes": list(self.lobby_sizes),
            "finals_slots": self.finals_slots,
        }


def plan_lobbies(
    total_teams: int,
    capacity: int,
    requested_groups: Optional[int] = None,
    requested_qualifiers_per_group: Optional[int] = None,
    transfer_requested: bool = False,
) -> LobbyPlan:
    """Compute the qualifier lobby layout.

    Args:
        total_teams: Number of registered teams
        capacity: Maximum teams per lobby
        requested_groups: Organizer's group count, or None to derive it
        requested_qualifiers_per_group: Organizer's cut, or None to derive it
        transfer_requested: Organizer's transfer setting; forced on when the
            last lobby is partial

    Returns:
        The LobbyPlan; ``sum(plan.lobby_sizes) == total_teams``

    Raises:
        InsufficientTeamsException: With fewer than two teams
        InvalidConfigurationException: With a capacity below one
        LobbyFullException: If the requested group count cannot hold every
            team without exceeding capacity
    """
    if capacity < 1:
        raise InvalidConfigurationException(field="capacity", value=capacity)
    if total_teams < MIN_TEAMS_FOR_QUALIFIERS:
        raise InsufficientTeamsException(
            total_teams=total_teams, required=MIN_TEAMS_FOR_QUALIFIERS
        )

    full_lobbies = total_teams // capacity
    remainder = total_teams % capacity
    needs_transfer = 0 < remainder < capacity
    required_groups = math.ceil(total_teams / capacity)

    if requested_groups and requested_groups > 0:
        number_of_groups = min(requested_groups, required_groups)
    elif needs_transfer:
        number_of_groups = full_lobbies + 1
    else:
        number_of_groups = max(full_lobbies, 1)

    if number_of_groups * capacity < total_teams:
        raise LobbyFullException(
            total_teams=total_teams,
            capacity=capacity,
            requested_groups=number_of_groups,
            required_groups=required_groups,
        )

    if requested_qualifiers_per_group and requested_qualifiers_per_group > 0:
        qualifiers_per_group = max(1, min(requested_qualifiers_per_group, capacity))
    elif full_lobbies >= 2 and remainder == 0:
        # Split the finals lobby evenly between full lobbies
        qualifiers_per_group = capacity // full_lobbies
    else:
        qualifiers_per_group = capacity // 2
    qualifiers_per_group = max(1, qualifiers_per_group)

    transfer_non_qualified = transfer_requested or needs_transfer

    lobby_sizes = []
    left = total_teams
    for _ in range(number_of_groups):
        size = min(capacity, left)
        lobby_sizes.append(size)
        left -= size

    plan = LobbyPlan(
        total_teams=total_teams,
        capacity=capacity,
        full_lobbies=full_lobbies,
        remainder=remainder,
        needs_transfer=needs_transfer,
        number_of_groups=number_of_groups,
        qualifiers_per_group=qualifiers_per_group,
        transfer_non_qualified=transfer_non_qualified,
        lobby_sizes=lobby_sizes,
    )

    logger.debug(
        f"Lobby plan: {total_teams} teams, capacity {capacity}, "
        f"{full_lobbies} full lobbies, {remainder} remaining, "
        f"transfer {'on' if transfer_non_qualified else 'off'}, "
        f"{number_of_groups} groups x {qualifiers_per_group} qualifiers"
    )
    return plan


def assign_teams(
    team_ids: Sequence[str],
    plan: LobbyPlan,
    rng: Optional[random.Random] = None,
) -> List[List[str]]:
    """Shuffle teams and fill lobbies sequentially according to the plan.

    Args:
        team_ids: Teams to place; ``len(team_ids)`` must match the plan
        plan: Layout from :func:`plan_lobbies`
        rng: Random source; pass a seeded ``random.Random`` for reproducible
            draws

    Returns:
        One list of team ids per lobby, in lobby order
    """
    if len(team_ids) != plan.total_teams:
        raise InvalidConfigurationException(
            field="team_ids", value=len(team_ids), expected=plan.total_teams
        )

    rng = rng or random.Random()
    shuffled = list(team_ids)
    rng.shuffle(shuffled)

    lobbies: List[List[str]] = []
    start = 0
    for size in plan.lobby_sizes:
        lobbies.append(shuffled[start : start + size])
        start += size
    return lobbies


def group_name(order: int) -> str:
    """Display name for the lobby at a 1-based order ("Group A")."""
    letters = ""
    index = order
    while index > 0:
        index, rest = divmod(index - 1, len(GROUP_LETTERS))
        letters = GROUP_LETTERS[rest] + letters
    return f"Group {letters}"
