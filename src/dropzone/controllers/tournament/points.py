"""Points calculation for battle-royale games."""

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

from dropzone.models.tournament import GameResult, PointsSystem
from dropzone.type_hints import PlacementTable


def compute_points(
    placement: int, kills: int, table: PlacementTable, kill_point_value: int
) -> int:
    """Score one team's game.

    Placements missing from the table (including 0) are worth nothing, so a
    table larger or smaller than the lobby never raises.

    Example:
        >>> compute_points(1, 5, {1: 20}, 1)
        25
    """
    return table.get(placement, 0) + kills * kill_point_value


def build_result(
    team_id: str, placement: int, kills: int, points_system: PointsSystem
) -> GameResult:
    """Create a GameResult with its points breakdown filled in."""
    placement_points = compute_points(placement, 0, points_system.placement_points, 0)
    kill_points = compute_points(0, kills, {}, points_system.kill_points)
    return GameResult(
        team_id=team_id,
        placement=placement,
        kills=kills,
        placement_points=placement_points,
        kill_points=kill_points,
    )
