"""PointsSystem data class."""

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
from typing import Any, Dict

from dropzone.constants import DEFAULT_KILL_POINTS, DEFAULT_PLACEMENT_POINTS


@dataclass
class PointsSystem:
    """How a placement and a kill count turn into points.

    Attributes
    ----------
    placement_points : dict of int to int
        Points awarded per final placement. Placements missing from the table
        are worth zero.
    kill_points : int
        Points awarded per kill.
    """

    placement_points: Dict[int, int] = field(
        default_factory=lambda: dict(DEFAULT_PLACEMENT_POINTS)
    )
    kill_points: int = DEFAULT_KILL_POINTS

    def to_dict(self) -> Dict[str, Any]:
        """Serialize points system to dictionary."""
        return {
            # JSON object keys are strings
            "placement_points": {
                str(k): v for k, v in sorted(self.placement_points.items())
            },
            "kill_points": self.kill_points,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointsSystem":
        """Deserialize points system from dictionary."""
        table = data.get("placement_points")
        if table is None:
            table = DEFAULT_PLACEMENT_POINTS
        return cls(
            placement_points={int(k): int(v) for k, v in table.items()},
            kill_points=int(data.get("kill_points", DEFAULT_KILL_POINTS)),
        )
