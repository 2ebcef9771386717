"""Standing data class, shared by lobby and tournament scoreboards."""

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


@dataclass
class Standing:
    """A team's aggregated record over a scope of games.

    Standings are always recomputed from games; never edit one by hand.

    Attributes:
        team_id: ID of the team
        total_points: Sum of total points over the scope
        total_kills: Sum of kills over the scope
        placements: Placement in every game played, in game order
        total_placement_points: Sum of placement points only
        points_before_last_game: Total before the team's last game in scope
        qualified: Set by the qualification processor (lobby standings only)
        empty_avg_placement: Average placement reported when no game was played
        rank: 1-based position (tournament standings only)
        earnings: Prize money for the rank (tournament standings only)
    """

    team_id: str
    total_points: int = 0
    total_kills: int = 0
    placements: List[int] = field(default_factory=list)
    total_placement_points: int = 0
    points_before_last_game: int = 0
    qualified: bool = False
    empty_avg_placement: float = NO_GAMES_AVG_PLACEMENT
    rank: Optional[int] = None
    earnings: float = 0.0

    @property
    def games_played(self) -> int:
        return len(self.placements)

    @property
    def avg_placement(self) -> float:
        """Mean placement, or the worst-case sentinel with no games."""
        if not self.placements:
            return self.empty_avg_placement
        return sum(self.placements) / len(self.placements)

    @property
    def wins(self) -> int:
        return sum(1 for p in self.placements if p == 1)

    @property
    def win_rate(self) -> float:
        """Percentage of games won, two decimals."""
        if not self.placements:
            return 0.0
        return round(self.wins / len(self.placements) * 100, 2)

    @property
    def kills_per_game(self) -> float:
        if not self.placements:
            return 0.0
        return round(self.total_kills / len(self.placements), 2)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize standing to dictionary."""
        return {
            "team_id": self.team_id,
            "total_points": self.total_points,
            "total_kills": self.total_kills,
            "placements": list(self.placements),
            "total_placement_points": self.total_placement_points,
            "points_before_last_game": self.points_before_last_game,
            "qualified": self.qualified,
            "empty_avg_placement": self.empty_avg_placement,
            "rank": self.rank,
            "earnings": self.earnings,
            # Derived, stored for readers of the raw document
            "games_played": self.games_played,
            "avg_placement": round(self.avg_placement, 2),
            "wins": self.wins,
            "win_rate": self.win_rate,
            "kills_per_game": self.kills_per_game,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Standing":
        """Deserialize standing from dictionary."""
        return cls(
            team_id=str(data["team_id"]),
            total_points=int(data.get("total_points", 0)),
            total_kills=int(data.get("total_kills", 0)),
            placements=[int(p) for p in data.get("placements", [])],
            total_placement_points=int(data.get("total_placement_points", 0)),
            points_before_last_game=int(data.get("points_before_last_game", 0)),
            qualified=bool(data.get("qualified", False)),
            empty_avg_placement=float(
                data.get("empty_avg_placement", NO_GAMES_AVG_PLACEMENT)
            ),
            rank=data.get("rank"),
            earnings=float(data.get("earnings", 0.0)),
        )
