"""Data models for a single game and its per-team results."""

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
from datetime import datetime
from typing import Any, Dict, List, Optional

from dropzone.constants import GAME_COMPLETED, GAME_SCHEDULED
from dropzone.utils import format_timestamp, parse_timestamp


@dataclass
class GameResult:
    """One team's result in one game.

    Attributes:
        team_id: ID of the team
        placement: Final placement in the lobby (1 = winner)
        kills: Kills scored by the team
        placement_points: Points from the placement table
        kill_points: Points from kills
    """

    team_id: str
    placement: int
    kills: int = 0
    placement_points: int = 0
    kill_points: int = 0

    @property
    def total_points(self) -> int:
        """Placement points plus kill points."""
        return self.placement_points + self.kill_points

    def to_dict(self) -> Dict[str, Any]:
        """Serialize game result to dictionary."""
        return {
            "team_id": self.team_id,
            "placement": self.placement,
            "kills": self.kills,
            "placement_points": self.placement_points,
            "kill_points": self.kill_points,
            "total_points": self.total_points,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameResult":
        """Deserialize game result from dictionary."""
        return cls(
            team_id=str(data["team_id"]),
            placement=int(data["placement"]),
            kills=int(data.get("kills", 0)),
            placement_points=int(data.get("placement_points", 0)),
            kill_points=int(data.get("kill_points", 0)),
        )


@dataclass
class Game:
    """Container for all data related to a single game.

    Attributes:
        game_number: Sequence number (1-indexed) within its lobby or the finals
        status: "scheduled" until results are entered, then "completed"
        results: Per-team results, empty until recorded
        played_at: When the game was played
        map_name: Map the game was played on
        vod_link: Link to the recording
    """

    game_number: int
    status: str = GAME_SCHEDULED
    results: List[GameResult] = field(default_factory=list)
    played_at: Optional[datetime] = None
    map_name: Optional[str] = None
    vod_link: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == GAME_COMPLETED

    @property
    def has_results(self) -> bool:
        return bool(self.results)

    def result_for(self, team_id: str) -> Optional[GameResult]:
        """Get a team's result in this game, if it played."""
        for result in self.results:
            if result.team_id == team_id:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize game to dictionary."""
        return {
            "game_number": self.game_number,
            "status": self.status,
            "results": [r.to_dict() for r in self.results],
            "played_at": format_timestamp(self.played_at),
            "map_name": self.map_name,
            "vod_link": self.vod_link,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        """Deserialize game from dictionary."""
        return cls(
            game_number=int(data["game_number"]),
            status=data.get("status", GAME_SCHEDULED),
            results=[GameResult.from_dict(r) for r in data.get("results", [])],
            played_at=parse_timestamp(data.get("played_at")),
            map_name=data.get("map_name"),
            vod_link=data.get("vod_link"),
        )
