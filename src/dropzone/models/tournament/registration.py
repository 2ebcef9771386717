"""Registration and waitlist records."""

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

from dropzone.utils import format_timestamp, parse_timestamp


@dataclass
class RosterEntry:
    """A player selected to play for a team in one tournament."""

    player_id: str
    role: Optional[str] = None
    is_guest: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "role": self.role,
            "is_guest": self.is_guest,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RosterEntry":
        return cls(
            player_id=str(data["player_id"]),
            role=data.get("role"),
            is_guest=bool(data.get("is_guest", False)),
        )


@dataclass
class Registration:
    """A team's registration to a tournament.

    Attributes:
        team_id: ID of the registered team
        registered_at: When the team registered
        checked_in: Whether the team has checked in
        checked_in_at: When the team checked in
        checked_in_by: Actor who performed the check-in
        roster: Players selected for this tournament (may be empty)
    """

    team_id: str
    registered_at: Optional[datetime] = None
    checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    checked_in_by: Optional[str] = None
    roster: List[RosterEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize registration to dictionary."""
        return {
            "team_id": self.team_id,
            "registered_at": format_timestamp(self.registered_at),
            "checked_in": self.checked_in,
            "checked_in_at": format_timestamp(self.checked_in_at),
            "checked_in_by": self.checked_in_by,
            "roster": [r.to_dict() for r in self.roster],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Registration":
        """Deserialize registration from dictionary."""
        return cls(
            team_id=str(data["team_id"]),
            registered_at=parse_timestamp(data.get("registered_at")),
            checked_in=bool(data.get("checked_in", False)),
            checked_in_at=parse_timestamp(data.get("checked_in_at")),
            checked_in_by=data.get("checked_in_by"),
            roster=[RosterEntry.from_dict(r) for r in data.get("roster", [])],
        )


@dataclass
class WaitlistEntry:
    """A team waiting for a registration slot."""

    team_id: str
    joined_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "joined_at": format_timestamp(self.joined_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WaitlistEntry":
        return cls(
            team_id=str(data["team_id"]),
            joined_at=parse_timestamp(data.get("joined_at")),
        )
