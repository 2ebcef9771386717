"""TournamentConfig and the settings blocks it carries."""

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
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta

from dropzone.constants import (
    DEFAULT_GAMES_PER_GROUP,
    DEFAULT_MODE,
    DEFAULT_NUMBER_OF_GAMES,
    LOBBY_CAPACITY,
)
from dropzone.exceptions import InvalidConfigurationException
from dropzone.type_hints import PrizeDistribution
from dropzone.utils import format_timestamp, parse_timestamp

from .points_system import PointsSystem


@dataclass
class CheckInSettings:
    """Check-in window.

    Attributes
    ----------
    enabled : bool
        Whether teams have to check in at all.
    opens_at : datetime or None
        Check-in is refused before this instant. None means no lower bound.
    closes_at : datetime or None
        Check-in is refused after this instant. None means no upper bound.
    """

    enabled: bool = True
    opens_at: Optional[datetime] = None
    closes_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.opens_at = parse_timestamp(self.opens_at)
        self.closes_at = parse_timestamp(self.closes_at)

    @classmethod
    def before_start(
        cls,
        starts_at: datetime,
        opens_before: relativedelta = relativedelta(hours=2),
        closes_before: relativedelta = relativedelta(minutes=30),
    ) -> "CheckInSettings":
        """Build a window relative to the tournament start.

        The defaults open check-in two hours before the start and close it
        thirty minutes before.
        """
        starts_at = parse_timestamp(starts_at)
        return cls(
            enabled=True,
            opens_at=starts_at - opens_before,
            closes_at=starts_at - closes_before,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "opens_at": format_timestamp(self.opens_at),
            "closes_at": format_timestamp(self.closes_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckInSettings":
        return cls(
            enabled=bool(data.get("enabled", True)),
            opens_at=parse_timestamp(data.get("opens_at")),
            closes_at=parse_timestamp(data.get("closes_at")),
        )


@dataclass
class QualifierSettings:
    """Qualifier phase settings.

    Every field is optional: the lobby partitioner derives the number of
    groups and the qualifiers per group, and forces transfers on when the
    last lobby is only partially filled. Derived values are written back here
    when lobbies are generated.
    """

    number_of_groups: Optional[int] = None
    qualifiers_per_group: Optional[int] = None
    games_per_group: int = DEFAULT_GAMES_PER_GROUP
    transfer_non_qualified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number_of_groups": self.number_of_groups,
            "qualifiers_per_group": self.qualifiers_per_group,
            "games_per_group": self.games_per_group,
            "transfer_non_qualified": self.transfer_non_qualified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QualifierSettings":
        return cls(
            number_of_groups=data.get("number_of_groups"),
            qualifiers_per_group=data.get("qualifiers_per_group"),
            games_per_group=int(data.get("games_per_group", DEFAULT_GAMES_PER_GROUP)),
            transfer_non_qualified=bool(data.get("transfer_non_qualified", False)),
        )


@dataclass
class TournamentConfig:
    """Tournament configuration settings.

    Attributes
    ----------
    name : str
        Tournament name.
    game_mode : str
        "Trio" or "Squad"; drives the default lobby capacity and roster size.
    max_teams_per_lobby : int
        Capacity ceiling of every lobby, finals included.
    number_of_games : int
        Finals games; the tournament completes once this many are recorded.
    points_system : PointsSystem
        Placement table and kill value.
    has_qualifiers : bool
        Whether teams go through qualifier lobbies before the finals.
    qualifier_settings : QualifierSettings
        Requested qualifier shape, completed by the partitioner.
    check_in : CheckInSettings
        Tournament-wide check-in window.
    prize_pool : float
        Total prize money.
    prize_distribution : dict of int to float
        Percentage of the prize pool per final rank.
    max_registered_teams : int or None
        Registration cap when qualifiers are enabled. Without qualifiers the
        cap is the lobby capacity.
    """

    name: str
    game_mode: str = DEFAULT_MODE
    max_teams_per_lobby: Optional[int] = None
    number_of_games: int = DEFAULT_NUMBER_OF_GAMES
    points_system: PointsSystem = field(default_factory=PointsSystem)
    has_qualifiers: bool = False
    qualifier_settings: QualifierSettings = field(default_factory=QualifierSettings)
    check_in: CheckInSettings = field(default_factory=CheckInSettings)
    prize_pool: float = 0.0
    prize_distribution: PrizeDistribution = field(default_factory=dict)
    max_registered_teams: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_teams_per_lobby is None:
            self.max_teams_per_lobby = LOBBY_CAPACITY.get(
                self.game_mode, LOBBY_CAPACITY[DEFAULT_MODE]
            )
        self.validate()

    def validate(self) -> None:
        """Reject configurations the engine cannot run.

        Raises:
            InvalidConfigurationException: On the first invalid field
        """
        if self.game_mode not in LOBBY_CAPACITY:
            raise InvalidConfigurationException(
                field="game_mode", value=self.game_mode
            )
        if self.max_teams_per_lobby < 2:
            raise InvalidConfigurationException(
                field="max_teams_per_lobby", value=self.max_teams_per_lobby
            )
        if self.number_of_games < 1:
            raise InvalidConfigurationException(
                field="number_of_games", value=self.number_of_games
            )
        if self.qualifier_settings.games_per_group < 1:
            raise InvalidConfigurationException(
                field="games_per_group",
                value=self.qualifier_settings.games_per_group,
            )
        if sum(self.prize_distribution.values()) > 100:
            raise InvalidConfigurationException(
                field="prize_distribution",
                value=sum(self.prize_distribution.values()),
            )

    @property
    def registration_cap(self) -> Optional[int]:
        """Maximum registrations, or None for unlimited."""
        if self.has_qualifiers:
            return self.max_registered_teams
        return self.max_teams_per_lobby

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "name": self.name,
            "game_mode": self.game_mode,
            "max_teams_per_lobby": self.max_teams_per_lobby,
            "number_of_games": self.number_of_games,
            "points_system": self.points_system.to_dict(),
            "has_qualifiers": self.has_qualifiers,
            "qualifier_settings": self.qualifier_settings.to_dict(),
            "check_in": self.check_in.to_dict(),
            "prize_pool": self.prize_pool,
            "prize_distribution": {
                str(k): v for k, v in sorted(self.prize_distribution.items())
            },
            "max_registered_teams": self.max_registered_teams,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            name=data.get("name", "Untitled Tournament"),
            game_mode=data.get("game_mode", DEFAULT_MODE),
            max_teams_per_lobby=data.get("max_teams_per_lobby"),
            number_of_games=int(data.get("number_of_games", DEFAULT_NUMBER_OF_GAMES)),
            points_system=PointsSystem.from_dict(data.get("points_system", {})),
            has_qualifiers=bool(data.get("has_qualifiers", False)),
            qualifier_settings=QualifierSettings.from_dict(
                data.get("qualifier_settings", {})
            ),
            check_in=CheckInSettings.from_dict(data.get("check_in", {})),
            prize_pool=float(data.get("prize_pool", 0.0)),
            prize_distribution={
                int(k): float(v)
                for k, v in data.get("prize_distribution", {}).items()
            },
            max_registered_teams=data.get("max_registered_teams"),
        )
