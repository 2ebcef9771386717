"""Validation utilities for Dropzone.

This module provides reusable validation functions with consistent error
handling. The ``validate_*`` functions return a :class:`ValidationResult`;
the ``*_strict`` variants raise the matching exception instead.
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

import re
from typing import Any, Collection, Dict, List, Optional, Sequence, Tuple

from dropzone.constants import ROSTER_SIZE
from dropzone.exceptions import InvalidResultException, InvalidRosterException
from dropzone.type_hints import ResultEntries

# team_id, placement, kills
CleanResult = Tuple[str, int, int]

_INTEGER = re.compile(r"-?[0-9]+\Z")


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error: Machine-readable reason if invalid
        details: Structured context for the failure
        sanitized_value: Cleaned/normalized value if valid
    """

    def __init__(
        self,
        is_valid: bool,
        error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        sanitized_value: Any = None,
    ):
        self.is_valid = is_valid
        self.error = error
        self.details = details or {}
        self.sanitized_value = sanitized_value

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return f"ValidationResult(VALID, {self.sanitized_value!r})"
        return f"ValidationResult(INVALID, {self.error!r}, {self.details!r})"


def _invalid(error: str, **details: Any) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error, details=details)


def _as_int(value: Any) -> Optional[int]:
    # bool is an int subclass; a placement of True is a data entry mistake
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.match(value.strip()):
        return int(value.strip())
    return None


# ========== Game Result Validation ==========


def validate_result_entries(
    entries: ResultEntries,
    allowed_teams: Optional[Collection[str]] = None,
    max_placement: Optional[int] = None,
) -> ValidationResult:
    """Validate the raw results of one game.

    Each entry needs ``team_id``, ``placement`` (>= 1) and ``kills`` (>= 0,
    defaults to 0). Teams and placements must be unique within the game.

    Args:
        entries: Raw result mappings as entered by the organizer
        allowed_teams: Teams that may appear in this game, or None for any
        max_placement: Highest legal placement (the lobby capacity)

    Returns:
        ValidationResult whose sanitized_value is a list of
        (team_id, placement, kills) tuples in input order

    Example:
        >>> result = validate_result_entries([{"team_id": "t1", "placement": 1}])
        >>> result.sanitized_value
        [('t1', 1, 0)]
    """
    if not entries:
        return _invalid("empty_results")

    clean: List[CleanResult] = []
    seen_teams = set()
    seen_placements = set()

    for index, entry in enumerate(entries):
        if not hasattr(entry, "get"):
            return _invalid("malformed_entry", index=index)

        team_id = entry.get("team_id") or entry.get("team")
        if not team_id:
            return _invalid("missing_team", index=index)
        team_id = str(team_id)

        placement = _as_int(entry.get("placement"))
        if placement is None or placement < 1:
            return _invalid(
                "invalid_placement", index=index, placement=entry.get("placement")
            )
        if max_placement is not None and placement > max_placement:
            return _invalid(
                "placement_out_of_range",
                index=index,
                placement=placement,
                max_placement=max_placement,
            )

        kills = _as_int(entry.get("kills", 0))
        if kills is None or kills < 0:
            return _invalid("invalid_kills", index=index, kills=entry.get("kills"))

        if allowed_teams is not None and team_id not in allowed_teams:
            return _invalid("team_not_in_scope", index=index, team_id=team_id)
        if team_id in seen_teams:
            return _invalid("duplicate_team", index=index, team_id=team_id)
        if placement in seen_placements:
            return _invalid("duplicate_placement", index=index, placement=placement)

        seen_teams.add(team_id)
        seen_placements.add(placement)
        clean.append((team_id, placement, kills))

    return ValidationResult(is_valid=True, sanitized_value=clean)


def validate_result_entries_strict(
    entries: ResultEntries,
    allowed_teams: Optional[Collection[str]] = None,
    max_placement: Optional[int] = None,
) -> List[CleanResult]:
    """Validate game results and raise if invalid.

    Raises:
        InvalidResultException: If any entry is invalid
    """
    result = validate_result_entries(entries, allowed_teams, max_placement)
    if not result.is_valid:
        raise InvalidResultException(reason=result.error, **result.details)
    return result.sanitized_value


# ========== Roster Validation ==========


def validate_roster(
    roster: Optional[Sequence[Any]], game_mode: str
) -> ValidationResult:
    """Validate a roster selection for the tournament's game mode.

    An empty roster is valid (the team plays with its default line-up).
    Otherwise exactly ``ROSTER_SIZE[game_mode]`` distinct players are needed.
    """
    if not roster:
        return ValidationResult(is_valid=True, sanitized_value=[])

    required = ROSTER_SIZE.get(game_mode)
    if required is None:
        return _invalid("unknown_game_mode", game_mode=game_mode)

    player_ids = []
    for index, item in enumerate(roster):
        player_id = item.get("player_id") if hasattr(item, "get") else item
        if player_id is None or player_id == "":
            return _invalid("missing_player", index=index)
        player_ids.append(str(player_id))
    if len(player_ids) != required:
        return _invalid(
            "wrong_roster_size",
            game_mode=game_mode,
            required=required,
            selected=len(player_ids),
        )
    if len(set(player_ids)) != len(player_ids):
        return _invalid("duplicate_player", game_mode=game_mode)

    return ValidationResult(is_valid=True, sanitized_value=list(roster))


def validate_roster_strict(roster: Optional[Sequence[Any]], game_mode: str) -> List:
    """Validate a roster and raise if invalid.

    Raises:
        InvalidRosterException: If the roster does not fit the game mode
    """
    result = validate_roster(roster, game_mode)
    if not result.is_valid:
        raise InvalidRosterException(reason=result.error, **result.details)
    return result.sanitized_value
